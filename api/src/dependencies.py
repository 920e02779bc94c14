"""
FastAPI dependency injection for storage and registration services.

Provides injectable dependencies for:
- Database connections (asyncpg pool)
- The account repository (PostgreSQL or in-memory)
- Password hashing
- The account provisioner

All dependencies use FastAPI's dependency injection system and can be
replaced through ``app.dependency_overrides`` in tests.
"""

import asyncpg
import structlog
from typing import Optional
from functools import lru_cache
from fastapi import Depends, Request

from api.src.config import get_settings, Settings
from api.src.repositories.account_repo import (
    AccountRepository,
    InMemoryAccountRepository,
    PostgresAccountRepository,
)
from api.src.services.password_hasher import PasswordHasher
from api.src.services.provisioner import AccountProvisioner

logger = structlog.get_logger(__name__)


# ============================================================================
# DATABASE CONNECTION POOL
# ============================================================================

_pool: Optional[asyncpg.Pool] = None
_account_repo: Optional[AccountRepository] = None


async def init_db_pool() -> asyncpg.Pool:
    """
    Initialize database connection pool.

    Should be called during application startup.

    Returns:
        asyncpg connection pool
    """
    global _pool

    if _pool is not None:
        return _pool

    settings = get_settings()

    try:
        _pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=max(1, settings.database_pool_size // 2),
            max_size=settings.database_pool_size,
            command_timeout=settings.database_pool_timeout
        )

        logger.info(
            "database_pool_initialized",
            pool_size=settings.database_pool_size,
            database=settings.database_url.split("@")[-1]
        )

        return _pool

    except Exception as e:
        logger.error("database_pool_init_failed", error=str(e))
        raise


async def close_db_pool():
    """
    Close database connection pool.

    Should be called during application shutdown.
    """
    global _pool

    if _pool is not None:
        await _pool.close()
        logger.info("database_pool_closed")
        _pool = None


# ============================================================================
# REPOSITORY DEPENDENCIES
# ============================================================================


async def init_account_repository(settings: Settings) -> AccountRepository:
    """
    Create the account repository for the configured backend.

    Args:
        settings: Application settings

    Returns:
        Ready-to-use account repository
    """
    global _account_repo

    if settings.uses_postgres:
        repo = PostgresAccountRepository(await init_db_pool())
        await repo.ensure_schema()
        _account_repo = repo
    else:
        _account_repo = InMemoryAccountRepository()

    logger.info("account_repository_initialized", backend=settings.storage_backend)
    return _account_repo


async def close_account_repository():
    """Release repository resources on shutdown."""
    global _account_repo

    _account_repo = None
    await close_db_pool()


def get_account_repository() -> AccountRepository:
    """
    Get the account repository.

    Returns:
        Account repository

    Raises:
        RuntimeError: If the repository was not initialized at startup
    """
    if _account_repo is None:
        logger.error("account_repository_not_initialized")
        raise RuntimeError(
            "Account repository not initialized. Call init_account_repository() during startup."
        )
    return _account_repo


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    """
    Get password hasher (cached).

    Returns:
        Password hasher configured from settings
    """
    return PasswordHasher(rounds=get_settings().password_bcrypt_rounds)


def get_provisioner(
    account_repo: AccountRepository = Depends(get_account_repository),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> AccountProvisioner:
    """
    Get account provisioner bound to the current repository.

    Args:
        account_repo: Account repository
        password_hasher: Password hasher

    Returns:
        Account provisioner
    """
    return AccountProvisioner(account_repo, password_hasher)


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


async def get_correlation_id(request: Request) -> Optional[str]:
    """
    Get correlation ID from request.

    Prefers the value assigned by the request logging middleware and
    falls back to the X-Correlation-ID header.

    Args:
        request: HTTP request

    Returns:
        Correlation ID or None
    """
    return getattr(request.state, "correlation_id", None) or request.headers.get("X-Correlation-ID")
