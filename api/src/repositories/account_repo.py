"""
Account repositories.

Provides async lookup-by-key and insert operations for accounts:
- ``PostgresAccountRepository``: asyncpg with PostgreSQL unique constraints
- ``InMemoryAccountRepository``: process-local store for development and tests

Both surface a uniqueness violation at insert time as ``AccountConflictError``
and any other storage failure as ``PersistenceError``.
"""

import asyncpg
import structlog
from typing import Dict, Optional, Protocol
from uuid import uuid4
from datetime import datetime, timezone
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from api.src.models.account import (
    Account,
    AccountCreate,
    AccountDB,
    EMAIL_CONSTRAINT,
    USERNAME_CONSTRAINT,
)
from api.src.services.errors import (
    AccountConflictError,
    EMAIL_KEY,
    PersistenceError,
    USERNAME_KEY,
)

logger = structlog.get_logger(__name__)


ACCOUNT_COLUMNS = (
    "id, username, email, password_hash, first_name, last_name, role, "
    "profile_picture, phone, preferred_contact_method, created_at"
)

CONSTRAINT_KEYS = {
    USERNAME_CONSTRAINT: USERNAME_KEY,
    EMAIL_CONSTRAINT: EMAIL_KEY,
}


class AccountRepository(Protocol):
    """Storage contract used by the registration pipeline."""

    async def get_account_by_username(self, username: str) -> Optional[AccountDB]: ...

    async def get_account_by_email(self, email: str) -> Optional[AccountDB]: ...

    async def create_account(self, record: AccountCreate) -> AccountDB: ...

    async def ping(self) -> bool: ...


def accounts_table_ddl() -> str:
    """
    Render ``CREATE TABLE IF NOT EXISTS`` for the accounts table.

    Returns:
        PostgreSQL DDL statement
    """
    statement = CreateTable(Account.__table__, if_not_exists=True)
    return str(statement.compile(dialect=postgresql.dialect()))


def _conflict_key(error: asyncpg.UniqueViolationError) -> Optional[str]:
    """Resolve which identity key a unique violation refers to.

    Only the named account constraints count; any other unique violation
    is not an identity conflict.
    """
    return CONSTRAINT_KEYS.get(getattr(error, "constraint_name", None))


class PostgresAccountRepository:
    """Repository for account database operations."""

    def __init__(self, pool: asyncpg.Pool):
        """
        Initialize account repository.

        Args:
            pool: asyncpg connection pool
        """
        self.pool = pool

    async def ensure_schema(self) -> None:
        """Create the accounts table and its constraints if missing."""
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(accounts_table_ddl())
            logger.info("account_schema_ready")
        except Exception as e:
            logger.error("account_schema_failed", error=str(e))
            raise

    async def create_account(self, record: AccountCreate) -> AccountDB:
        """
        Insert a new account.

        Args:
            record: Validated account fields with hashed password

        Returns:
            Persisted account with id and creation timestamp

        Raises:
            AccountConflictError: If username or email already exists
            PersistenceError: On any other database error
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO accounts (
                        username, email, password_hash, first_name, last_name,
                        role, profile_picture, phone, preferred_contact_method
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                    RETURNING {ACCOUNT_COLUMNS}
                    """,
                    record.username,
                    record.email,
                    record.password_hash,
                    record.first_name,
                    record.last_name,
                    record.role,
                    record.profile_picture,
                    record.phone,
                    record.preferred_contact_method,
                )
        except asyncpg.UniqueViolationError as e:
            key = _conflict_key(e)
            if key is None:
                logger.error("account_create_failed", error=str(e), username=record.username)
                raise PersistenceError("account insert failed") from e
            logger.warning("account_insert_conflict", key=key, username=record.username)
            raise AccountConflictError(key) from e
        except Exception as e:
            logger.error("account_create_failed", error=str(e), username=record.username)
            raise PersistenceError("account insert failed") from e

        logger.info("account_created", account_id=str(row["id"]), username=record.username)
        return AccountDB(**dict(row))

    async def get_account_by_username(self, username: str) -> Optional[AccountDB]:
        """
        Get account by username.

        Args:
            username: Username

        Returns:
            Account or None if not found
        """
        return await self._fetch_one("username", username)

    async def get_account_by_email(self, email: str) -> Optional[AccountDB]:
        """
        Get account by email.

        Args:
            email: Email address

        Returns:
            Account or None if not found
        """
        return await self._fetch_one("email", email)

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            return False

    async def _fetch_one(self, column: str, value: str) -> Optional[AccountDB]:
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {ACCOUNT_COLUMNS}
                    FROM accounts
                    WHERE {column} = $1
                    """,
                    value
                )
        except Exception as e:
            logger.error("account_lookup_failed", error=str(e), column=column)
            raise PersistenceError(f"account lookup by {column} failed") from e

        if not row:
            logger.debug("account_not_found", column=column)
            return None

        return AccountDB(**dict(row))


class InMemoryAccountRepository:
    """
    Process-local account store.

    Inserts check both identity indexes and commit without yielding to the
    event loop, so two coroutines can never both insert the same key.
    """

    def __init__(self):
        self._accounts: Dict[str, AccountDB] = {}
        self._by_username: Dict[str, str] = {}
        self._by_email: Dict[str, str] = {}

    async def create_account(self, record: AccountCreate) -> AccountDB:
        """
        Insert a new account.

        Args:
            record: Validated account fields with hashed password

        Returns:
            Persisted account with id and creation timestamp

        Raises:
            AccountConflictError: If username or email already exists
        """
        if record.username in self._by_username:
            logger.warning("account_insert_conflict", key=USERNAME_KEY, username=record.username)
            raise AccountConflictError(USERNAME_KEY)
        if record.email in self._by_email:
            logger.warning("account_insert_conflict", key=EMAIL_KEY, username=record.username)
            raise AccountConflictError(EMAIL_KEY)

        account = AccountDB(
            **record.model_dump(),
            id=uuid4(),
            created_at=datetime.now(timezone.utc),
        )
        account_id = str(account.id)
        self._accounts[account_id] = account
        self._by_username[account.username] = account_id
        self._by_email[account.email] = account_id

        logger.info("account_created", account_id=account_id, username=account.username)
        return account

    async def get_account_by_username(self, username: str) -> Optional[AccountDB]:
        account_id = self._by_username.get(username)
        return self._accounts[account_id] if account_id else None

    async def get_account_by_email(self, email: str) -> Optional[AccountDB]:
        account_id = self._by_email.get(email)
        return self._accounts[account_id] if account_id else None

    async def ping(self) -> bool:
        return True

    def count(self) -> int:
        """Number of stored accounts."""
        return len(self._accounts)
