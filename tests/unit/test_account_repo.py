"""
Unit tests for account repositories.

Tests cover:
- In-memory insert, lookup and uniqueness enforcement
- Accounts table DDL compiled from the SQLAlchemy model
- Mapping of asyncpg unique violations to conflict keys
"""

import asyncpg
import pytest

from api.src.models.account import AccountCreate, EMAIL_CONSTRAINT, USERNAME_CONSTRAINT
from api.src.repositories.account_repo import (
    InMemoryAccountRepository,
    _conflict_key,
    accounts_table_ddl,
)
from api.src.services.errors import AccountConflictError, EMAIL_KEY, USERNAME_KEY


def _record(username: str = "alice", email: str = "alice@example.com") -> AccountCreate:
    return AccountCreate(
        username=username,
        email=email,
        password_hash="$2b$04$abcdefghijklmnopqrstuu0123456789abcdefghijklmnopqrstu",
        first_name="Alice",
        last_name="Smith",
    )


class TestInMemoryAccountRepository:
    """Tests for the process-local store."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamp(self):
        repo = InMemoryAccountRepository()

        account = await repo.create_account(_record())

        assert account.id is not None
        assert account.created_at.tzinfo is not None
        assert account.role == "patient"
        assert repo.count() == 1

    @pytest.mark.asyncio
    async def test_lookup_by_username_and_email(self):
        repo = InMemoryAccountRepository()
        created = await repo.create_account(_record())

        assert await repo.get_account_by_username("alice") == created
        assert await repo.get_account_by_email("alice@example.com") == created
        assert await repo.get_account_by_username("bob") is None
        assert await repo.get_account_by_email("bob@example.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self):
        """Test that a second insert with the same username is refused."""
        repo = InMemoryAccountRepository()
        await repo.create_account(_record())

        with pytest.raises(AccountConflictError) as exc_info:
            await repo.create_account(_record(email="other@example.com"))

        assert exc_info.value.key == USERNAME_KEY
        assert repo.count() == 1

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self):
        """Test that a second insert with the same email is refused."""
        repo = InMemoryAccountRepository()
        await repo.create_account(_record())

        with pytest.raises(AccountConflictError) as exc_info:
            await repo.create_account(_record(username="alice2"))

        assert exc_info.value.key == EMAIL_KEY
        assert repo.count() == 1

    @pytest.mark.asyncio
    async def test_ping(self):
        assert await InMemoryAccountRepository().ping() is True


class TestAccountsTableDDL:
    """Tests for the DDL compiled from the ORM model."""

    def test_ddl_is_idempotent_create(self):
        ddl = accounts_table_ddl()

        assert "CREATE TABLE IF NOT EXISTS accounts" in ddl

    def test_ddl_declares_unique_constraints(self):
        """Test that both identity keys are unique at the database level."""
        ddl = accounts_table_ddl()

        assert USERNAME_CONSTRAINT in ddl
        assert EMAIL_CONSTRAINT in ddl
        assert "UNIQUE (username)" in ddl
        assert "UNIQUE (email)" in ddl

    def test_ddl_defaults(self):
        ddl = accounts_table_ddl()

        assert "gen_random_uuid()" in ddl
        assert "'patient'" in ddl
        assert "CURRENT_TIMESTAMP" in ddl


class TestConflictKey:
    """Tests for resolving which key a unique violation hit."""

    def test_resolves_from_constraint_name(self):
        error = asyncpg.UniqueViolationError("duplicate key value")
        error.constraint_name = EMAIL_CONSTRAINT

        assert _conflict_key(error) == EMAIL_KEY

    def test_resolves_username_constraint(self):
        error = asyncpg.UniqueViolationError("duplicate key value")
        error.constraint_name = USERNAME_CONSTRAINT

        assert _conflict_key(error) == USERNAME_KEY

    def test_message_text_is_not_used(self):
        """Test that key names appearing only in the message are not trusted."""
        error = asyncpg.UniqueViolationError(
            'duplicate key value violates unique constraint "accounts_backup_email_idx"'
        )

        assert _conflict_key(error) is None

    def test_unknown_constraint(self):
        error = asyncpg.UniqueViolationError('violates unique constraint "accounts_pkey"')
        error.constraint_name = "accounts_pkey"

        assert _conflict_key(error) is None
