"""
Account models.

Provides both SQLAlchemy ORM models and Pydantic schemas for:
- The ``accounts`` table (database-level uniqueness on username and email)
- The insert record handed to repositories
- The persisted account record
- The public, password-free account view returned to callers

Uses SQLAlchemy 2.0 declarative syntax. The table declaration is compiled
to DDL for the asyncpg backend at startup.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.src.models.registration import DEFAULT_ROLE


USERNAME_CONSTRAINT = "uq_accounts_username"
EMAIL_CONSTRAINT = "uq_accounts_email"


# ============================================================================
# SQLAlchemy Base
# ============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# ============================================================================
# SQLAlchemy Models
# ============================================================================


class Account(Base):
    """
    Account table.

    Username and email are each unique; the constraints are what make a
    concurrent duplicate registration fail at insert time.
    """
    __tablename__ = "accounts"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        nullable=False
    )
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        server_default=text(f"'{DEFAULT_ROLE}'")
    )
    profile_picture: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_contact_method: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        UniqueConstraint("username", name=USERNAME_CONSTRAINT),
        UniqueConstraint("email", name=EMAIL_CONSTRAINT),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Account(id={self.id}, username='{self.username}', email='{self.email}')>"


# ============================================================================
# Pydantic Records
# ============================================================================


class AccountCreate(BaseModel):
    """Insert record: validated registration fields with the hashed credential."""
    username: str
    email: str
    password_hash: str = Field(..., min_length=1, repr=False)
    first_name: str
    last_name: str
    role: str = DEFAULT_ROLE
    profile_picture: Optional[str] = None
    phone: Optional[str] = None
    preferred_contact_method: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class AccountDB(AccountCreate):
    """Persisted account as returned by a repository."""
    id: UUID
    created_at: datetime

    model_config = ConfigDict(frozen=True, from_attributes=True)


class PublicAccountView(BaseModel):
    """
    Outward-facing account representation.

    Declares no credential field, so a hash can never be serialized
    through it.
    """
    id: UUID
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    profile_picture: Optional[str] = None
    phone: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def from_account(cls, account: AccountDB) -> "PublicAccountView":
        """
        Redact a persisted account into its public view.

        Args:
            account: Persisted account

        Returns:
            Account view without the password field
        """
        return cls.model_validate(account.model_dump(exclude={"password_hash"}))

    def to_response(self) -> dict:
        """Serialize with camelCase keys for JSON responses."""
        return self.model_dump(mode="json", by_alias=True)
