"""
Account provisioning service.

Runs the registration pipeline in strict order:
1. Schema validation
2. Username uniqueness
3. Email uniqueness
4. Password hashing (off the event loop)
5. Single account insert
6. Redaction into the public view

Every failure is mapped to a typed outcome at this boundary.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from api.src.models.account import AccountCreate, PublicAccountView
from api.src.repositories.account_repo import AccountRepository
from api.src.services.errors import (
    AccountConflictError,
    CredentialHashingError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidInputError,
    PersistenceError,
    RegistrationError,
    USERNAME_KEY,
    duplicate_error_for,
)
from api.src.services.password_hasher import PasswordHasher
from api.src.services.uniqueness import IdentityUniquenessChecker
from api.src.services.validation import validate_registration
from shared.metrics import RegistrationMetrics, get_metrics

logger = structlog.get_logger(__name__)


class OutcomeKind(str, Enum):
    """Registration outcome kinds."""
    CREATED = "created"
    INVALID_INPUT = "invalid_input"
    DUPLICATE_USERNAME = "duplicate_username"
    DUPLICATE_EMAIL = "duplicate_email"
    FAILED = "failed"


@dataclass(frozen=True)
class RegistrationOutcome:
    """Result of one registration attempt."""
    kind: OutcomeKind
    account: Optional[PublicAccountView] = None
    error: Optional[Exception] = None

    @classmethod
    def created(cls, account: PublicAccountView) -> "RegistrationOutcome":
        return cls(kind=OutcomeKind.CREATED, account=account)

    @classmethod
    def failed(cls, error: Exception) -> "RegistrationOutcome":
        """Classify a pipeline exception into an outcome."""
        if isinstance(error, InvalidInputError):
            kind = OutcomeKind.INVALID_INPUT
        elif isinstance(error, DuplicateUsernameError):
            kind = OutcomeKind.DUPLICATE_USERNAME
        elif isinstance(error, DuplicateEmailError):
            kind = OutcomeKind.DUPLICATE_EMAIL
        else:
            kind = OutcomeKind.FAILED
        return cls(kind=kind, error=error)

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.CREATED


class AccountProvisioner:
    """Orchestrates validation, uniqueness, hashing and persistence."""

    def __init__(
        self,
        account_repo: AccountRepository,
        password_hasher: PasswordHasher,
        metrics: Optional[RegistrationMetrics] = None,
    ):
        """
        Initialize account provisioner.

        Args:
            account_repo: Account storage
            password_hasher: Credential hasher
            metrics: Metrics sink (defaults to the process-wide instance)
        """
        self.account_repo = account_repo
        self.uniqueness = IdentityUniquenessChecker(account_repo)
        self.password_hasher = password_hasher
        self.metrics = metrics or get_metrics()

    async def register_account(self, raw: Any) -> RegistrationOutcome:
        """
        Register an account from an untyped payload.

        Never raises; every failure becomes an outcome.

        Args:
            raw: Decoded JSON request body

        Returns:
            RegistrationOutcome with the public view or the failure
        """
        try:
            account = await self.provision(raw)
            outcome = RegistrationOutcome.created(account)
        except RegistrationError as e:
            outcome = RegistrationOutcome.failed(e)
            if outcome.kind is OutcomeKind.FAILED:
                logger.error("registration_failed", error_type=type(e).__name__, exc_info=True)
            else:
                logger.info("registration_rejected", outcome=outcome.kind.value)
        except Exception as e:
            logger.error("registration_failed", error_type=type(e).__name__, exc_info=True)
            outcome = RegistrationOutcome.failed(e)

        self.metrics.record_outcome(outcome.kind.value)
        return outcome

    async def provision(self, raw: Any) -> PublicAccountView:
        """
        Run the registration pipeline.

        Args:
            raw: Decoded JSON request body

        Returns:
            Public view of the created account

        Raises:
            InvalidInputError: If the payload fails validation
            DuplicateUsernameError: If the username is taken
            DuplicateEmailError: If the email is taken
            CredentialHashingError: If hashing fails
            PersistenceError: If the store fails
        """
        request = validate_registration(raw)

        if await self.uniqueness.find_by_username(request.username) is not None:
            raise DuplicateUsernameError(request.username)

        if await self.uniqueness.find_by_email(request.email) is not None:
            raise DuplicateEmailError(request.email)

        password_hash = await self._hash_password(request.password)

        record = AccountCreate(
            username=request.username,
            email=request.email,
            password_hash=password_hash,
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role,
            profile_picture=request.profile_picture,
            phone=request.phone,
            preferred_contact_method=request.preferred_contact_method,
        )

        try:
            account = await self.account_repo.create_account(record)
        except AccountConflictError as e:
            value = request.username if e.key == USERNAME_KEY else request.email
            raise duplicate_error_for(e.key, value) from e
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError("account insert failed") from e

        logger.info(
            "account_registered",
            account_id=str(account.id),
            username=account.username,
            role=account.role,
        )
        return PublicAccountView.from_account(account)

    async def _hash_password(self, password: str) -> str:
        start = time.perf_counter()
        try:
            return await asyncio.to_thread(self.password_hasher.hash, password)
        except CredentialHashingError:
            raise
        except Exception as e:
            raise CredentialHashingError("password hashing failed") from e
        finally:
            self.metrics.password_hash_duration.observe(time.perf_counter() - start)
