"""
Password hashing service.

Provides:
- One-way, salted password hashing (passlib + bcrypt)
- Verification against stored hashes for the login flow
"""

from typing import Optional

import structlog
from passlib.context import CryptContext

from api.src.config import get_settings
from api.src.services.errors import CredentialHashingError

logger = structlog.get_logger(__name__)


class PasswordHasher:
    """Bcrypt password hasher with a fixed work factor."""

    def __init__(self, rounds: Optional[int] = None):
        """
        Initialize password hasher.

        Args:
            rounds: BCrypt work factor (defaults to settings)
        """
        if rounds is None:
            rounds = get_settings().password_bcrypt_rounds

        self.rounds = rounds
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password

        Raises:
            CredentialHashingError: If hashing fails or yields an unusable hash
        """
        try:
            hashed = self.pwd_context.hash(password)
        except Exception as e:
            logger.error("password_hash_failed", error=str(e), exc_info=True)
            raise CredentialHashingError("password hashing failed") from e

        if not hashed or hashed == password or self.pwd_context.identify(hashed) != "bcrypt":
            logger.error("password_hash_unusable")
            raise CredentialHashingError("password hashing produced an unusable hash")

        logger.debug("password_hashed", rounds=self.rounds)
        return hashed

    def verify(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise
        """
        try:
            verified = self.pwd_context.verify(password, hashed_password)
            logger.debug("password_verified", verified=verified)
            return verified
        except Exception as e:
            logger.error("password_verify_failed", error=str(e))
            return False
