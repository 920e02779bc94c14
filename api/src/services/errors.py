"""
Registration error taxonomy.

Every failure inside the registration pipeline is raised as one of these
types and mapped to a response at the provisioner boundary. Only
``InvalidInputError`` carries caller-visible detail.
"""

from typing import List, Sequence

from api.src.models.registration import FieldViolation


USERNAME_KEY = "username"
EMAIL_KEY = "email"


class RegistrationError(Exception):
    """Base class for registration pipeline errors."""
    pass


class InvalidInputError(RegistrationError):
    """Payload failed schema validation."""

    def __init__(self, violations: Sequence[FieldViolation]):
        self.violations: List[FieldViolation] = list(violations)
        super().__init__(f"{len(self.violations)} field violation(s)")


class DuplicateIdentityError(RegistrationError):
    """An identity key is already taken by another account."""

    key: str = ""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"{self.key} already registered")


class DuplicateUsernameError(DuplicateIdentityError):
    key = USERNAME_KEY


class DuplicateEmailError(DuplicateIdentityError):
    key = EMAIL_KEY


class CredentialHashingError(RegistrationError):
    """The password could not be hashed. Never recoverable by the caller."""
    pass


class PersistenceError(RegistrationError):
    """The account store failed."""
    pass


class AccountConflictError(PersistenceError):
    """
    The store rejected an insert because an identity key is not unique.

    Raised by repositories when the uniqueness check passed but a
    concurrent insert won the race.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"unique constraint violated on {key}")


def duplicate_error_for(key: str, value: str) -> DuplicateIdentityError:
    """
    Build the duplicate error matching a conflicting identity key.

    Args:
        key: Conflicting key name ("username" or "email")
        value: Submitted value for that key

    Returns:
        DuplicateUsernameError or DuplicateEmailError
    """
    if key == USERNAME_KEY:
        return DuplicateUsernameError(value)
    if key == EMAIL_KEY:
        return DuplicateEmailError(value)
    raise ValueError(f"Unknown identity key: {key}")
