"""
Registration request models.

Provides Pydantic schemas for:
- The inbound registration payload (camelCase on the wire)
- Field-level validation violations reported back to callers

The constraint set lives on the model fields; the validator in
``api.src.services.validation`` is the only code that turns untyped
input into a ``RegistrationRequest``.
"""

from typing import List, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field


DEFAULT_ROLE = "patient"


# ============================================================================
# Pydantic Request Models
# ============================================================================


class RegistrationRequest(BaseModel):
    """Registration request schema."""
    username: str = Field(
        ...,
        min_length=3,
        description="Username (at least 3 characters)"
    )
    password: str = Field(
        ...,
        min_length=6,
        description="Plaintext password (at least 6 characters)"
    )
    email: EmailStr = Field(
        ...,
        description="Email address"
    )
    first_name: str = Field(
        ...,
        alias="firstName",
        min_length=1,
        description="First name"
    )
    last_name: str = Field(
        ...,
        alias="lastName",
        min_length=1,
        description="Last name"
    )
    role: str = Field(
        default=DEFAULT_ROLE,
        description="Account role"
    )
    # Optional keys may be omitted but not sent as null; the unvalidated
    # None default only marks absence
    profile_picture: str = Field(
        None,
        alias="profilePicture",
        description="Profile picture URL"
    )
    phone: str = Field(
        None,
        description="Phone number"
    )
    preferred_contact_method: str = Field(
        None,
        alias="preferredContactMethod",
        description="Preferred contact method"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        json_schema_extra={
            "example": {
                "username": "alice",
                "password": "secret1",
                "email": "alice@example.com",
                "firstName": "Alice",
                "lastName": "Smith",
                "phone": "+15555550100",
                "preferredContactMethod": "email"
            }
        },
    )


# ============================================================================
# Validation Errors
# ============================================================================


class FieldViolation(BaseModel):
    """A single constraint violation on the registration payload."""
    path: List[Union[str, int]] = Field(
        default_factory=list,
        description="Location of the offending field (empty for the whole payload)"
    )
    message: str = Field(
        ...,
        description="Human-readable reason"
    )
    code: str = Field(
        ...,
        description="Machine-readable violation code"
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "path": ["username"],
                "message": "String should have at least 3 characters",
                "code": "string_too_short"
            }
        },
    )
