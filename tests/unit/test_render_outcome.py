"""
Unit tests for mapping registration outcomes to HTTP responses.
"""

from datetime import datetime, timezone
from uuid import uuid4

from api.src.models.account import PublicAccountView
from api.src.models.registration import FieldViolation
from api.src.routers.registration import (
    MESSAGE_DUPLICATE_EMAIL,
    MESSAGE_DUPLICATE_USERNAME,
    MESSAGE_INVALID_DATA,
    MESSAGE_REGISTRATION_FAILED,
    render_outcome,
)
from api.src.services.errors import (
    CredentialHashingError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidInputError,
    PersistenceError,
)
from api.src.services.provisioner import RegistrationOutcome


def _account() -> PublicAccountView:
    return PublicAccountView(
        id=uuid4(),
        username="alice",
        email="alice@example.com",
        first_name="Alice",
        last_name="Smith",
        role="patient",
        created_at=datetime.now(timezone.utc),
    )


class TestRenderOutcome:
    """Tests for the outcome to response mapping."""

    def test_created(self):
        status_code, body = render_outcome(RegistrationOutcome.created(_account()))

        assert status_code == 201
        assert body["user"]["username"] == "alice"
        assert body["user"]["firstName"] == "Alice"
        assert "password" not in body["user"]

    def test_invalid_input_lists_violations(self):
        violation = FieldViolation(
            path=["username"],
            message="String should have at least 3 characters",
            code="string_too_short",
        )
        outcome = RegistrationOutcome.failed(InvalidInputError([violation]))

        status_code, body = render_outcome(outcome)

        assert status_code == 400
        assert body == {
            "message": MESSAGE_INVALID_DATA,
            "errors": [
                {
                    "path": ["username"],
                    "message": "String should have at least 3 characters",
                    "code": "string_too_short",
                }
            ],
        }

    def test_duplicate_username(self):
        outcome = RegistrationOutcome.failed(DuplicateUsernameError("alice"))

        assert render_outcome(outcome) == (400, {"message": MESSAGE_DUPLICATE_USERNAME})

    def test_duplicate_email(self):
        outcome = RegistrationOutcome.failed(DuplicateEmailError("alice@example.com"))

        assert render_outcome(outcome) == (400, {"message": MESSAGE_DUPLICATE_EMAIL})

    def test_internal_failures_are_generic(self):
        """Test that internal error details never reach the body."""
        for error in (
            CredentialHashingError("bcrypt exploded"),
            PersistenceError("relation accounts does not exist"),
            RuntimeError("boom"),
        ):
            status_code, body = render_outcome(RegistrationOutcome.failed(error))

            assert status_code == 500
            assert body == {"message": MESSAGE_REGISTRATION_FAILED}
