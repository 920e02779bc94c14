"""
Unit tests for registration payload validation.

Tests cover:
- Accepting a minimal payload and defaulting the role
- Reporting every violation at once
- Rejecting non-object payloads
- Ignoring unknown keys
"""

import pytest

from api.src.models.registration import DEFAULT_ROLE, RegistrationRequest
from api.src.services.errors import InvalidInputError
from api.src.services.validation import validate_registration


def _paths(error: InvalidInputError):
    return [tuple(v.path) for v in error.violations]


class TestValidPayloads:
    """Tests for payloads that pass validation."""

    def test_minimal_payload_is_accepted(self, valid_payload):
        """Test that the five required fields are enough."""
        request = validate_registration(valid_payload)

        assert isinstance(request, RegistrationRequest)
        assert request.username == "alice"
        assert request.first_name == "Alice"
        assert request.last_name == "Smith"

    def test_role_defaults_to_patient(self, valid_payload):
        """Test that an omitted role becomes the default role."""
        request = validate_registration(valid_payload)

        assert request.role == DEFAULT_ROLE == "patient"

    def test_explicit_role_is_kept(self, valid_payload):
        """Test that any supplied role string is accepted as-is."""
        request = validate_registration({**valid_payload, "role": "doctor"})

        assert request.role == "doctor"

    def test_optional_fields_use_camel_case(self, valid_payload):
        """Test that optional fields are read from their camelCase names."""
        payload = {
            **valid_payload,
            "profilePicture": "https://cdn.example.com/alice.png",
            "phone": "+15555550100",
            "preferredContactMethod": "sms",
        }

        request = validate_registration(payload)

        assert request.profile_picture == "https://cdn.example.com/alice.png"
        assert request.phone == "+15555550100"
        assert request.preferred_contact_method == "sms"

    def test_omitted_optional_fields_are_none(self, valid_payload):
        """Test that absent optional keys are left unset."""
        request = validate_registration(valid_payload)

        assert request.profile_picture is None
        assert request.phone is None
        assert request.preferred_contact_method is None

    def test_unknown_keys_are_ignored(self, valid_payload):
        """Test that extra keys do not fail validation."""
        request = validate_registration({**valid_payload, "isAdmin": True})

        assert not hasattr(request, "isAdmin")

    def test_boundary_lengths_are_accepted(self):
        """Test the shortest values that satisfy every constraint."""
        request = validate_registration({
            "username": "abc",
            "password": "123456",
            "email": "a@example.org",
            "firstName": "A",
            "lastName": "B",
        })

        assert request.username == "abc"


class TestInvalidPayloads:
    """Tests for payloads that fail validation."""

    def test_short_username_is_rejected(self):
        """Test that a two-character username fails."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration({
                "username": "ab",
                "password": "secret1",
                "email": "a@b.com",
                "firstName": "A",
                "lastName": "B",
            })

        assert _paths(exc_info.value) == [("username",)]
        assert exc_info.value.violations[0].code == "string_too_short"

    def test_all_violations_are_reported(self):
        """Test that every failing field is reported, not just the first."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration({
                "username": "ab",
                "password": "123",
                "email": "not-an-email",
                "firstName": "",
                "lastName": "",
            })

        paths = set(_paths(exc_info.value))
        assert paths == {
            ("username",),
            ("password",),
            ("email",),
            ("firstName",),
            ("lastName",),
        }

    def test_missing_fields_are_reported(self):
        """Test that each missing required field yields a violation."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration({"username": "alice"})

        violations = exc_info.value.violations
        assert {tuple(v.path) for v in violations} == {
            ("password",),
            ("email",),
            ("firstName",),
            ("lastName",),
        }
        assert all(v.code == "missing" for v in violations)

    def test_wrong_types_are_rejected(self, valid_payload):
        """Test that non-string values are not coerced."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration({**valid_payload, "username": 12345})

        assert _paths(exc_info.value) == [("username",)]

    @pytest.mark.parametrize(
        "field", ["profilePicture", "phone", "preferredContactMethod", "role"]
    )
    def test_null_optional_field_is_rejected(self, valid_payload, field):
        """Test that optional keys may be omitted but not sent as null."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration({**valid_payload, field: None})

        assert _paths(exc_info.value) == [(field,)]
        assert exc_info.value.violations[0].code == "string_type"

    @pytest.mark.parametrize("raw", [None, [], "alice", 42])
    def test_non_object_payload_is_rejected(self, raw):
        """Test that a payload that is not an object fails as a whole."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration(raw)

        assert _paths(exc_info.value) == [()]

    def test_violations_do_not_echo_password(self, valid_payload):
        """Test that violation messages never contain the submitted password."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_registration({**valid_payload, "password": "abc"})

        for violation in exc_info.value.violations:
            assert "abc" not in violation.message
