"""
Schema validation for inbound registration payloads.

This is the only place untyped request data is interpreted. Validation is
all-or-nothing and reports every violation at once.
"""

from typing import Any

import structlog
from pydantic import ValidationError

from api.src.models.registration import FieldViolation, RegistrationRequest
from api.src.services.errors import InvalidInputError

logger = structlog.get_logger(__name__)


def validate_registration(raw: Any) -> RegistrationRequest:
    """
    Validate an untyped payload into a registration request.

    Args:
        raw: Decoded JSON body (any type)

    Returns:
        Fully validated request with ``role`` defaulted

    Raises:
        InvalidInputError: With one violation per failed constraint
    """
    try:
        return RegistrationRequest.model_validate(raw)
    except ValidationError as e:
        violations = [
            FieldViolation(
                path=list(error["loc"]),
                message=error["msg"],
                code=error["type"],
            )
            for error in e.errors()
        ]
        logger.info(
            "registration_payload_invalid",
            violation_count=len(violations),
            fields=[".".join(str(part) for part in v.path) for v in violations],
        )
        raise InvalidInputError(violations) from e
