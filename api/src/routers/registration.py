"""
Registration router.

Provides the public account registration endpoint. The request body is
read as untyped JSON and handed to the provisioner unchanged; the outcome
is translated to a status code and body by ``render_outcome``.
"""

import json
import structlog
from typing import Any, Dict, Optional, Tuple
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from api.src.dependencies import get_correlation_id, get_provisioner
from api.src.models.registration import RegistrationRequest
from api.src.services.provisioner import (
    AccountProvisioner,
    OutcomeKind,
    RegistrationOutcome,
)

logger = structlog.get_logger(__name__)


MESSAGE_INVALID_DATA = "Invalid data"
MESSAGE_DUPLICATE_USERNAME = "Username already exists"
MESSAGE_DUPLICATE_EMAIL = (
    "Email address is already registered. "
    "Please use a different email or try logging in."
)
MESSAGE_REGISTRATION_FAILED = "Registration failed"


auth_router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


def render_outcome(outcome: RegistrationOutcome) -> Tuple[int, Dict[str, Any]]:
    """
    Translate a registration outcome into an HTTP status and body.

    Args:
        outcome: Registration outcome

    Returns:
        Tuple of (status code, JSON-serializable body)
    """
    if outcome.kind is OutcomeKind.CREATED:
        return status.HTTP_201_CREATED, {"user": outcome.account.to_response()}

    if outcome.kind is OutcomeKind.INVALID_INPUT:
        violations = getattr(outcome.error, "violations", [])
        return status.HTTP_400_BAD_REQUEST, {
            "message": MESSAGE_INVALID_DATA,
            "errors": [v.model_dump(mode="json") for v in violations],
        }

    if outcome.kind is OutcomeKind.DUPLICATE_USERNAME:
        return status.HTTP_400_BAD_REQUEST, {"message": MESSAGE_DUPLICATE_USERNAME}

    if outcome.kind is OutcomeKind.DUPLICATE_EMAIL:
        return status.HTTP_400_BAD_REQUEST, {"message": MESSAGE_DUPLICATE_EMAIL}

    return status.HTTP_500_INTERNAL_SERVER_ERROR, {"message": MESSAGE_REGISTRATION_FAILED}


@auth_router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register Account",
    description="""
    Create a new account.

    **Authentication:** Not required (public endpoint)

    **Success Response (201):** `{"user": {...}}` without any password field

    **Error Responses:**
    - 400: Invalid data, username already exists, or email already registered
    - 500: Registration failed
    """,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": RegistrationRequest.model_json_schema(by_alias=True)
                }
            },
        }
    },
)
async def register(
    request: Request,
    provisioner: AccountProvisioner = Depends(get_provisioner),
    correlation_id: Optional[str] = Depends(get_correlation_id),
) -> JSONResponse:
    """
    Register a new account from the raw JSON body.

    Args:
        request: HTTP request
        provisioner: Account provisioner
        correlation_id: Request correlation ID

    Returns:
        JSON response shaped by ``render_outcome``
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        # An undecodable body never reaches validation; it is a generic failure
        logger.warning("registration_body_malformed", correlation_id=correlation_id)
        outcome = RegistrationOutcome.failed(e)
        provisioner.metrics.record_outcome(outcome.kind.value)
    else:
        outcome = await provisioner.register_account(payload)

    status_code, body = render_outcome(outcome)

    logger.info(
        "registration_handled",
        outcome=outcome.kind.value,
        status_code=status_code,
        correlation_id=correlation_id,
    )
    return JSONResponse(status_code=status_code, content=body)
