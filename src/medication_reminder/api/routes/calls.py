"""Call management endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import ValidationError

from medication_reminder.api.dependencies import AppContext, get_context
from medication_reminder.models.call import (
    CallLogResponse,
    InitiateCallRequest,
    InitiateCallResponse,
    OutboundCallRequest,
)
from medication_reminder.services.phone import E164_ERROR_MESSAGE, is_valid_e164
from medication_reminder.services.telephony import TelephonyGatewayError
from medication_reminder.utils.metrics import CALLS_PLACED

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _read_call_request(request: Request) -> InitiateCallRequest:
    """Parse a JSON or form-encoded body; anything unreadable carries no number."""
    try:
        if request.headers.get("content-type", "").startswith("application/json"):
            body = await request.json()
        else:
            body = dict(await request.form())
        return InitiateCallRequest.model_validate(body)
    except (ValueError, ValidationError):
        return InitiateCallRequest()


@router.post("/call", response_model=InitiateCallResponse)
async def initiate_call(
    request: Request,
    context: AppContext = Depends(get_context),
):
    """
    Place an outbound medication reminder call.

    The number is validated before Twilio is contacted; an invalid number is
    rejected with 400 and never reaches the gateway.
    """
    call_request = await _read_call_request(request)
    destination = call_request.destination_number

    if not is_valid_e164(destination):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=E164_ERROR_MESSAGE,
        )

    logger.info("Initiating outbound call", to=destination)

    try:
        placed = await context.gateway.place_call(OutboundCallRequest(destination_number=destination))
    except TelephonyGatewayError as e:
        CALLS_PLACED.labels(result="error").inc()
        logger.error("Failed to initiate call", to=destination, error=e.detail, code=e.code)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to initiate call: {e.detail}",
        )

    CALLS_PLACED.labels(result="success").inc()
    logger.info("Call placed", call_sid=placed.call_sid, to=destination, status=placed.status)

    return InitiateCallResponse(call_id=placed.call_sid, recording_url=placed.recording_url)


@router.get("/logs", response_model=CallLogResponse)
async def get_call_logs(
    call_status: str | None = Query(default=None, alias="status"),
    context: AppContext = Depends(get_context),
):
    """List recent calls from Twilio, optionally filtered by status."""
    try:
        calls = await context.gateway.list_calls(
            status=call_status,
            limit=context.settings.call_log_limit,
        )
    except TelephonyGatewayError as e:
        logger.error("Failed to fetch call logs", status=call_status, error=e.detail)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch call logs: {e.detail}",
        )

    return CallLogResponse(count=len(calls), calls=calls)
