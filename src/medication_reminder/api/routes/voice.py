"""
Twilio voice webhooks.

Each handler turns the form body into a CallEvent, asks the call-flow engine
for the next action and answers with TwiML. Twilio needs well-formed TwiML
to keep a live call going, so these handlers always return 200: any failure
is answered with the technical-difficulties message.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from medication_reminder.api.dependencies import AppContext, get_context
from medication_reminder.models.call import CallEvent, EventKind
from medication_reminder.services.call_flow import DEGRADED_ACTION
from medication_reminder.services.telephony import TelephonyGatewayError
from medication_reminder.services.twiml import render_twiml
from medication_reminder.utils.metrics import DEGRADED_RESPONSES, SMS_FALLBACKS, WEBHOOK_EVENTS

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _answer(request: Request, context: AppContext, event_kind: EventKind) -> Response:
    """Decide and render the TwiML for one voice webhook."""
    WEBHOOK_EVENTS.labels(event_kind=event_kind.value).inc()
    call_sid = None

    try:
        form = await request.form()
        call_sid = form.get("CallSid")
        event = CallEvent.from_webhook(event_kind, form)
        action = context.engine.decide(event)
    except Exception as e:
        logger.error(
            "Error handling voice webhook",
            event_kind=event_kind.value,
            call_sid=call_sid,
            error=str(e),
            exc_info=True,
        )
        action = DEGRADED_ACTION

    if action is DEGRADED_ACTION:
        DEGRADED_RESPONSES.inc()

    twiml = render_twiml(
        action,
        voice=context.settings.voice,
        language=context.settings.speech_language,
        routes=context.voice_routes,
    )
    logger.debug("Generated TwiML response", call_sid=call_sid, twiml=twiml)

    return Response(content=twiml, media_type="application/xml")


@router.post("/outbound")
async def outbound_call(request: Request, context: AppContext = Depends(get_context)):
    """TwiML for an outbound call once it connects: voicemail or reminder."""
    return await _answer(request, context, EventKind.OUTBOUND_INITIATED)


@router.post("/response")
async def speech_response(request: Request, context: AppContext = Depends(get_context)):
    """Thank the patient after their spoken answer."""
    return await _answer(request, context, EventKind.SPEECH_CAPTURED)


@router.post("/no-response")
async def no_response(request: Request, context: AppContext = Depends(get_context)):
    """The patient said nothing before the gather timed out."""
    return await _answer(request, context, EventKind.NO_RESPONSE_TIMEOUT)


@router.post("/inbound")
async def inbound_call(request: Request, context: AppContext = Depends(get_context)):
    """A patient called the service number."""
    return await _answer(request, context, EventKind.INBOUND_RECEIVED)


@router.post("/status")
async def call_status_callback(request: Request, context: AppContext = Depends(get_context)):
    """
    Handle Twilio status callbacks.

    Unreached calls (no-answer, busy, failed, canceled) get the SMS fallback.
    Always acknowledged with 200 so Twilio does not retry the callback.
    """
    WEBHOOK_EVENTS.labels(event_kind=EventKind.STATUS_CHANGED.value).inc()
    call_sid = None

    try:
        form = await request.form()
        call_sid = form.get("CallSid")
        event = CallEvent.from_webhook(EventKind.STATUS_CHANGED, form)

        logger.info(
            "Call status update",
            call_sid=call_sid,
            status=event.call_status.value if event.call_status else None,
            to=event.destination_number,
            recording_url=event.recording_url,
        )

        action = context.engine.decide(event)

        if action.side_effect is not None:
            sms = action.side_effect
            logger.info("Sending SMS fallback", call_sid=call_sid, to=sms.to)
            message_sid = await context.gateway.send_sms(sms.to, sms.body)
            SMS_FALLBACKS.labels(result="success").inc()
            logger.info("SMS fallback sent", call_sid=call_sid, message_sid=message_sid)

    except TelephonyGatewayError as e:
        SMS_FALLBACKS.labels(result="error").inc()
        logger.error("Failed to send SMS fallback", call_sid=call_sid, error=e.detail, code=e.code)
    except Exception as e:
        logger.error("Error handling call status", call_sid=call_sid, error=str(e), exc_info=True)

    return PlainTextResponse("OK")
