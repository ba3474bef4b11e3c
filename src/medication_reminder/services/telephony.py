"""Twilio telephony gateway: placing calls, listing call logs and sending SMS."""

import asyncio
from typing import Any, Protocol

import structlog
from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from medication_reminder.config import Settings
from medication_reminder.models.call import CallRecord, OutboundCallRequest, PlacedCall

logger = structlog.get_logger(__name__)

TWILIO_API_HOST = "https://api.twilio.com"

STATUS_CALLBACK_EVENTS = ["initiated", "ringing", "answered", "completed"]


class TelephonyGatewayError(Exception):
    """A Twilio request failed."""

    def __init__(self, message: str, detail: str | None = None, code: int | None = None) -> None:
        super().__init__(message)
        self.detail = detail or message
        self.code = code


class TelephonyGateway(Protocol):
    """What the API needs from the telephony provider."""

    async def place_call(self, request: OutboundCallRequest) -> PlacedCall: ...

    async def list_calls(self, status: str | None = None, limit: int = 50) -> list[CallRecord]: ...

    async def send_sms(self, to: str, body: str) -> str: ...


def _wrap_error(action: str, error: Exception) -> TelephonyGatewayError:
    if isinstance(error, TwilioRestException):
        return TelephonyGatewayError(f"Failed to {action}", detail=error.msg, code=error.code)
    return TelephonyGatewayError(f"Failed to {action}", detail=str(error))


class TwilioGateway:
    """
    Telephony gateway backed by the Twilio REST client.

    The Twilio SDK is synchronous, so each request runs in a worker thread.
    Failures are raised once as TelephonyGatewayError; nothing is retried.
    """

    def __init__(self, client: Client, account_sid: str, from_number: str, base_url: str) -> None:
        self.client = client
        self.account_sid = account_sid
        self.from_number = from_number
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioGateway":
        """Create the gateway and its Twilio client from settings."""
        logger.info("Creating Twilio client", from_number=settings.twilio_phone_number)
        try:
            client = Client(settings.twilio_account_sid, settings.twilio_auth_token)
        except TwilioException as e:
            raise TelephonyGatewayError("Failed to initialize Twilio client", detail=str(e)) from e
        return cls(
            client=client,
            account_sid=settings.twilio_account_sid,
            from_number=settings.twilio_phone_number,
            base_url=settings.base_url,
        )

    def recording_url(self, call_sid: str) -> str:
        """Recordings listing URL for a call."""
        return f"{TWILIO_API_HOST}/2010-04-01/Accounts/{self.account_sid}/Calls/{call_sid}/Recordings"

    async def place_call(self, request: OutboundCallRequest) -> PlacedCall:
        """
        Place an outbound reminder call.

        Twilio fetches /voice/outbound once the call connects, runs answering
        machine detection, records the call and reports progress to
        /voice/status.
        """
        to = request.destination_number

        def _create_call():
            return self.client.calls.create(
                to=to,
                from_=self.from_number,
                url=f"{self.base_url}/voice/outbound",
                status_callback=f"{self.base_url}/voice/status",
                status_callback_event=STATUS_CALLBACK_EVENTS,
                status_callback_method="POST",
                machine_detection="DetectMessageEnd",
                async_amd="true",
                record=True,
            )

        try:
            call = await asyncio.to_thread(_create_call)
        except Exception as e:
            logger.error("Failed to initiate call", to=to, error=str(e))
            raise _wrap_error("initiate call", e) from e

        logger.info("Call initiated successfully", call_sid=call.sid, to=to, status=call.status)

        return PlacedCall(
            call_sid=call.sid,
            status=str(call.status) if call.status is not None else None,
            recording_url=self.recording_url(call.sid),
        )

    async def list_calls(self, status: str | None = None, limit: int = 50) -> list[CallRecord]:
        """Most recent calls, optionally filtered by status."""
        filters: dict[str, Any] = {"limit": limit}
        if status:
            filters["status"] = status

        try:
            calls = await asyncio.to_thread(self.client.calls.list, **filters)
        except Exception as e:
            logger.error("Failed to fetch call logs", status=status, error=str(e))
            raise _wrap_error("fetch call logs", e) from e

        return [self._to_record(call) for call in calls]

    async def send_sms(self, to: str, body: str) -> str:
        """Send an SMS from the configured number and return the message SID."""

        def _create_message():
            return self.client.messages.create(body=body, from_=self.from_number, to=to)

        try:
            message = await asyncio.to_thread(_create_message)
        except Exception as e:
            logger.error("Failed to send SMS", to=to, error=str(e))
            raise _wrap_error("send SMS", e) from e

        logger.info("SMS sent", to=to, message_sid=message.sid)
        return message.sid

    def _to_record(self, call: Any) -> CallRecord:
        recordings = (call.subresource_uris or {}).get("recordings")
        return CallRecord(
            id=call.sid,
            to=call.to,
            from_number=call.from_,
            status=str(call.status) if call.status is not None else None,
            duration=str(call.duration) if call.duration is not None else None,
            timestamp=call.date_created,
            recording_url=f"{TWILIO_API_HOST}{recordings}" if recordings else None,
            direction=call.direction,
        )
