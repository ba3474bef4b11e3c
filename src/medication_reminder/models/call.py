"""Call-related data models and schemas."""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventKind(str, Enum):
    """Kinds of webhook invocations the call flow reacts to."""

    OUTBOUND_INITIATED = "outbound-initiated"
    SPEECH_CAPTURED = "speech-captured"
    NO_RESPONSE_TIMEOUT = "no-response-timeout"
    INBOUND_RECEIVED = "inbound-received"
    STATUS_CHANGED = "status-changed"


class AnsweredBy(str, Enum):
    """Twilio answering machine detection result."""

    HUMAN = "human"
    MACHINE_START = "machine_start"
    MACHINE_END_BEEP = "machine_end_beep"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> "AnsweredBy | None":
        """Map a raw AnsweredBy value; unrecognized values become UNKNOWN."""
        if not raw:
            return None
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class CallStatus(str, Enum):
    """Call status enumeration (Twilio status callback values)."""

    QUEUED = "queued"
    INITIATED = "initiated"
    RINGING = "ringing"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    NO_ANSWER = "no-answer"
    BUSY = "busy"
    FAILED = "failed"
    CANCELED = "canceled"


class NextStep(str, Enum):
    """What the call does after the spoken text (and any listening)."""

    END_CALL = "end-call"
    REDIRECT_TO_NO_RESPONSE = "redirect-to-no-response"
    NONE = "none"


class CallEvent(BaseModel):
    """A single Twilio webhook invocation, normalized."""

    model_config = ConfigDict(frozen=True)

    call_id: str | None = None
    event_kind: EventKind
    answered_by: AnsweredBy | None = None
    speech_text: str | None = None
    destination_number: str | None = None
    from_number: str | None = None
    call_status: CallStatus | None = None
    recording_url: str | None = None

    @classmethod
    def from_webhook(cls, event_kind: EventKind, form: Mapping[str, Any]) -> "CallEvent":
        """Build an event from a Twilio form body.

        Kind-specific fields are only read for their own kind, so e.g. an
        unexpected CallStatus on a voice webhook cannot break the call.
        """
        answered_by = speech_text = call_status = None
        if event_kind is EventKind.OUTBOUND_INITIATED:
            answered_by = AnsweredBy.parse(form.get("AnsweredBy"))
        elif event_kind is EventKind.SPEECH_CAPTURED:
            speech_text = form.get("SpeechResult") or None
        elif event_kind is EventKind.STATUS_CHANGED:
            call_status = form.get("CallStatus") or None

        return cls(
            call_id=form.get("CallSid"),
            event_kind=event_kind,
            answered_by=answered_by,
            speech_text=speech_text,
            destination_number=form.get("To") or None,
            from_number=form.get("From") or None,
            call_status=call_status,
            recording_url=form.get("RecordingUrl") or None,
        )


class SendSms(BaseModel):
    """Side effect: deliver an SMS through the telephony gateway."""

    model_config = ConfigDict(frozen=True)

    to: str
    body: str


class CallAction(BaseModel):
    """What to do next for a call, independent of any markup format."""

    model_config = ConfigDict(frozen=True)

    spoken_text: str | None = None
    listen_for_speech: bool = False
    listen_timeout: int | None = None
    next_step: NextStep = NextStep.NONE
    side_effect: SendSms | None = None


class OutboundCallRequest(BaseModel):
    """A validated request to place one reminder call."""

    model_config = ConfigDict(frozen=True)

    destination_number: str = Field(..., description="Phone number to call (E.164 format)")


class PlacedCall(BaseModel):
    """Result of asking Twilio to place a call."""

    call_sid: str
    status: str | None = None
    recording_url: str | None = None


class CallRecord(BaseModel):
    """A call log entry as exposed by GET /api/logs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    to: str | None = None
    from_number: str | None = Field(default=None, alias="from")
    status: str | None = None
    duration: str | None = None
    timestamp: datetime | None = None
    recording_url: str | None = None
    direction: str | None = None


class InitiateCallRequest(BaseModel):
    """Body of POST /api/call.

    The number is left untyped so that the E.164 validator, not request
    parsing, decides what is acceptable.
    """

    destination_number: Any = Field(
        default=None,
        validation_alias=AliasChoices("destinationNumber", "phoneNumber", "destination_number"),
    )


class InitiateCallResponse(BaseModel):
    """Response for POST /api/call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    call_id: str
    recording_url: str | None = None


class CallLogResponse(BaseModel):
    """Response for GET /api/logs."""

    success: bool = True
    count: int
    calls: list[CallRecord]
