"""
Call-flow decision engine.

Maps each webhook event to the next action for the call. The engine keeps no
state between calls: the action depends only on the event and the message
catalog, so any number of requests can be decided concurrently.
"""

from collections.abc import Callable

import structlog

from medication_reminder.models.call import (
    AnsweredBy,
    CallAction,
    CallEvent,
    CallStatus,
    EventKind,
    NextStep,
    SendSms,
)
from medication_reminder.services.messages import (
    TECHNICAL_DIFFICULTIES,
    MessageCatalog,
    MessageKey,
)

logger = structlog.get_logger(__name__)

MACHINE_ANSWERS = frozenset({AnsweredBy.MACHINE_START, AnsweredBy.MACHINE_END_BEEP})

UNREACHED_STATUSES = frozenset(
    {CallStatus.NO_ANSWER, CallStatus.BUSY, CallStatus.FAILED, CallStatus.CANCELED}
)

DEFAULT_LISTEN_TIMEOUT = 10

# Returned whenever an action cannot be produced. Built from constants only.
DEGRADED_ACTION = CallAction(
    spoken_text=TECHNICAL_DIFFICULTIES,
    next_step=NextStep.END_CALL,
)


class CallFlowEngine:
    """Decides what to say and do for each call event."""

    def __init__(
        self,
        catalog: MessageCatalog | None = None,
        listen_timeout: int = DEFAULT_LISTEN_TIMEOUT,
    ) -> None:
        self.catalog = catalog or MessageCatalog()
        self.listen_timeout = listen_timeout
        self._handlers: dict[EventKind, Callable[[CallEvent], CallAction]] = {
            EventKind.OUTBOUND_INITIATED: self._outbound_initiated,
            EventKind.SPEECH_CAPTURED: self._speech_captured,
            EventKind.NO_RESPONSE_TIMEOUT: self._no_response,
            EventKind.INBOUND_RECEIVED: self._inbound_received,
            EventKind.STATUS_CHANGED: self._status_changed,
        }

    @property
    def handled_kinds(self) -> frozenset[EventKind]:
        return frozenset(self._handlers)

    def decide(self, event: CallEvent) -> CallAction:
        """
        Produce the action for ``event``.

        Never raises: any failure yields DEGRADED_ACTION so the live call
        ends cleanly instead of hanging on the provider side.
        """
        try:
            handler = self._handlers[event.event_kind]
            return handler(event)
        except Exception as e:
            logger.error(
                "Failed to decide call action, using degraded action",
                call_sid=getattr(event, "call_id", None),
                event_kind=str(getattr(event, "event_kind", None)),
                error=str(e),
                exc_info=True,
            )
            return DEGRADED_ACTION

    def _listen(self, key: MessageKey) -> CallAction:
        return CallAction(
            spoken_text=self.catalog.get(key),
            listen_for_speech=True,
            listen_timeout=self.listen_timeout,
            next_step=NextStep.REDIRECT_TO_NO_RESPONSE,
        )

    def _say_and_hang_up(self, key: MessageKey) -> CallAction:
        return CallAction(spoken_text=self.catalog.get(key), next_step=NextStep.END_CALL)

    def _outbound_initiated(self, event: CallEvent) -> CallAction:
        if event.answered_by in MACHINE_ANSWERS:
            logger.info("Answering machine detected, leaving voicemail", call_sid=event.call_id)
            return self._say_and_hang_up(MessageKey.VOICEMAIL)

        logger.info(
            "Human answered, delivering reminder",
            call_sid=event.call_id,
            answered_by=event.answered_by.value if event.answered_by else None,
        )
        return self._listen(MessageKey.REMINDER)

    def _speech_captured(self, event: CallEvent) -> CallAction:
        logger.info(
            "Received patient response",
            call_sid=event.call_id,
            response=event.speech_text or "No speech detected",
        )
        return self._say_and_hang_up(MessageKey.THANK_YOU)

    def _no_response(self, event: CallEvent) -> CallAction:
        logger.info("No response received from patient", call_sid=event.call_id)
        return self._say_and_hang_up(MessageKey.NO_RESPONSE)

    def _inbound_received(self, event: CallEvent) -> CallAction:
        # Timeout falls through to the same no-response redirect as outbound calls
        logger.info("Received incoming call from patient", call_sid=event.call_id, caller=event.from_number)
        return self._listen(MessageKey.REMINDER)

    def _status_changed(self, event: CallEvent) -> CallAction:
        if event.call_status not in UNREACHED_STATUSES:
            return CallAction()

        if not event.destination_number:
            raise ValueError(f"Status {event.call_status.value} has no destination number for SMS fallback")

        logger.info("Scheduling SMS fallback", call_sid=event.call_id, to=event.destination_number)
        return CallAction(
            side_effect=SendSms(
                to=event.destination_number,
                body=self.catalog.get(MessageKey.SMS_FALLBACK),
            )
        )
