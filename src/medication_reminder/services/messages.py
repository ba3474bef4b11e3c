"""Spoken and SMS message texts for each call scenario."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

DEFAULT_MEDICATIONS = ("Aspirin", "Cardivol", "Metformin")

TECHNICAL_DIFFICULTIES = "We are experiencing technical difficulties. Please try again later."

_MISSED_CALL = (
    "We called to check on your medication but couldn't reach you. "
    "Please call us back or take your medications if you haven't done so."
)


class MessageKey(str, Enum):
    """Call scenarios that have a message."""

    REMINDER = "reminder"
    VOICEMAIL = "voicemail"
    SMS_FALLBACK = "sms-fallback"
    THANK_YOU = "thank-you"
    NO_RESPONSE = "no-response"


def _join_names(names: Sequence[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])}, and {names[-1]}"


def build_messages(medications: Sequence[str] = DEFAULT_MEDICATIONS) -> dict[MessageKey, str]:
    """Render the message texts, naming the given medications in the reminder."""
    return {
        MessageKey.REMINDER: (
            "Hello, this is a reminder from your healthcare provider to confirm your "
            "medications for the day. Please confirm if you have taken your "
            f"{_join_names(medications)} today."
        ),
        MessageKey.VOICEMAIL: _MISSED_CALL,
        MessageKey.SMS_FALLBACK: _MISSED_CALL,
        MessageKey.THANK_YOU: "Thank you for your response. Have a good day.",
        MessageKey.NO_RESPONSE: (
            "We didn't receive a response. Please remember to take your medications. Thank you."
        ),
    }


@dataclass(frozen=True)
class MessageCatalog:
    """Read-only lookup from scenario to text."""

    messages: Mapping[MessageKey, str] = field(default_factory=build_messages)

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", MappingProxyType(dict(self.messages)))

    @classmethod
    def for_medications(cls, medications: Sequence[str]) -> "MessageCatalog":
        return cls(build_messages(medications or DEFAULT_MEDICATIONS))

    def get(self, key: MessageKey) -> str:
        """Return the text for ``key``; raises KeyError when it is missing."""
        return self.messages[key]
