"""Explicitly constructed dependencies shared by the routers."""

from dataclasses import dataclass, field

from fastapi import Request

from medication_reminder.config import Settings
from medication_reminder.services.call_flow import CallFlowEngine
from medication_reminder.services.messages import MessageCatalog
from medication_reminder.services.telephony import TelephonyGateway
from medication_reminder.services.twiml import VoiceRoutes


@dataclass(frozen=True)
class AppContext:
    """Everything a request handler needs, built once at startup."""

    settings: Settings
    gateway: TelephonyGateway
    engine: CallFlowEngine
    voice_routes: VoiceRoutes = field(default_factory=VoiceRoutes)

    @classmethod
    def build(cls, settings: Settings, gateway: TelephonyGateway) -> "AppContext":
        engine = CallFlowEngine(
            catalog=MessageCatalog.for_medications(settings.medications),
            listen_timeout=settings.listen_timeout_seconds,
        )
        return cls(settings=settings, gateway=gateway, engine=engine)


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the app's context."""
    return request.app.state.context
