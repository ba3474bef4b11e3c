"""FastAPI application for medication reminder calls."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from medication_reminder import __version__
from medication_reminder.api.dependencies import AppContext
from medication_reminder.api.routes import calls, health, voice
from medication_reminder.config import Settings
from medication_reminder.services.telephony import TelephonyGateway

logger = structlog.get_logger(__name__)


def create_app(settings: Settings, gateway: TelephonyGateway) -> FastAPI:
    """
    Build the application around an already constructed gateway.

    Tests pass a stub gateway here; the server passes a TwilioGateway.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info(
            "Starting medication reminder API",
            environment=settings.environment,
            base_url=settings.base_url,
        )
        yield
        logger.info("Shutting down medication reminder API")

    app = FastAPI(
        title="Medication Reminder",
        description="Outbound medication adherence calls with SMS fallback, over Twilio",
        version=__version__,
        lifespan=lifespan,
    )

    # Routes read their dependencies from here
    app.state.context = AppContext.build(settings, gateway)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(calls.router, prefix="/api", tags=["calls"])
    app.include_router(voice.router, prefix="/voice", tags=["voice"])

    # Add Prometheus metrics endpoint
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "status": "running",
            "service": "medication-reminder",
            "version": __version__,
            "environment": settings.environment,
            "endpoints": {
                "call": "/api/call",
                "logs": "/api/logs",
            },
        }

    return app
