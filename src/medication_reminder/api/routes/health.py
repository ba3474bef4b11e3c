"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from medication_reminder import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        service="medication-reminder",
        version=__version__,
    )


@router.get("/health/ready", status_code=status.HTTP_200_OK)
async def readiness_check(request: Request):
    """Readiness check endpoint."""
    # The context holds the Twilio gateway; without it no call can be placed
    if getattr(request.app.state, "context", None) is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "Application context not initialized"},
        )

    return {"status": "ready"}


@router.get("/health/live", status_code=status.HTTP_200_OK)
async def liveness_check():
    """Liveness check endpoint."""
    return {"status": "alive"}
