"""Shared fixtures: explicit settings, a stub telephony gateway and the app."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from medication_reminder.api.main import create_app
from medication_reminder.config import Settings
from medication_reminder.models.call import PlacedCall

TEST_BASE_URL = "https://reminders.example.com"
TEST_FROM_NUMBER = "+15550000000"


@pytest.fixture
def settings():
    """Settings built from explicit values, ignoring the environment's .env file."""
    return Settings(
        _env_file=None,
        port=3000,
        base_url=TEST_BASE_URL,
        twilio_account_sid="ACtest",
        twilio_auth_token="test-token",
        twilio_phone_number=TEST_FROM_NUMBER,
    )


@pytest.fixture
def gateway():
    """Stub telephony gateway that never talks to Twilio."""
    mock_gateway = MagicMock()
    mock_gateway.place_call = AsyncMock(
        return_value=PlacedCall(
            call_sid="CA-stub-id",
            status="queued",
            recording_url="https://api.twilio.com/recordings/CA-stub-id",
        )
    )
    mock_gateway.list_calls = AsyncMock(return_value=[])
    mock_gateway.send_sms = AsyncMock(return_value="SM-stub-id")
    return mock_gateway


@pytest.fixture
def app(settings, gateway):
    """Create the application around the stub gateway."""
    return create_app(settings, gateway)


@pytest.fixture
def client(app):
    """Create a test client."""
    return TestClient(app)
