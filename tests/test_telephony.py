"""Tests for the Twilio gateway, with the Twilio REST client mocked out."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from twilio.base.exceptions import TwilioException, TwilioRestException

from medication_reminder.models.call import OutboundCallRequest
from medication_reminder.services.telephony import TelephonyGatewayError, TwilioGateway

BASE_URL = "https://reminders.example.com"


@pytest.fixture
def twilio_client():
    client = MagicMock()
    client.calls.create.return_value = MagicMock(sid="CA123", status="queued")
    client.messages.create.return_value = MagicMock(sid="SM123")
    return client


@pytest.fixture
def twilio_gateway(twilio_client):
    return TwilioGateway(
        client=twilio_client,
        account_sid="ACtest",
        from_number="+15550000000",
        base_url=f"{BASE_URL}/",
    )


def make_call(**overrides):
    call = MagicMock()
    call.sid = "CA1"
    call.to = "+15551234567"
    call.from_ = "+15550000000"
    call.status = "completed"
    call.duration = "42"
    call.date_created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    call.direction = "outbound-api"
    call.subresource_uris = {"recordings": "/2010-04-01/Accounts/ACtest/Calls/CA1/Recordings.json"}
    for key, value in overrides.items():
        setattr(call, key, value)
    return call


class TestPlaceCall:
    @pytest.mark.asyncio
    async def test_call_created_with_callbacks_and_detection(self, twilio_gateway, twilio_client):
        placed = await twilio_gateway.place_call(OutboundCallRequest(destination_number="+15551234567"))

        assert placed.call_sid == "CA123"
        assert placed.status == "queued"
        assert placed.recording_url.endswith("/Accounts/ACtest/Calls/CA123/Recordings")

        kwargs = twilio_client.calls.create.call_args.kwargs
        assert kwargs["to"] == "+15551234567"
        assert kwargs["from_"] == "+15550000000"
        assert kwargs["url"] == f"{BASE_URL}/voice/outbound"
        assert kwargs["status_callback"] == f"{BASE_URL}/voice/status"
        assert kwargs["status_callback_event"] == ["initiated", "ringing", "answered", "completed"]
        assert kwargs["status_callback_method"] == "POST"
        assert kwargs["machine_detection"] == "DetectMessageEnd"
        assert kwargs["record"] is True

    @pytest.mark.asyncio
    async def test_rest_error_wrapped(self, twilio_gateway, twilio_client):
        twilio_client.calls.create.side_effect = TwilioRestException(
            400, "/Calls", msg="The 'To' number is not a valid phone number.", code=21211
        )

        with pytest.raises(TelephonyGatewayError) as exc_info:
            await twilio_gateway.place_call(OutboundCallRequest(destination_number="+15551234567"))

        assert exc_info.value.code == 21211
        assert "not a valid phone number" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self, twilio_gateway, twilio_client):
        twilio_client.calls.create.side_effect = ConnectionError("network down")

        with pytest.raises(TelephonyGatewayError) as exc_info:
            await twilio_gateway.place_call(OutboundCallRequest(destination_number="+15551234567"))

        assert exc_info.value.detail == "network down"
        assert twilio_client.calls.create.call_count == 1


class TestListCalls:
    @pytest.mark.asyncio
    async def test_records_projected(self, twilio_gateway, twilio_client):
        twilio_client.calls.list.return_value = [make_call()]

        records = await twilio_gateway.list_calls(limit=50)

        twilio_client.calls.list.assert_called_once_with(limit=50)
        record = records[0]
        assert record.id == "CA1"
        assert record.from_number == "+15550000000"
        assert record.duration == "42"
        assert record.recording_url == (
            "https://api.twilio.com/2010-04-01/Accounts/ACtest/Calls/CA1/Recordings.json"
        )

    @pytest.mark.asyncio
    async def test_status_filter(self, twilio_gateway, twilio_client):
        twilio_client.calls.list.return_value = []

        await twilio_gateway.list_calls(status="busy", limit=10)

        twilio_client.calls.list.assert_called_once_with(limit=10, status="busy")

    @pytest.mark.asyncio
    async def test_missing_optional_fields(self, twilio_gateway, twilio_client):
        twilio_client.calls.list.return_value = [make_call(duration=None, subresource_uris=None)]

        record = (await twilio_gateway.list_calls())[0]

        assert record.duration is None
        assert record.recording_url is None

    @pytest.mark.asyncio
    async def test_error_wrapped(self, twilio_gateway, twilio_client):
        twilio_client.calls.list.side_effect = TwilioRestException(401, "/Calls", msg="Authenticate")

        with pytest.raises(TelephonyGatewayError):
            await twilio_gateway.list_calls()


class TestSendSms:
    @pytest.mark.asyncio
    async def test_sms_sent_from_configured_number(self, twilio_gateway, twilio_client):
        sid = await twilio_gateway.send_sms("+15551234567", "Take your medication")

        assert sid == "SM123"
        twilio_client.messages.create.assert_called_once_with(
            body="Take your medication",
            from_="+15550000000",
            to="+15551234567",
        )

    @pytest.mark.asyncio
    async def test_error_wrapped(self, twilio_gateway, twilio_client):
        twilio_client.messages.create.side_effect = TwilioRestException(
            400, "/Messages", msg="Unverified number", code=21608
        )

        with pytest.raises(TelephonyGatewayError) as exc_info:
            await twilio_gateway.send_sms("+15551234567", "hi")

        assert exc_info.value.code == 21608


class TestFromSettings:
    def test_builds_client_from_settings(self, settings):
        with patch("medication_reminder.services.telephony.Client") as mock_client:
            gateway = TwilioGateway.from_settings(settings)

        mock_client.assert_called_once_with("ACtest", "test-token")
        assert gateway.from_number == settings.twilio_phone_number
        assert gateway.base_url == settings.base_url

    def test_client_construction_failure(self, settings):
        with patch(
            "medication_reminder.services.telephony.Client",
            side_effect=TwilioException("Credentials are required to create a TwilioClient"),
        ):
            with pytest.raises(TelephonyGatewayError):
                TwilioGateway.from_settings(settings)
