"""Server entry point: validate configuration, build the app and run uvicorn."""

import re
import sys

import structlog
import uvicorn
from pydantic import ValidationError
from pydantic_settings import SettingsError

from medication_reminder.api.main import create_app
from medication_reminder.config import Settings, get_settings
from medication_reminder.services.telephony import TelephonyGatewayError, TwilioGateway
from medication_reminder.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

_SETTINGS_ERROR_FIELD = re.compile(r'field "(\w+)"')


def missing_settings(error: ValidationError) -> list[str]:
    """Environment variable names for the missing or invalid settings in ``error``."""
    return sorted({str(err["loc"][0]).upper() for err in error.errors() if err["loc"]})


def unparsable_setting(error: SettingsError) -> str | None:
    """Environment variable name of the setting whose raw value could not be parsed."""
    match = _SETTINGS_ERROR_FIELD.search(str(error))
    return match.group(1).upper() if match else None


def load_settings() -> Settings:
    """Load settings, exiting with status 1 when required values are absent or malformed."""
    try:
        return get_settings()
    except ValidationError as e:
        logger.error("Missing required environment variables", missing=missing_settings(e))
        sys.exit(1)
    except SettingsError as e:
        logger.error("Invalid environment variable", setting=unparsable_setting(e), error=str(e))
        sys.exit(1)


def main() -> None:
    """Run the medication reminder API."""
    settings = load_settings()
    configure_logging(settings)

    try:
        gateway = TwilioGateway.from_settings(settings)
    except TelephonyGatewayError as e:
        logger.error("Failed to initialize Twilio client", error=e.detail)
        sys.exit(1)

    app = create_app(settings, gateway)

    logger.info(
        "Starting server",
        host=settings.host,
        port=settings.port,
        base_url=settings.base_url,
        environment=settings.environment,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
