"""E.164 phone number validation."""

import re

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

E164_ERROR_MESSAGE = "Phone number must be in E.164 format (e.g., +1234567890)"


def is_valid_e164(value: object) -> bool:
    """Return True if ``value`` is a string in E.164 format.

    Non-string and empty input is simply invalid.
    """
    if not isinstance(value, str) or not value:
        return False
    return E164_PATTERN.fullmatch(value) is not None
