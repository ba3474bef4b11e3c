#!/usr/bin/env python3
"""Trigger a medication reminder call through a running API."""

import argparse
import sys
from typing import Any

import httpx

DEFAULT_ENDPOINT = "http://localhost:3000/api/call"


def trigger_reminder(
    phone_number: str,
    endpoint: str = DEFAULT_ENDPOINT,
    transport: httpx.BaseTransport | None = None,
    timeout: float = 30.0,
) -> dict[str, Any]:
    """
    Ask the API to call ``phone_number``.

    Returns the JSON body ({"success": true, "callId": ...}). Raises
    httpx.HTTPStatusError when the API rejects the request.
    """
    with httpx.Client(transport=transport, timeout=timeout) as client:
        response = client.post(endpoint, json={"destinationNumber": phone_number})
        response.raise_for_status()
        return response.json()


def main(argv: list[str] | None = None, transport: httpx.BaseTransport | None = None) -> int:
    parser = argparse.ArgumentParser(description="Trigger a medication reminder call")
    parser.add_argument("phone_number", nargs="?", help="Number to call, E.164 (e.g., +1234567890)")
    parser.add_argument("--endpoint", default=DEFAULT_ENDPOINT, help="URL of the /api/call endpoint")
    args = parser.parse_args(argv)

    if not args.phone_number:
        print("Please provide a phone number as an argument", file=sys.stderr)
        print("Example: medication-reminder-call +1234567890", file=sys.stderr)
        return 1

    print(f"Triggering medication reminder for {args.phone_number}...")

    try:
        data = trigger_reminder(args.phone_number, endpoint=args.endpoint, transport=transport)
    except httpx.HTTPStatusError as e:
        print(f"Error triggering medication reminder: {e.response.text}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"Error triggering medication reminder: {e}", file=sys.stderr)
        return 1

    print(f"API Response: {data}")
    print(f"Call initiated with ID: {data.get('callId')}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
