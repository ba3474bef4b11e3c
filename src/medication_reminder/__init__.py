"""Medication adherence reminder calls over Twilio."""

__version__ = "0.1.0"
