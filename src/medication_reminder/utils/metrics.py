"""Prometheus counters exposed on /metrics."""

from prometheus_client import Counter

CALLS_PLACED = Counter(
    "medication_reminder_calls_placed_total",
    "Outbound reminder calls requested from Twilio",
    ["result"],
)

WEBHOOK_EVENTS = Counter(
    "medication_reminder_webhook_events_total",
    "Twilio voice webhooks handled, by event kind",
    ["event_kind"],
)

DEGRADED_RESPONSES = Counter(
    "medication_reminder_degraded_responses_total",
    "Webhooks answered with the technical-difficulties fallback",
)

SMS_FALLBACKS = Counter(
    "medication_reminder_sms_fallbacks_total",
    "SMS fallbacks sent after unanswered calls",
    ["result"],
)
