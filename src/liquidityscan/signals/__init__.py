"""Webhook signal intake: body normalization, validation and storage."""

from liquidityscan.signals.errors import SignalValidationError
from liquidityscan.signals.store import DatabaseSignalStore, MemorySignalStore, to_stored_signal
from liquidityscan.signals.webhook import (
    normalize_webhook_body,
    validate_webhook_signal,
    validate_webhook_signals,
)

__all__ = [
    "DatabaseSignalStore",
    "MemorySignalStore",
    "SignalValidationError",
    "normalize_webhook_body",
    "to_stored_signal",
    "validate_webhook_signal",
    "validate_webhook_signals",
]
