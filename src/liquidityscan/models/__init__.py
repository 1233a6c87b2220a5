"""Pydantic domain models."""

from liquidityscan.models.candle import Candle
from liquidityscan.models.signal import (
    STRATEGY_TIMEFRAMES,
    StoredSignal,
    WebhookSignal,
)

__all__ = [
    "Candle",
    "STRATEGY_TIMEFRAMES",
    "StoredSignal",
    "WebhookSignal",
]
