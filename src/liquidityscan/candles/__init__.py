"""Candle fetch and normalization."""

from liquidityscan.candles.service import (
    DEFAULT_INTERVAL,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    VALID_INTERVALS,
    clamp_limit,
    clean_symbol,
    fetch_candles,
    normalize_klines,
    resolve_interval,
)

__all__ = [
    "DEFAULT_INTERVAL",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "VALID_INTERVALS",
    "clamp_limit",
    "clean_symbol",
    "fetch_candles",
    "normalize_klines",
    "resolve_interval",
]
