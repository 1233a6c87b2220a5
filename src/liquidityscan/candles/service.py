"""Candle fetch & normalize: Binance klines mapped to typed candles.

Every failure mode (bad input, upstream error status, network error,
misconfigured base URL, malformed body) degrades to an empty list so the
dashboard can render a "no chart data" state instead of an error. One
request per call; no retries, caching or pagination.
"""

from __future__ import annotations

import math
import re
from typing import Any

import httpx

from liquidityscan.exchange.binance import BinanceClient
from liquidityscan.logging import get_logger
from liquidityscan.models.candle import Candle

log = get_logger(__name__)

VALID_INTERVALS = frozenset({
    "1m", "3m", "5m", "15m", "30m",
    "1h", "2h", "4h", "6h", "8h", "12h",
    "1d", "3d", "1w", "1M",
})
DEFAULT_INTERVAL = "4h"
DEFAULT_LIMIT = 500
MAX_LIMIT = 1000

# A kline row carries at least: open time, open, high, low, close, volume.
_MIN_ROW_FIELDS = 6

_NON_ALNUM = re.compile(r"[^A-Z0-9]")

# Leading integer of a string, the way a JS parseInt reads "12abc" or "5.7".
_LEADING_INT = re.compile(r"\s*([+-]?)(\d+)")


def clean_symbol(symbol: str | None) -> str:
    """Uppercase and drop everything that isn't A-Z or 0-9."""
    return _NON_ALNUM.sub("", (symbol or "").upper())


def resolve_interval(interval: str | None) -> str:
    """Lowercase the interval, falling back to the default when unknown."""
    lowered = (interval or DEFAULT_INTERVAL).lower()
    return lowered if lowered in VALID_INTERVALS else DEFAULT_INTERVAL


def clamp_limit(limit: int | str | None) -> int:
    """Clamp the row limit into [1, MAX_LIMIT]; missing or unparseable means default.

    Strings are read up to the first non-digit, so ``"12abc"`` is 12 and
    ``"5.7"`` is 5.
    """
    if limit is None or isinstance(limit, bool):
        return DEFAULT_LIMIT
    if isinstance(limit, str):
        match = _LEADING_INT.match(limit)
        if match is None:
            return DEFAULT_LIMIT
        sign, digits = match.groups()
        digits = digits.lstrip("0") or "0"
        # Anything this long is past MAX_LIMIT anyway.
        value = int(digits) if len(digits) <= 7 else MAX_LIMIT + 1
        if sign == "-":
            value = -value
    else:
        try:
            value = int(limit)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_LIMIT
    return min(max(1, value), MAX_LIMIT)


def _to_number(value: Any) -> float:
    """Coerce a raw kline field to float; NaN when it isn't numeric."""
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        try:
            return float(value)
        except OverflowError:
            # ints beyond float range
            return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def normalize_klines(raw: Any) -> list[Candle]:
    """Map raw kline rows to candles, dropping rows that can't be used.

    A row is kept only when it is a list of at least six fields whose open
    time and close are finite. A non-finite open, high or low is reported
    as ``None``; a volume that isn't numeric becomes 0. Upstream order is
    preserved.
    """
    if not isinstance(raw, list):
        return []

    candles: list[Candle] = []
    for row in raw:
        if not isinstance(row, list) or len(row) < _MIN_ROW_FIELDS:
            continue
        open_time, open_, high, low, close = (_to_number(v) for v in row[:5])
        if not (math.isfinite(open_time) and math.isfinite(close)):
            continue
        volume = _to_number(row[5])
        if not math.isfinite(volume):
            volume = 0.0
        candles.append(Candle(
            open_time=int(open_time),
            open=_finite_or_none(open_),
            high=_finite_or_none(high),
            low=_finite_or_none(low),
            close=close,
            volume=volume,
        ))
    return candles


async def fetch_candles(
    client: BinanceClient,
    symbol: str | None,
    interval: str | None,
    limit: int | str | None = None,
    *,
    log_errors: bool = True,
) -> list[Candle]:
    """Fetch and normalize candles for one symbol. Never raises.

    Args:
        client: Exchange client used for the single upstream request.
        symbol: Raw symbol, e.g. ``"btc usdt"``; cleaned to ``"BTCUSDT"``.
        interval: Interval token; unknown values fall back to ``4h``.
        limit: Requested row count, clamped into [1, 1000] (default 500).
        log_errors: Emit a warning on upstream failure. Off in production.
    """
    sym = clean_symbol(symbol)
    if not sym:
        return []
    interval_param = resolve_interval(interval)
    limit_param = clamp_limit(limit)

    try:
        raw = await client.get_klines(sym, interval_param, limit_param)
    except httpx.HTTPStatusError as e:
        if log_errors:
            log.warning(
                "Binance klines error",
                symbol=sym,
                interval=interval_param,
                status=e.response.status_code,
                body=e.response.text[:200],
            )
        return []
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        if log_errors:
            log.warning("Binance klines fetch failed", symbol=sym, interval=interval_param, error=str(e))
        return []
    except Exception as e:
        # Charts degrade to "no data" whatever the upstream does.
        if log_errors:
            log.warning(
                "Binance klines unexpected error",
                symbol=sym,
                interval=interval_param,
                error=str(e),
                error_type=type(e).__name__,
            )
        return []

    return normalize_klines(raw)
