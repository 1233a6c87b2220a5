"""Webhook body normalization and validation.

The scanner pushes either plain signal objects (one or a list) or its own
batch format, which groups labels per coin and timeframe::

    {"signals": [
        {"symbol": "BTCUSDT", "price": 97000,
         "signals_by_timeframe": {"1d": {"signals": ["REV Bull"], "price": 96950,
                                         "time": "2026-01-05T00:00:00Z"}}}
    ]}

``normalize_webhook_body`` flattens every accepted shape into a list of
plain signal payloads; ``validate_webhook_signals`` then checks them all
or rejects the whole batch.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from liquidityscan.models.signal import STRATEGY_TIMEFRAMES, WebhookSignal
from liquidityscan.signals.errors import SignalValidationError

SCANNER_STRATEGY = "SUPER_ENGULFING"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _scanner_signal_type(labels: list[Any]) -> str:
    first = labels[0] if labels else None
    if isinstance(first, str) and "bear" in first.lower():
        return "SELL"
    return "BUY"


def _number_or(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _expand_scanner_batch(items: list[Any], now: str) -> list[dict[str, Any]]:
    """One payload per allowed timeframe block of each coin."""
    allowed = STRATEGY_TIMEFRAMES[SCANNER_STRATEGY]
    out: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        symbol = str(item.get("symbol") or "")
        fallback_price = _number_or(item.get("price"), 0)
        by_tf = item.get("signals_by_timeframe")
        if not isinstance(by_tf, dict):
            continue

        for tf, block in by_tf.items():
            tf_norm = str(tf).lower()
            # Scanner also reports 5m/15m/1h; only the strategy's timeframes are kept.
            if tf_norm not in allowed:
                continue
            block = block if isinstance(block, dict) else {}
            labels = block.get("signals")
            block_price = block.get("price")
            block_time = block.get("time")
            out.append({
                "strategyType": SCANNER_STRATEGY,
                "symbol": symbol,
                "timeframe": tf_norm,
                "signalType": _scanner_signal_type(labels if isinstance(labels, list) else []),
                "price": (
                    block_price
                    if isinstance(block_price, (int, float)) and not isinstance(block_price, bool)
                    else fallback_price
                ),
                "detectedAt": block_time if isinstance(block_time, str) else now,
            })
    return out


def normalize_webhook_body(body: Any) -> list[Any]:
    """Flatten any accepted webhook body into a list of signal payloads.

    - scanner batch ``{"signals": [...]}`` -> expanded per timeframe
    - scanner single ``{"symbol": ..., "signals_by_timeframe": {...}}`` -> same
    - list -> returned as-is
    - any other object -> ``[body]``
    - anything else -> ``[]``
    """
    if isinstance(body, dict):
        if isinstance(body.get("signals"), list):
            return _expand_scanner_batch(body["signals"], _now_iso())
        if isinstance(body.get("symbol"), str) and isinstance(body.get("signals_by_timeframe"), dict):
            return _expand_scanner_batch([body], _now_iso())
        return [body]
    if isinstance(body, list):
        return list(body)
    return []


def _collect_errors(exc: ValidationError, index: int | None) -> list[dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = err.get("loc") or ()
        errors.append({
            "index": index,
            "field": ".".join(str(part) for part in loc) if loc else "__root__",
            "message": err.get("msg", "invalid value"),
        })
    return errors


def validate_webhook_signal(payload: Any) -> WebhookSignal:
    """Validate one payload. Raises SignalValidationError naming the bad fields."""
    try:
        return WebhookSignal.model_validate(payload)
    except ValidationError as e:
        raise SignalValidationError(_collect_errors(e, None)) from e


def validate_webhook_signals(items: list[Any]) -> list[WebhookSignal]:
    """Validate a batch all-or-nothing.

    Every item is checked so the error lists all violations; if any item
    fails, no item is returned.
    """
    accepted: list[WebhookSignal] = []
    errors: list[dict[str, Any]] = []
    for index, payload in enumerate(items):
        try:
            accepted.append(WebhookSignal.model_validate(payload))
        except ValidationError as e:
            errors.extend(_collect_errors(e, index))
    if errors:
        raise SignalValidationError(errors)
    return accepted
