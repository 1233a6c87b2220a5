"""Candle model: one normalized OHLCV bar from the exchange."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Candle(BaseModel):
    """One candlestick bar. ``open_time`` is epoch milliseconds.

    ``open``, ``high`` and ``low`` are None when the exchange sent a value
    that isn't a finite number; such bars are still charted by close.
    """

    open_time: int = Field(serialization_alias="openTime")
    open: float | None
    high: float | None
    low: float | None
    close: float
    volume: float = 0.0
