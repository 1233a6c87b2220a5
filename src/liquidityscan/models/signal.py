"""Signal models: inbound webhook payloads and their stored form."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationInfo, field_validator

# Timeframes each strategy publishes signals for.
STRATEGY_TIMEFRAMES: dict[str, tuple[str, ...]] = {
    "SUPER_ENGULFING": ("4h", "1d", "1w"),
}

StrategyType = Literal["SUPER_ENGULFING"]
SignalType = Literal["BUY", "SELL"]
SignalStatus = Literal["ACTIVE", "EXPIRED", "FILLED", "CLOSED"]


class WebhookSignal(BaseModel):
    """A trading signal pushed by an external scanner.

    JSON keys are camelCase (``strategyType``, ``signalType``,
    ``detectedAt``); Python attribute names are accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: StrictStr | None = None
    strategy_type: StrategyType = Field(alias="strategyType")
    symbol: StrictStr
    timeframe: StrictStr
    signal_type: SignalType = Field(alias="signalType")
    price: float = Field(strict=True, allow_inf_nan=False)
    detected_at: StrictStr | None = Field(default=None, alias="detectedAt")
    status: SignalStatus | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("timeframe")
    @classmethod
    def _check_timeframe(cls, value: str, info: ValidationInfo) -> str:
        strategy = info.data.get("strategy_type")
        if strategy is None:
            # strategy_type failed on its own; that error is already reported.
            return value
        allowed = STRATEGY_TIMEFRAMES[strategy]
        if value not in allowed:
            raise ValueError(
                f"timeframe {value!r} not allowed for {strategy}; expected one of {', '.join(allowed)}"
            )
        return value


class StoredSignal(BaseModel):
    """A signal as kept by a signal store, with every default filled in."""

    id: str
    strategy_type: str
    symbol: str
    timeframe: str
    signal_type: str
    price: float
    detected_at: str
    status: SignalStatus = "ACTIVE"
    metadata: dict[str, Any] | None = None

    def to_api(self) -> dict[str, Any]:
        """camelCase dict for API responses."""
        out: dict[str, Any] = {
            "id": self.id,
            "strategyType": self.strategy_type,
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "signalType": self.signal_type,
            "price": self.price,
            "detectedAt": self.detected_at,
            "status": self.status,
        }
        if self.metadata is not None:
            out["metadata"] = self.metadata
        return out
