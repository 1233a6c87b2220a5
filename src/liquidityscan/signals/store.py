"""Signal stores: where validated webhook signals end up.

Both stores upsert by signal id (a re-sent id replaces the earlier entry
but keeps its place in arrival order) and keep only the newest
``max_signals`` entries.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from liquidityscan.db.tables.signals import SignalRow
from liquidityscan.models.signal import StoredSignal, WebhookSignal

DEFAULT_MAX_SIGNALS = 5000

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _generated_id(signal: WebhookSignal, now: datetime) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"{signal.symbol}-{signal.timeframe}-{int(now.timestamp() * 1000)}-{suffix}"


def to_stored_signal(signal: WebhookSignal, now: datetime | None = None) -> StoredSignal:
    """Fill in id, detection time and status for a validated signal."""
    now = now or datetime.now(timezone.utc)
    signal_id = (signal.id or "").strip() or _generated_id(signal, now)
    return StoredSignal(
        id=signal_id,
        strategy_type=signal.strategy_type,
        symbol=signal.symbol,
        timeframe=signal.timeframe,
        signal_type=signal.signal_type,
        price=signal.price,
        detected_at=signal.detected_at or now.isoformat(),
        status=signal.status or "ACTIVE",
        metadata=signal.metadata,
    )


class MemorySignalStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self, max_signals: int = DEFAULT_MAX_SIGNALS) -> None:
        self.max_signals = max_signals
        # dicts keep insertion order and an overwrite keeps the key's slot
        self._signals: dict[str, StoredSignal] = {}

    def add_signals(self, signals: list[WebhookSignal]) -> int:
        """Store validated signals; returns how many were accepted."""
        now = datetime.now(timezone.utc)
        for signal in signals:
            stored = to_stored_signal(signal, now)
            self._signals[stored.id] = stored

        overflow = len(self._signals) - self.max_signals
        if overflow > 0:
            for key in list(self._signals)[:overflow]:
                del self._signals[key]
        return len(signals)

    def get_signals(self, strategy_type: str | None = None) -> list[StoredSignal]:
        """Stored signals in arrival order, optionally for one strategy."""
        return [
            s for s in self._signals.values()
            if not strategy_type or s.strategy_type == strategy_type
        ]

    def clear(self) -> None:
        self._signals.clear()


def _row_to_signal(row: SignalRow) -> StoredSignal:
    return StoredSignal(
        id=row.signal_id,
        strategy_type=row.strategy_type,
        symbol=row.symbol,
        timeframe=row.timeframe,
        signal_type=row.signal_type,
        price=float(row.price),
        detected_at=row.detected_at,
        status=row.status,
        metadata=row.metadata_,
    )


class DatabaseSignalStore:
    """Signal store backed by the ``signals`` table."""

    def __init__(self, session: Session, max_signals: int = DEFAULT_MAX_SIGNALS) -> None:
        self.session = session
        self.max_signals = max_signals

    def add_signals(self, signals: list[WebhookSignal]) -> int:
        """Upsert validated signals in one transaction; returns how many were accepted."""
        now = datetime.now(timezone.utc)
        for signal in signals:
            stored = to_stored_signal(signal, now)
            row = self.session.execute(
                select(SignalRow).where(SignalRow.signal_id == stored.id)
            ).scalar_one_or_none()
            if row is None:
                row = SignalRow(signal_id=stored.id, received_at=now)
                self.session.add(row)
            row.strategy_type = stored.strategy_type
            row.symbol = stored.symbol
            row.timeframe = stored.timeframe
            row.signal_type = stored.signal_type
            row.price = stored.price
            row.detected_at = stored.detected_at
            row.status = stored.status
            row.metadata_ = stored.metadata
            # Later items in the same batch may reuse this id.
            self.session.flush()

        self._trim()
        self.session.commit()
        return len(signals)

    def _trim(self) -> None:
        total = self.session.execute(select(func.count()).select_from(SignalRow)).scalar_one()
        overflow = total - self.max_signals
        if overflow <= 0:
            return
        oldest = select(SignalRow.pk).order_by(SignalRow.pk).limit(overflow)
        self.session.execute(
            delete(SignalRow)
            .where(SignalRow.pk.in_(oldest))
            .execution_options(synchronize_session=False)
        )

    def get_signals(self, strategy_type: str | None = None) -> list[StoredSignal]:
        """Stored signals in arrival order, optionally for one strategy."""
        stmt = select(SignalRow).order_by(SignalRow.pk)
        if strategy_type:
            stmt = stmt.where(SignalRow.strategy_type == strategy_type)
        return [_row_to_signal(row) for row in self.session.execute(stmt).scalars().all()]
