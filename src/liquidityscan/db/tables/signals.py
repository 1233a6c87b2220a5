"""SQLAlchemy ORM model for webhook signals."""

from datetime import datetime

from sqlalchemy import BigInteger, Index, Numeric, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from liquidityscan.db.base import Base

SCHEMA = "liquidityscan"


class SignalRow(Base):
    __tablename__ = "signals"
    __table_args__ = (
        Index("ix_signals_strategy_type", "strategy_type"),
        {"schema": SCHEMA},
    )

    # Surrogate key doubles as arrival order; re-sent signals keep their original pk.
    pk: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    signal_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    strategy_type: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    timeframe: Mapped[str] = mapped_column(Text, nullable=False)
    signal_type: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Numeric, nullable=False)
    detected_at: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="ACTIVE")
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
