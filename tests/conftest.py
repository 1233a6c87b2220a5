"""Shared test fixtures."""

import pytest
from sqlalchemy import BigInteger, Integer, JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session

import liquidityscan.db.tables  # noqa: F401  (registers tables on Base.metadata)
from liquidityscan.db.base import Base


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created.

    Patches JSONB→JSON and BigInteger→Integer for SQLite compatibility.
    """
    engine = create_engine("sqlite:///:memory:")

    # SQLite doesn't support schemas, JSONB, or BigInteger autoincrement
    for table in Base.metadata.tables.values():
        table.schema = None
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()
            if isinstance(col.type, BigInteger):
                col.type = Integer()

    Base.metadata.create_all(engine)

    session = Session(engine)
    yield session
    session.close()
    engine.dispose()


def signal_payload(**overrides):
    """A valid webhook signal payload; keyword args replace fields."""
    payload = {
        "strategyType": "SUPER_ENGULFING",
        "symbol": "BTCUSDT",
        "timeframe": "4h",
        "signalType": "BUY",
        "price": 97000.5,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_signal():
    return signal_payload
