"""Import all table modules so Base.metadata knows about them."""

from liquidityscan.db.tables.signals import SCHEMA, SignalRow

__all__ = ["SCHEMA", "SignalRow"]
