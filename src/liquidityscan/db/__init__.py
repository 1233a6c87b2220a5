"""Database layer: engine, session, ORM base."""

from liquidityscan.db.base import Base
from liquidityscan.db.engine import dispose_engine, get_session, init_engine

__all__ = ["Base", "dispose_engine", "get_session", "init_engine"]
