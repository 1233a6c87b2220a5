"""Configuration system."""

from liquidityscan.config.loader import load_config
from liquidityscan.config.schema import AppConfig

__all__ = ["AppConfig", "load_config"]
