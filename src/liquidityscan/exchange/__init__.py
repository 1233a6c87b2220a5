"""Exchange API clients."""

from liquidityscan.exchange.binance import BinanceClient

__all__ = ["BinanceClient"]
