"""liquidityscan: signal intake and candle data backend."""

__version__ = "0.1.0"
