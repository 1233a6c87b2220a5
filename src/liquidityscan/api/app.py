"""FastAPI application: webhook signal intake and candle data for the dashboard."""

import os
from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
import structlog

from liquidityscan import __version__
from liquidityscan.candles import fetch_candles
from liquidityscan.config import AppConfig, load_config
from liquidityscan.db.engine import dispose_engine, get_session, init_engine
from liquidityscan.exchange.binance import BinanceClient
from liquidityscan.signals import (
    DatabaseSignalStore,
    MemorySignalStore,
    SignalValidationError,
    normalize_webhook_body,
    validate_webhook_signals,
)

logger = structlog.get_logger(__name__)

SignalStore = Union[MemorySignalStore, DatabaseSignalStore]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Open the database engine when signals go to the database; release clients on shutdown."""
    if config.signals.store == "database":
        init_engine(config.database.url)
        logger.info("Database engine initialized")
    logger.info("API started", environment=config.environment, signal_store=config.signals.store)
    try:
        yield
    finally:
        await _binance.close()
        dispose_engine()


app = FastAPI(
    title="LiquidityScan API",
    description="Signal intake and market data for the LiquidityScan dashboard",
    version=__version__,
    lifespan=lifespan,
)

# Dashboard is served from a different origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Load config once at import; LIQSCAN_CONFIG points at a YAML file.
config = load_config(os.environ.get("LIQSCAN_CONFIG"))

_binance = BinanceClient(base_url=config.binance.base_url, timeout=config.binance.timeout_s)
_memory_store = MemorySignalStore(max_signals=config.signals.max_signals)


def get_config() -> AppConfig:
    return config


def get_binance_client() -> BinanceClient:
    return _binance


def get_signal_store(cfg: AppConfig = Depends(get_config)) -> Generator[SignalStore, None, None]:
    """Dependency yielding the configured signal store."""
    if cfg.signals.store != "database":
        yield _memory_store
        return
    gen = get_session()
    session = next(gen)
    try:
        yield DatabaseSignalStore(session, max_signals=cfg.signals.max_signals)
    finally:
        gen.close()


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


# ═══════════════════════════════════════════════════════════════
# Signals
# ═══════════════════════════════════════════════════════════════


def _check_webhook_secret(provided: Optional[str], cfg: AppConfig) -> None:
    expected = cfg.signals.webhook_secret.strip()
    if not expected or (provided or "").strip() != expected:
        logger.warning("Webhook auth failed", has_secret=bool(provided))
        raise HTTPException(status_code=401, detail="Invalid or missing webhook secret")


@app.post("/api/signals/webhook")
async def signals_webhook(
    request: Request,
    x_webhook_secret: Optional[str] = Header(default=None),
    cfg: AppConfig = Depends(get_config),
    store: SignalStore = Depends(get_signal_store),
):
    """Accept pushed signals. The whole body is rejected if any signal is invalid."""
    _check_webhook_secret(x_webhook_secret, cfg)

    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Body must be JSON")

    items = normalize_webhook_body(body)
    try:
        signals = validate_webhook_signals(items)
    except SignalValidationError as e:
        logger.warning("Webhook signals rejected", fields=e.fields, items=len(items))
        raise HTTPException(status_code=422, detail=e.errors)

    received = store.add_signals(signals)
    logger.info("Webhook signals stored", received=received)
    return {"received": received}


@app.get("/api/signals")
async def list_signals(
    strategy_type: Optional[str] = Query(default=None, alias="strategyType"),
    store: SignalStore = Depends(get_signal_store),
):
    """Stored signals in arrival order."""
    return [s.to_api() for s in store.get_signals(strategy_type or None)]


# ═══════════════════════════════════════════════════════════════
# Candles
# ═══════════════════════════════════════════════════════════════


@app.get("/api/candles/{symbol}/{interval}")
async def get_candles(
    symbol: str,
    interval: str,
    limit: Optional[str] = Query(default=None),
    cfg: AppConfig = Depends(get_config),
    client: BinanceClient = Depends(get_binance_client),
):
    """Klines as ``[{openTime, open, high, low, close, volume}]``; empty list on any failure."""
    candles = await fetch_candles(
        client,
        symbol,
        interval,
        limit,
        log_errors=not cfg.is_production,
    )
    return [c.model_dump(by_alias=True) for c in candles]
