"""Binance spot exchange client: public REST market data."""

from __future__ import annotations

from typing import Any

import httpx


class BinanceClient:
    """Async client for Binance's public REST API."""

    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def get_klines(self, symbol: str, interval: str, limit: int) -> Any:
        """Fetch raw klines for one symbol.

        Returns the decoded JSON body unchanged; on success Binance sends a
        list of rows ``[openTime, open, high, low, close, volume, closeTime, ...]``
        with prices as strings. Raises ``httpx.HTTPStatusError`` on a non-2xx
        response and ``ValueError`` when the body is not JSON.
        """
        http = await self._get_http()
        resp = await http.get(
            f"{self.base_url}/api/v3/klines",
            params={"symbol": symbol, "interval": interval, "limit": limit},
        )
        resp.raise_for_status()
        return resp.json()
