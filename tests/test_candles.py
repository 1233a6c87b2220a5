"""Tests for candle fetch & normalization."""

import asyncio
import json

import httpx
import pytest

from liquidityscan.candles import (
    clamp_limit,
    clean_symbol,
    fetch_candles,
    normalize_klines,
    resolve_interval,
)
from liquidityscan.exchange.binance import BinanceClient

GOOD_ROW = [1700000000000, "100", "110", "90", "105", "12.5", 1700014399999, "1300", 42]


def _client(handler) -> BinanceClient:
    return BinanceClient(transport=httpx.MockTransport(handler))


def _fetch(handler, symbol="BTCUSDT", interval="4h", limit=None):
    async def run():
        client = _client(handler)
        try:
            return await fetch_candles(client, symbol, interval, limit)
        finally:
            await client.close()

    return asyncio.run(run())


class TestParameterSanitation:
    def test_clean_symbol(self):
        assert clean_symbol("btc usdt!") == "BTCUSDT"
        assert clean_symbol("eth/usdt") == "ETHUSDT"
        assert clean_symbol("1000pepeusdt") == "1000PEPEUSDT"

    def test_clean_symbol_empty(self):
        assert clean_symbol("") == ""
        assert clean_symbol("  -/!") == ""
        assert clean_symbol(None) == ""

    def test_resolve_interval(self):
        assert resolve_interval("15m") == "15m"
        assert resolve_interval("1D") == "1d"
        assert resolve_interval("1W") == "1w"

    def test_resolve_interval_falls_back(self):
        assert resolve_interval("9x") == "4h"
        assert resolve_interval("") == "4h"
        assert resolve_interval(None) == "4h"

    def test_monthly_interval_lowercases_to_minute(self):
        assert resolve_interval("1M") == "1m"

    @pytest.mark.parametrize(
        "limit, expected",
        [
            (5000, 1000),
            (0, 1),
            (-3, 1),
            (1, 1),
            (250, 250),
            (1000, 1000),
            (None, 500),
            ("300", 300),
            ("abc", 500),
            ("", 500),
            ("12abc", 12),
            ("5.7", 5),
            (" 40", 40),
            ("-5", 1),
            ("0007", 7),
            ("9" * 50, 1000),
            (5.7, 5),
            (float("inf"), 500),
        ],
    )
    def test_clamp_limit(self, limit, expected):
        assert clamp_limit(limit) == expected


class TestNormalizeKlines:
    def test_maps_fields_positionally(self):
        (c,) = normalize_klines([GOOD_ROW])
        assert c.open_time == 1700000000000
        assert (c.open, c.high, c.low, c.close, c.volume) == (100.0, 110.0, 90.0, 105.0, 12.5)

    def test_bad_volume_becomes_zero(self):
        (c,) = normalize_klines([[1700000000000, "100", "110", "90", "105", "bad"]])
        assert c.volume == 0
        assert c.open_time == 1700000000000
        assert (c.open, c.high, c.low, c.close) == (100.0, 110.0, 90.0, 105.0)

    def test_nan_close_dropped(self):
        rows = [[1700000000000, "100", "110", "90", "NaN", "1"], GOOD_ROW]
        candles = normalize_klines(rows)
        assert len(candles) == 1
        assert candles[0].close == 105.0

    def test_bad_open_time_dropped(self):
        assert normalize_klines([["soon", "100", "110", "90", "105", "1"]]) == []

    def test_short_and_non_list_rows_dropped(self):
        rows = [[1700000000000, "100", "110", "90", "105"], {"t": 1}, "row", None, GOOD_ROW]
        assert len(normalize_klines(rows)) == 1

    def test_non_list_body(self):
        assert normalize_klines({"code": -1121, "msg": "Invalid symbol."}) == []
        assert normalize_klines(None) == []

    def test_preserves_upstream_order(self):
        rows = [[3, "1", "1", "1", "1", "1"], [1, "1", "1", "1", "1", "1"], [2, "1", "1", "1", "1", "1"]]
        assert [c.open_time for c in normalize_klines(rows)] == [3, 1, 2]

    def test_non_finite_open_high_low_kept_as_none(self):
        (c,) = normalize_klines([[1700000000000, "bad", "inf", None, "105", "1"]])
        assert c.open is None
        assert c.high is None
        assert c.low == 0.0
        assert c.close == 105.0
        assert c.model_dump(by_alias=True)["open"] is None

    def test_open_price_garbage_keeps_row(self):
        candles = normalize_klines([[1700000000000, "bad", "110", "90", "105", "1"]])
        assert len(candles) == 1
        assert candles[0].open is None
        assert candles[0].high == 110.0

    def test_huge_integer_open_time_dropped(self):
        huge = 10 ** 400
        assert normalize_klines([[huge, "1", "1", "1", "1", "1"], GOOD_ROW]) == normalize_klines([GOOD_ROW])

    def test_huge_integer_price_becomes_none(self):
        (c,) = normalize_klines([[1700000000000, 10 ** 400, "110", "90", "105", 10 ** 400]])
        assert c.open is None
        assert c.volume == 0


class TestFetchCandles:
    def test_success(self):
        def handler(request):
            return httpx.Response(200, json=[GOOD_ROW])

        candles = _fetch(handler)
        assert len(candles) == 1
        assert candles[0].close == 105.0

    def test_sanitized_parameters_sent_upstream(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json=[])

        assert _fetch(handler, symbol="btc usdt!", interval="9x", limit=5000) == []
        assert seen == [{"symbol": "BTCUSDT", "interval": "4h", "limit": "1000"}]

    def test_default_limit(self):
        seen = []

        def handler(request):
            seen.append(request.url.params["limit"])
            return httpx.Response(200, json=[])

        _fetch(handler)
        assert seen == ["500"]

    def test_empty_symbol_skips_upstream(self):
        def handler(request):
            raise AssertionError("upstream must not be called")

        assert _fetch(handler, symbol="!!!") == []

    def test_error_status_returns_empty(self):
        def handler(request):
            return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})

        assert _fetch(handler) == []

    def test_network_error_returns_empty(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert _fetch(handler) == []

    def test_non_json_body_returns_empty(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        assert _fetch(handler) == []

    def test_non_array_body_returns_empty(self):
        def handler(request):
            return httpx.Response(200, content=json.dumps({"rows": [GOOD_ROW]}))

        assert _fetch(handler) == []

    def test_logs_failure_outside_production(self, capsys):
        from liquidityscan.logging import setup_logging

        setup_logging(level="INFO", log_format="json")

        def handler(request):
            return httpx.Response(503, text="busy")

        _fetch(handler)
        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "Binance klines error"
        assert line["status"] == 503

    def test_silent_when_logging_disabled(self, capsys):
        from liquidityscan.logging import setup_logging

        setup_logging(level="INFO", log_format="json")

        def handler(request):
            return httpx.Response(503, text="busy")

        async def run():
            client = _client(handler)
            try:
                return await fetch_candles(client, "BTCUSDT", "4h", log_errors=False)
            finally:
                await client.close()

        assert asyncio.run(run()) == []
        assert "Binance klines" not in capsys.readouterr().err

    def test_overflowing_open_time_returns_empty(self):
        def handler(request):
            return httpx.Response(200, json=[[10 ** 400, "1", "1", "1", "1", "1"]])

        assert _fetch(handler) == []

    def test_invalid_base_url_returns_empty(self):
        async def run():
            client = BinanceClient(base_url="http://[::1")
            try:
                return await fetch_candles(client, "BTCUSDT", "4h")
            finally:
                await client.close()

        assert asyncio.run(run()) == []

    def test_unexpected_client_error_returns_empty(self, capsys):
        from liquidityscan.logging import setup_logging

        setup_logging(level="INFO", log_format="json")

        class BrokenClient:
            async def get_klines(self, symbol, interval, limit):
                raise RuntimeError("event loop closed")

        assert asyncio.run(fetch_candles(BrokenClient(), "BTCUSDT", "4h")) == []
        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "Binance klines unexpected error"
        assert line["error_type"] == "RuntimeError"
