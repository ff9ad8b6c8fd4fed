"""
Unit tests for the Binance aggTrades fetcher.

HTTP is served by httpx.MockTransport; nothing touches the network.
"""

from datetime import datetime, timezone

import httpx
import pytest

from orderflow.historical import binance
from orderflow.historical.binance import BinanceTradeFetcher, parse_agg_trade

# 2026-01-20 10:00:00 UTC
BASE_MS = 1_768_903_200_000
HOUR_MS = 60 * 60 * 1000


def agg_trade(trade_id: int, timestamp: int, price: str = "100000.00", maker: bool = False) -> dict:
    """Helper to build a REST aggTrade payload."""
    return {
        "a": trade_id,
        "p": price,
        "q": "0.50000000",
        "f": trade_id,
        "l": trade_id,
        "T": timestamp,
        "m": maker,
        "M": True,
    }


def make_fetcher(handler) -> BinanceTradeFetcher:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return BinanceTradeFetcher(client=client, request_delay=0)


class TestParseAggTrade:
    """Tests for parse_agg_trade."""

    def test_rest_payload(self) -> None:
        """Test a REST payload maps onto TradeEvent."""
        trade = parse_agg_trade(agg_trade(1, BASE_MS, maker=True), symbol="BTCUSDT")

        assert trade.price == 100000.0
        assert trade.volume == 0.5
        assert trade.is_buyer_maker is True
        assert trade.timestamp == BASE_MS
        assert trade.symbol == "BTCUSDT"

    def test_stream_symbol_wins(self) -> None:
        """Test the websocket symbol field is used when present."""
        payload = {**agg_trade(1, BASE_MS), "e": "aggTrade", "s": "ETHUSDT"}
        assert parse_agg_trade(payload, symbol="BTCUSDT").symbol == "ETHUSDT"

    def test_missing_field(self) -> None:
        """Test missing fields raise ValueError."""
        with pytest.raises(ValueError, match="missing field"):
            parse_agg_trade({"p": "1", "q": "1", "m": False})

    def test_malformed_value(self) -> None:
        """Test unparseable values raise ValueError."""
        with pytest.raises(ValueError):
            parse_agg_trade({**agg_trade(1, BASE_MS), "p": "not-a-price"})


class TestFetchRecent:
    """Tests for fetch_recent."""

    def test_fetch_recent(self) -> None:
        """Test the request parameters and parsed result."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[agg_trade(1, BASE_MS), agg_trade(2, BASE_MS + 1)])

        with make_fetcher(handler) as fetcher:
            trades = fetcher.fetch_recent("btcusdt", limit=2)

        assert [t.timestamp for t in trades] == [BASE_MS, BASE_MS + 1]
        assert seen[0].url.path == "/api/v3/aggTrades"
        assert seen[0].url.params["symbol"] == "BTCUSDT"
        assert seen[0].url.params["limit"] == "2"

    def test_limit_range(self) -> None:
        """Test limits outside 1-1000 are rejected before any request."""
        fetcher = make_fetcher(lambda request: httpx.Response(500))
        with pytest.raises(ValueError):
            fetcher.fetch_recent("BTCUSDT", limit=0)
        with pytest.raises(ValueError):
            fetcher.fetch_recent("BTCUSDT", limit=1001)

    def test_api_error(self) -> None:
        """Test Binance error payloads raise RuntimeError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})

        with pytest.raises(RuntimeError, match="Invalid symbol"):
            make_fetcher(handler).fetch_recent("NOPE")


class TestFetchRange:
    """Tests for fetch over a time range."""

    def test_walks_hour_windows(self) -> None:
        """Test long ranges are split into one-hour requests."""
        windows = []

        def handler(request: httpx.Request) -> httpx.Response:
            start = int(request.url.params["startTime"])
            end = int(request.url.params["endTime"])
            windows.append((start, end))
            return httpx.Response(200, json=[agg_trade(len(windows), start)])

        start = datetime.fromtimestamp(BASE_MS / 1000, tz=timezone.utc)
        end = datetime.fromtimestamp((BASE_MS + 2 * HOUR_MS + HOUR_MS // 2) / 1000, tz=timezone.utc)
        trades = make_fetcher(handler).fetch("BTCUSDT", start, end)

        assert windows == [
            (BASE_MS, BASE_MS + HOUR_MS - 1),
            (BASE_MS + HOUR_MS, BASE_MS + 2 * HOUR_MS - 1),
            (BASE_MS + 2 * HOUR_MS, BASE_MS + 2 * HOUR_MS + HOUR_MS // 2),
        ]
        assert len(trades) == 3

    def test_pages_full_window_by_id(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a full page continues with fromId and stops past the end."""
        monkeypatch.setattr(binance, "MAX_LIMIT", 2)
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            params = dict(request.url.params)
            requests.append(params)
            if "fromId" not in params:
                return httpx.Response(200, json=[agg_trade(1, BASE_MS), agg_trade(2, BASE_MS + 10)])
            return httpx.Response(
                200, json=[agg_trade(3, BASE_MS + 20), agg_trade(4, BASE_MS + 10 * 60_000)]
            )

        start = datetime.fromtimestamp(BASE_MS / 1000, tz=timezone.utc)
        end = datetime.fromtimestamp((BASE_MS + 60_000) / 1000, tz=timezone.utc)
        trades = make_fetcher(handler).fetch("BTCUSDT", start, end)

        assert [t.timestamp for t in trades] == [BASE_MS, BASE_MS + 10, BASE_MS + 20]
        assert requests[1]["fromId"] == "3"
        assert len(requests) == 2

    def test_end_before_start(self) -> None:
        """Test an inverted range is rejected."""
        fetcher = make_fetcher(lambda request: httpx.Response(200, json=[]))
        start = datetime(2026, 1, 20, 11, tzinfo=timezone.utc)
        with pytest.raises(ValueError):
            fetcher.fetch("BTCUSDT", start, datetime(2026, 1, 20, 10, tzinfo=timezone.utc))
