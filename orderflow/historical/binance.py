"""
Binance Aggregated Trades Fetcher.

Downloads aggregated trades (aggTrades) from Binance's public spot API and
maps them to TradeEvent objects.

Binance aggTrade payload (REST):
    {"a": 26129, "p": "0.01633102", "q": "4.70443515", "f": 27781, "l": 27781,
     "T": 1498793709153, "m": true, "M": true}

The websocket stream adds "e": "aggTrade", "E" (event time) and "s" (symbol).
"m" is "was the buyer the maker", so m == true is an aggressive sell.
"""

import logging
import time
from datetime import datetime

import httpx

from orderflow.indicators.volume_profile.models import TradeEvent

logger = logging.getLogger(__name__)

# Binance API endpoint
BINANCE_API_URL = "https://api.binance.com"
AGG_TRADES_PATH = "/api/v3/aggTrades"

# Maximum trades per request (Binance limit)
MAX_LIMIT = 1000

# startTime/endTime queries must span less than one hour
MAX_WINDOW_MS = 60 * 60 * 1000


def parse_agg_trade(data: dict, symbol: str = "") -> TradeEvent:
    """
    Convert a Binance aggTrade payload to a TradeEvent.

    Args:
        data: REST or websocket aggTrade object
        symbol: Symbol to use when the payload carries none

    Returns:
        TradeEvent

    Raises:
        ValueError: Payload is missing fields or has malformed values
    """
    try:
        return TradeEvent(
            price=float(data["p"]),
            volume=float(data["q"]),
            is_buyer_maker=bool(data["m"]),
            timestamp=int(data["T"]),
            symbol=data.get("s", symbol),
        )
    except KeyError as e:
        raise ValueError(f"aggTrade payload missing field {e}: {data}") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Malformed aggTrade payload: {data} ({e})") from e


class BinanceTradeFetcher:
    """
    Fetches aggregated trades from Binance.

    Usage:
        with BinanceTradeFetcher() as fetcher:
            trades = fetcher.fetch(
                symbol="BTCUSDT",
                start=datetime(2026, 1, 12, 10, 15, tzinfo=timezone.utc),
                end=datetime(2026, 1, 12, 11, 15, tzinfo=timezone.utc),
            )
    """

    def __init__(
        self,
        base_url: str = BINANCE_API_URL,
        client: httpx.Client | None = None,
        request_delay: float = 0.1,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: API root (override for testnet or mirrors)
            client: Preconfigured httpx client (a new one is created if omitted)
            request_delay: Seconds to sleep between paginated requests
        """
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=30.0)
        self.request_delay = request_delay

    def __enter__(self) -> "BinanceTradeFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()

    def _request(self, params: dict[str, str | int]) -> list[dict]:
        """Run one aggTrades request and return the raw list."""
        response = self.client.get(f"{self.base_url}{AGG_TRADES_PATH}", params=params)
        data = response.json()

        if isinstance(data, dict) and "code" in data:
            raise RuntimeError(
                f"Binance API error {data['code']}: {data.get('msg', 'Unknown error')}"
            )
        response.raise_for_status()

        if not isinstance(data, list):
            raise RuntimeError(f"Unexpected Binance response: {data!r}")
        return data

    def fetch_recent(self, symbol: str, limit: int = 500) -> list[TradeEvent]:
        """
        Fetch the most recent aggregated trades.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            limit: Number of trades (1-1000)

        Returns:
            TradeEvent list, oldest first
        """
        if not (1 <= limit <= MAX_LIMIT):
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}, got {limit}")

        symbol = symbol.upper()
        batch = self._request({"symbol": symbol, "limit": limit})
        trades = [parse_agg_trade(item, symbol) for item in batch]
        logger.info("Fetched %d recent %s trades", len(trades), symbol)
        return trades

    def fetch(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
        verbose: bool = False,
    ) -> list[TradeEvent]:
        """
        Fetch all aggregated trades in [start, end].

        Walks the range in one-hour windows; a window holding more than
        MAX_LIMIT trades is paged through by trade id.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            start: Start datetime
            end: End datetime
            verbose: Print progress

        Returns:
            TradeEvent list sorted by timestamp ascending
        """
        symbol = symbol.upper()
        start_ms = int(start.timestamp() * 1000)
        end_ms = int(end.timestamp() * 1000)
        if end_ms < start_ms:
            raise ValueError("end must not be before start")

        trades: list[TradeEvent] = []
        window_start = start_ms
        from_id: int | None = None
        request_count = 0

        while True:
            params: dict[str, str | int] = {"symbol": symbol, "limit": MAX_LIMIT}
            if from_id is None:
                if window_start > end_ms:
                    break
                window_end = min(window_start + MAX_WINDOW_MS - 1, end_ms)
                params["startTime"] = window_start
                params["endTime"] = window_end
            else:
                params["fromId"] = from_id

            batch = self._request(params)
            request_count += 1

            reached_end = False
            for item in batch:
                trade = parse_agg_trade(item, symbol)
                if trade.timestamp > end_ms:
                    reached_end = True
                    break
                if trade.timestamp >= start_ms:
                    trades.append(trade)

            if reached_end:
                break
            if len(batch) == MAX_LIMIT:
                # Window holds more trades than one page; continue by id
                from_id = int(batch[-1]["a"]) + 1
            elif from_id is None:
                window_start = window_end + 1
            else:
                # Paged up to the newest trade
                break

            if verbose and request_count % 5 == 0:
                print(f"   ... fetched {len(trades)} trades so far")

            # Rate limiting - be nice to the API
            if self.request_delay:
                time.sleep(self.request_delay)

        trades.sort(key=lambda t: t.timestamp)

        if verbose:
            print(f"✅ Received {len(trades)} trades")
        logger.info("Fetched %d %s trades in %d requests", len(trades), symbol, request_count)

        return trades
