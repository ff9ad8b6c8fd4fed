"""
Volume Profile Data Models.

Core data structures for Volume Profile analysis:
- TradeEvent: Individual trade from exchange
- PriceBucket: Aggregated volume in one price bucket
- ProfileSummary: POC and Value Area bounds
- VolumeProfileResult: Complete profile for one batch of trades
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from orderflow.core.errors import InvalidParameterError

# Bucket centers are rounded to this many decimals to strip float noise
# (e.g. 1001 * 0.1 == 100.10000000000001)
PRICE_DECIMALS = 10


def bucket_index(price: float, bucket_width: float) -> int:
    """Index of the bucket containing price, on a grid anchored at zero."""
    return math.floor(price / bucket_width + 0.5)


def bucket_center(index: int, bucket_width: float) -> float:
    """Center price of the bucket at index."""
    return round(index * bucket_width, PRICE_DECIMALS)


def count_buckets(low_price: float, high_price: float, bucket_width: float) -> int:
    """Number of contiguous buckets spanning low_price to high_price."""
    return bucket_index(high_price, bucket_width) - bucket_index(low_price, bucket_width) + 1


@dataclass(frozen=True)
class TradeEvent:
    """
    Single trade from exchange.

    is_buyer_maker follows the Binance convention: True means the buyer's
    order was resting, so the seller was the aggressor.
    """

    price: float
    volume: float
    is_buyer_maker: bool
    timestamp: int  # epoch milliseconds
    symbol: str = ""  # Optional pair identifier

    def __post_init__(self) -> None:
        """Reject values that would corrupt aggregation totals."""
        if not math.isfinite(self.price) or self.price <= 0:
            raise InvalidParameterError(f"price must be positive and finite, got {self.price}")
        if not math.isfinite(self.volume) or self.volume < 0:
            raise InvalidParameterError(
                f"volume must be non-negative and finite, got {self.volume}"
            )
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise InvalidParameterError(
                f"timestamp must be integer epoch milliseconds, got {self.timestamp!r}"
            )

    @property
    def is_aggressive_buy(self) -> bool:
        """True when the taker bought (lifted the ask)."""
        return not self.is_buyer_maker

    @property
    def traded_at(self) -> datetime:
        """Trade time as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "price": self.price,
            "volume": self.volume,
            "isBuyerMaker": self.is_buyer_maker,
            "timestamp": self.timestamp,
            "symbol": self.symbol,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TradeEvent":
        """Create from dictionary."""
        return cls(
            price=float(data["price"]),
            volume=float(data["volume"]),
            is_buyer_maker=bool(data["isBuyerMaker"]),
            timestamp=int(data["timestamp"]),
            symbol=data.get("symbol", ""),
        )


@dataclass(frozen=True)
class PriceBucket:
    """
    Volume in one price bucket.

    price is the bucket center; the bucket covers
    [price - width/2, price + width/2).
    """

    price: float
    volume: float = 0.0
    buy_volume: float = 0.0  # Aggressive buys (taker bought)
    sell_volume: float = 0.0  # Aggressive sells (taker sold)
    is_poc: bool = False
    in_value_area: bool = False

    @property
    def delta(self) -> float:
        """Net buying pressure at this price."""
        return self.buy_volume - self.sell_volume

    def to_dict(self) -> dict:
        """Convert to the shape the chart renderer reads."""
        return {
            "price": self.price,
            "volume": self.volume,
            "isPOC": self.is_poc,
            "inValueArea": self.in_value_area,
        }


@dataclass(frozen=True)
class ProfileSummary:
    """Point of Control and Value Area bounds for one profile."""

    poc: float
    value_area_high: float
    value_area_low: float

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "poc": self.poc,
            "valueAreaHigh": self.value_area_high,
            "valueAreaLow": self.value_area_low,
        }


@dataclass(frozen=True)
class VolumeProfileResult:
    """
    Complete volume profile for one batch of trades.

    Buckets are contiguous and sorted by ascending price. Buckets inside the
    observed range that saw no trades are present with zero volume.
    """

    buckets: tuple[PriceBucket, ...]
    poc: float
    value_area_high: float
    value_area_low: float
    bucket_width: float
    value_area_fraction: float = 0.70
    symbol: str = ""
    trade_count: int = field(default=0, compare=False)

    @property
    def total_volume(self) -> float:
        """Total volume across all buckets."""
        return sum(b.volume for b in self.buckets)

    @property
    def value_area_volume(self) -> float:
        """Volume inside the Value Area."""
        return sum(b.volume for b in self.buckets if b.in_value_area)

    @property
    def total_delta(self) -> float:
        """Net buying pressure across all buckets."""
        return sum(b.delta for b in self.buckets)

    @property
    def summary(self) -> ProfileSummary:
        """POC and Value Area bounds."""
        return ProfileSummary(
            poc=self.poc,
            value_area_high=self.value_area_high,
            value_area_low=self.value_area_low,
        )

    @property
    def poc_bucket(self) -> PriceBucket:
        """The bucket flagged as Point of Control."""
        return next(b for b in self.buckets if b.is_poc)

    @property
    def price_range(self) -> tuple[float, float]:
        """Lowest and highest bucket centers."""
        return (self.buckets[0].price, self.buckets[-1].price)

    @property
    def bucket_count(self) -> int:
        """Number of buckets in the profile."""
        return len(self.buckets)

    def get_bucket(self, price: float) -> PriceBucket | None:
        """Get the bucket a trade at price was binned into, or None if outside."""
        if not self.buckets:
            return None
        first_idx = bucket_index(self.buckets[0].price, self.bucket_width)
        pos = bucket_index(price, self.bucket_width) - first_idx
        if 0 <= pos < len(self.buckets):
            return self.buckets[pos]
        return None

    def to_dict(self) -> dict:
        """Convert to the shape the chart renderer reads."""
        return {
            "buckets": [b.to_dict() for b in self.buckets],
            **self.summary.to_dict(),
        }
