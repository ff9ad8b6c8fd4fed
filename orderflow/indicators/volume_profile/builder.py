"""
Volume Profile Builder.

Builds a Volume Profile from trade data (tick-by-tick).

Works with both:
- Historical trades (from Parquet/CSV files)
- Recent trades (from the Binance aggTrades endpoint)

Usage:
    profile = compute_volume_profile(trades, bucket_width=10.0)
    print(f"POC: {profile.poc}")

    builder = VolumeProfileBuilder(bucket_width=10.0)
    builder.add_trades(trades)
    profile = builder.build()
"""

import logging
from collections.abc import Iterable, Sequence

from orderflow.core.config import (
    MAX_BUCKETS,
    TieBreak,
    check_bucket_width,
    check_max_buckets,
    check_tie_break,
    check_value_area_fraction,
)
from orderflow.core.errors import EmptyInputError, InvalidParameterError

from .models import (
    PriceBucket,
    TradeEvent,
    VolumeProfileResult,
    bucket_center,
    bucket_index,
)

logger = logging.getLogger(__name__)


def find_poc_index(volumes: Sequence[float]) -> int:
    """
    Position of the Point of Control in an ascending-price volume list.

    Ties resolve to the lowest price.
    """
    poc_idx = 0
    for idx, volume in enumerate(volumes):
        if volume > volumes[poc_idx]:
            poc_idx = idx
    return poc_idx


def expand_value_area(
    volumes: Sequence[float],
    poc_idx: int,
    value_area_fraction: float,
    tie_break: TieBreak = "above",
) -> tuple[int, int]:
    """
    Grow the Value Area outward from the POC.

    Algorithm:
    1. Start at POC
    2. Compare the next bucket above and below the current span
    3. Add the one with more volume (tie_break side on equal volume)
    4. When one side runs out, keep taking the other
    5. Stop once accumulated volume reaches the target or nothing is left

    Args:
        volumes: Bucket volumes, ascending by price, contiguous
        poc_idx: Position of the POC in volumes
        value_area_fraction: Target share of total volume
        tie_break: "above" or "below"

    Returns:
        (low_idx, high_idx) inclusive positions of the Value Area
    """
    target_volume = sum(volumes) * value_area_fraction
    last_idx = len(volumes) - 1

    low_idx = poc_idx
    high_idx = poc_idx
    accumulated = volumes[poc_idx]

    while accumulated < target_volume and (low_idx > 0 or high_idx < last_idx):
        has_above = high_idx < last_idx
        has_below = low_idx > 0

        if has_above and has_below:
            volume_above = volumes[high_idx + 1]
            volume_below = volumes[low_idx - 1]
            if volume_above == volume_below:
                take_above = tie_break == "above"
            else:
                take_above = volume_above > volume_below
        else:
            take_above = has_above

        if take_above:
            high_idx += 1
            accumulated += volumes[high_idx]
        else:
            low_idx -= 1
            accumulated += volumes[low_idx]

    return low_idx, high_idx


def compute_volume_profile(
    events: Iterable[TradeEvent],
    bucket_width: float,
    value_area_fraction: float = 0.70,
    tie_break: TieBreak = "above",
    max_buckets: int = MAX_BUCKETS,
) -> VolumeProfileResult:
    """
    Bin trade volume into price buckets and mark the POC and Value Area.

    Pure function: no state survives between calls.

    Args:
        events: Trades to aggregate (must not be empty)
        bucket_width: Price increment per bucket
        value_area_fraction: Share of total volume in the Value Area, in (0, 1]
        tie_break: Side the Value Area grows into when neighbours tie
        max_buckets: Most buckets the profile may span

    Returns:
        VolumeProfileResult with contiguous ascending buckets

    Raises:
        EmptyInputError: No events supplied
        InvalidParameterError: Width, fraction or tie_break out of range, or the
            price range needs more than max_buckets buckets
    """
    width = check_bucket_width(bucket_width)
    fraction = check_value_area_fraction(value_area_fraction)
    side = check_tie_break(tie_break)
    cap = check_max_buckets(max_buckets)

    events = list(events)
    if not events:
        raise EmptyInputError("Cannot build a volume profile from zero trades")

    # index -> [total, buy, sell]
    by_index: dict[int, list[float]] = {}
    for event in events:
        totals = by_index.setdefault(bucket_index(event.price, width), [0.0, 0.0, 0.0])
        totals[0] += event.volume
        if event.is_aggressive_buy:
            totals[1] += event.volume
        else:
            totals[2] += event.volume

    first_idx = min(by_index)
    last_idx = max(by_index)
    if last_idx - first_idx + 1 > cap:
        raise InvalidParameterError(
            f"{last_idx - first_idx + 1} buckets of width {width:g} exceed max_buckets {cap}; "
            "use a wider bucket"
        )
    indices = range(first_idx, last_idx + 1)
    volumes = [by_index[i][0] if i in by_index else 0.0 for i in indices]

    poc_pos = find_poc_index(volumes)
    va_low_pos, va_high_pos = expand_value_area(volumes, poc_pos, fraction, side)

    buckets = []
    for pos, idx in enumerate(indices):
        total, buy, sell = by_index.get(idx, (0.0, 0.0, 0.0))
        buckets.append(
            PriceBucket(
                price=bucket_center(idx, width),
                volume=total,
                buy_volume=buy,
                sell_volume=sell,
                is_poc=pos == poc_pos,
                in_value_area=va_low_pos <= pos <= va_high_pos,
            )
        )

    result = VolumeProfileResult(
        buckets=tuple(buckets),
        poc=buckets[poc_pos].price,
        value_area_high=buckets[va_high_pos].price,
        value_area_low=buckets[va_low_pos].price,
        bucket_width=width,
        value_area_fraction=fraction,
        symbol=events[0].symbol,
        trade_count=len(events),
    )

    logger.debug(
        "Volume profile: %d trades -> %d buckets, POC %s, VA %s-%s",
        len(events),
        len(buckets),
        result.poc,
        result.value_area_low,
        result.value_area_high,
    )
    return result


class VolumeProfileBuilder:
    """
    Collects trades and builds a Volume Profile on demand.

    The builder only stores the raw trades. Every build() call runs
    compute_volume_profile over the collected batch from scratch.
    """

    def __init__(
        self,
        bucket_width: float = 10.0,
        value_area_fraction: float = 0.70,
        tie_break: TieBreak = "above",
        symbol: str = "",
        max_buckets: int = MAX_BUCKETS,
    ):
        """
        Initialize the builder.

        Args:
            bucket_width: Price bucket size (e.g., $10 for BTC)
            value_area_fraction: Value Area share of volume
            tie_break: Value Area tie-break side
            symbol: Only accept trades for this pair (empty = accept all)
            max_buckets: Most buckets a built profile may span
        """
        self.bucket_width = check_bucket_width(bucket_width)
        self.value_area_fraction = check_value_area_fraction(value_area_fraction)
        self.tie_break = check_tie_break(tie_break)
        self.symbol = symbol
        self.max_buckets = check_max_buckets(max_buckets)

        self._trades: list[TradeEvent] = []

    def add_trade(self, trade: TradeEvent) -> bool:
        """
        Add a single trade.

        Args:
            trade: TradeEvent to add

        Returns:
            True if the trade was accepted, False if filtered by symbol
        """
        if self.symbol and trade.symbol and trade.symbol != self.symbol:
            return False

        self._trades.append(trade)
        return True

    def add_trades(self, trades: Iterable[TradeEvent]) -> int:
        """
        Add multiple trades.

        Args:
            trades: TradeEvent objects

        Returns:
            Number of trades accepted
        """
        return sum(1 for trade in trades if self.add_trade(trade))

    def build(self) -> VolumeProfileResult:
        """
        Build the profile for the trades collected so far.

        Raises:
            EmptyInputError: No trades collected yet
        """
        return compute_volume_profile(
            self._trades,
            bucket_width=self.bucket_width,
            value_area_fraction=self.value_area_fraction,
            tie_break=self.tie_break,
            max_buckets=self.max_buckets,
        )

    def reset(self) -> None:
        """Clear all collected trades."""
        self._trades.clear()

    @property
    def trades(self) -> list[TradeEvent]:
        """Copy of the collected trades, in insertion order."""
        return list(self._trades)

    @property
    def trade_count(self) -> int:
        """Number of trades collected."""
        return len(self._trades)

    @property
    def total_volume(self) -> float:
        """Total volume collected."""
        return sum(t.volume for t in self._trades)

    @property
    def is_empty(self) -> bool:
        """Check if no trades have been collected."""
        return not self._trades
