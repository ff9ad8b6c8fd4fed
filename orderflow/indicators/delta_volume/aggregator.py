"""
Delta Volume Aggregator.

Splits trades into fixed time windows and measures aggressive buy vs
aggressive sell volume in each one.

Windows are aligned to the epoch (a 2 minute window always starts on an
even minute), so the same trade lands in the same window on every call.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from orderflow.core.config import check_time_bucket_size
from orderflow.core.errors import EmptyInputError, InvalidParameterError
from orderflow.indicators.volume_profile.models import TradeEvent

from .models import DeltaBias, DeltaBucket, DeltaSummary

logger = logging.getLogger(__name__)

TIMESTAMP_LABEL_FORMAT = "%Y-%m-%d %H:%M:%S"


def window_start(timestamp_ms: int, time_bucket_size_ms: int) -> int:
    """Start of the window containing timestamp_ms."""
    return (timestamp_ms // time_bucket_size_ms) * time_bucket_size_ms


def format_window_label(time_ms: int) -> str:
    """UTC label for a window start, e.g. '2026-01-20 10:02:00'."""
    return datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc).strftime(
        TIMESTAMP_LABEL_FORMAT
    )


def compute_delta_volume(
    events: Iterable[TradeEvent],
    time_bucket_size_ms: int,
    zero_fill: bool = True,
) -> list[DeltaBucket]:
    """
    Aggregate trades into a chronological delta series.

    Aggressive buys are trades with is_buyer_maker == False; aggressive
    sells have is_buyer_maker == True.

    Args:
        events: Trades to aggregate (must not be empty)
        time_bucket_size_ms: Window width in milliseconds
        zero_fill: Emit empty windows between the first and last trade
            as zero buckets (keeps even spacing on the chart)

    Returns:
        DeltaBucket list, oldest first

    Raises:
        EmptyInputError: No events supplied
        InvalidParameterError: Window size not a positive integer
    """
    size = check_time_bucket_size(time_bucket_size_ms)

    # window start -> [buy, sell, count]
    windows: dict[int, list[float]] = {}
    for event in events:
        totals = windows.setdefault(window_start(event.timestamp, size), [0.0, 0.0, 0])
        if event.is_aggressive_buy:
            totals[0] += event.volume
        else:
            totals[1] += event.volume
        totals[2] += 1

    if not windows:
        raise EmptyInputError("Cannot build a delta series from zero trades")

    if zero_fill:
        starts: Iterable[int] = range(min(windows), max(windows) + size, size)
    else:
        starts = sorted(windows)

    buckets = []
    for start in starts:
        buy, sell, count = windows.get(start, (0.0, 0.0, 0))
        buckets.append(
            DeltaBucket(
                time=start,
                buy_volume=buy,
                sell_volume=sell,
                timestamp_label=format_window_label(start),
                trade_count=int(count),
            )
        )

    logger.debug(
        "Delta volume: %d windows of %dms (%d with trades)",
        len(buckets),
        size,
        len(windows),
    )
    return buckets


def get_imbalance_percent(total_delta: float, total_buy: float, total_sell: float) -> float:
    """|delta| as a percentage of all aggressive volume (0 when there is none)."""
    total = total_buy + total_sell
    if total == 0:
        return 0.0
    return abs(total_delta) / total * 100


def summarize_delta(
    buckets: Sequence[DeltaBucket],
    bias_threshold_pct: float = 20.0,
) -> DeltaSummary:
    """
    Total a delta series.

    Args:
        buckets: Output of compute_delta_volume (may be empty)
        bias_threshold_pct: Imbalance % above which the bias is directional

    Returns:
        DeltaSummary with totals, imbalance % and bias
    """
    if not (0 <= bias_threshold_pct <= 100):
        raise InvalidParameterError(
            f"bias_threshold_pct must be between 0 and 100, got {bias_threshold_pct}"
        )

    total_buy = sum(b.buy_volume for b in buckets)
    total_sell = sum(b.sell_volume for b in buckets)
    total_delta = sum(b.delta for b in buckets)
    imbalance = get_imbalance_percent(total_delta, total_buy, total_sell)

    if imbalance > bias_threshold_pct and total_delta > 0:
        bias = DeltaBias.BULLISH
    elif imbalance > bias_threshold_pct and total_delta < 0:
        bias = DeltaBias.BEARISH
    else:
        bias = DeltaBias.NEUTRAL

    return DeltaSummary(
        total_delta=total_delta,
        total_buy=total_buy,
        total_sell=total_sell,
        imbalance_percent=imbalance,
        bias=bias,
    )


def cumulative_delta(buckets: Sequence[DeltaBucket]) -> list[float]:
    """Running sum of delta across the series."""
    running = 0.0
    series = []
    for bucket in buckets:
        running += bucket.delta
        series.append(running)
    return series
