"""
Unit tests for the Delta Volume aggregator.

Tests:
- Data models (DeltaBucket, DeltaSummary)
- compute_delta_volume (windowing, zero fill, labels)
- Summary functions (imbalance, bias, cumulative delta)
"""

import pytest

from orderflow.core.errors import EmptyInputError, InvalidParameterError
from orderflow.indicators.delta_volume import (
    DeltaBias,
    DeltaBucket,
    compute_delta_volume,
    cumulative_delta,
    format_window_label,
    get_imbalance_percent,
    summarize_delta,
    window_start,
)
from orderflow.indicators.volume_profile import TradeEvent

# 2026-01-20 10:00:00 UTC, a multiple of two minutes
BASE_MS = 1_768_903_200_000
TWO_MINUTES = 120_000


def make_trade(volume: float, side: str = "buy", timestamp: int = BASE_MS) -> TradeEvent:
    """Helper to create a trade; side is the aggressor ("buy" or "sell")."""
    return TradeEvent(
        price=100.0,
        volume=volume,
        is_buyer_maker=side == "sell",
        timestamp=timestamp,
        symbol="BTCUSDT",
    )


def two_window_trades() -> list[TradeEvent]:
    """Window 1: buy 10 / sell 5. Window 2: buy 4 / sell 7."""
    return [
        make_trade(10, "buy", BASE_MS),
        make_trade(5, "sell", BASE_MS + 30_000),
        make_trade(4, "buy", BASE_MS + TWO_MINUTES),
        make_trade(7, "sell", BASE_MS + TWO_MINUTES + 90_000),
    ]


# =============================================================================
# Test Data Models
# =============================================================================


class TestDeltaBucket:
    """Tests for DeltaBucket data model."""

    def test_delta_and_total(self) -> None:
        """Test derived delta and total volume."""
        bucket = DeltaBucket(time=BASE_MS, buy_volume=10, sell_volume=5, trade_count=2)

        assert bucket.delta == 5
        assert bucket.total_volume == 15
        assert not bucket.is_empty

    def test_to_dict(self) -> None:
        """Test the renderer-facing dictionary shape."""
        bucket = DeltaBucket(
            time=BASE_MS,
            buy_volume=4,
            sell_volume=7,
            timestamp_label="2026-01-20 10:00:00",
        )
        assert bucket.to_dict() == {
            "time": BASE_MS,
            "delta": -3,
            "buyVolume": 4,
            "sellVolume": 7,
            "timestamp": "2026-01-20 10:00:00",
        }


# =============================================================================
# Test compute_delta_volume
# =============================================================================


class TestComputeDeltaVolume:
    """Tests for time windowing."""

    def test_two_windows(self) -> None:
        """Test buys and sells land in their windows."""
        buckets = compute_delta_volume(two_window_trades(), TWO_MINUTES)

        assert [b.time for b in buckets] == [BASE_MS, BASE_MS + TWO_MINUTES]
        assert [(b.buy_volume, b.sell_volume) for b in buckets] == [(10, 5), (4, 7)]
        assert [b.delta for b in buckets] == [5, -3]
        assert [b.trade_count for b in buckets] == [2, 2]

    def test_delta_equals_buy_minus_sell(self) -> None:
        """Test the delta invariant on every bucket."""
        trades = [
            make_trade(1 + i % 5, "buy" if i % 3 else "sell", BASE_MS + i * 17_000)
            for i in range(40)
        ]
        for bucket in compute_delta_volume(trades, 60_000):
            assert bucket.delta == bucket.buy_volume - bucket.sell_volume

    def test_windows_are_epoch_aligned(self) -> None:
        """Test a window covers [start, start + size)."""
        trades = [
            make_trade(1, timestamp=BASE_MS + TWO_MINUTES - 1),
            make_trade(2, timestamp=BASE_MS + TWO_MINUTES),
        ]
        buckets = compute_delta_volume(trades, TWO_MINUTES)

        assert [b.time for b in buckets] == [BASE_MS, BASE_MS + TWO_MINUTES]
        assert [b.buy_volume for b in buckets] == [1, 2]
        assert all(b.time % TWO_MINUTES == 0 for b in buckets)

    def test_zero_fill(self) -> None:
        """Test windows without trades appear as zero buckets."""
        trades = [
            make_trade(3, timestamp=BASE_MS),
            make_trade(2, "sell", timestamp=BASE_MS + 3 * TWO_MINUTES),
        ]
        buckets = compute_delta_volume(trades, TWO_MINUTES)

        assert len(buckets) == 4
        assert [b.delta for b in buckets] == [3, 0, 0, -2]
        assert [b.is_empty for b in buckets] == [False, True, True, False]

    def test_without_zero_fill(self) -> None:
        """Test only windows with trades are emitted."""
        trades = [
            make_trade(3, timestamp=BASE_MS),
            make_trade(2, "sell", timestamp=BASE_MS + 3 * TWO_MINUTES),
        ]
        buckets = compute_delta_volume(trades, TWO_MINUTES, zero_fill=False)

        assert [b.time for b in buckets] == [BASE_MS, BASE_MS + 3 * TWO_MINUTES]

    def test_chronological_output(self) -> None:
        """Test unsorted input gives an ascending series."""
        buckets = compute_delta_volume(list(reversed(two_window_trades())), TWO_MINUTES)
        assert [b.time for b in buckets] == sorted(b.time for b in buckets)

    def test_timestamp_labels(self) -> None:
        """Test labels are UTC window starts."""
        buckets = compute_delta_volume(two_window_trades(), TWO_MINUTES)

        assert buckets[0].timestamp_label == "2026-01-20 10:00:00"
        assert buckets[1].timestamp_label == "2026-01-20 10:02:00"

    def test_same_input_same_result(self) -> None:
        """Test repeated calls give equal results."""
        trades = two_window_trades()
        assert compute_delta_volume(trades, TWO_MINUTES) == compute_delta_volume(
            trades, TWO_MINUTES
        )

    def test_empty_input(self) -> None:
        """Test empty input raises EmptyInputError."""
        with pytest.raises(EmptyInputError):
            compute_delta_volume([], TWO_MINUTES)

    @pytest.mark.parametrize("size", [0, -1000, 1.5, True])
    def test_invalid_window_size(self, size) -> None:
        """Test non-positive and non-integer sizes are rejected."""
        with pytest.raises(InvalidParameterError):
            compute_delta_volume(two_window_trades(), size)

    def test_parameters_checked_before_input(self) -> None:
        """A bad window size wins over empty input."""
        with pytest.raises(InvalidParameterError):
            compute_delta_volume([], 0)


class TestWindowHelpers:
    """Tests for window_start and format_window_label."""

    def test_window_start(self) -> None:
        """Test flooring to the window grid."""
        assert window_start(BASE_MS + 119_999, TWO_MINUTES) == BASE_MS
        assert window_start(BASE_MS + TWO_MINUTES, TWO_MINUTES) == BASE_MS + TWO_MINUTES

    def test_format_window_label(self) -> None:
        """Test label format."""
        assert format_window_label(BASE_MS + 61_000) == "2026-01-20 10:01:01"


# =============================================================================
# Test Summary Functions
# =============================================================================


class TestSummarizeDelta:
    """Tests for totals, imbalance and bias."""

    def test_totals_and_imbalance(self) -> None:
        """Test totals over the two-window example."""
        summary = summarize_delta(compute_delta_volume(two_window_trades(), TWO_MINUTES))

        assert summary.total_buy == 14
        assert summary.total_sell == 12
        assert summary.total_delta == 2
        assert summary.imbalance_percent == pytest.approx(2 / 26 * 100)
        assert summary.bias is DeltaBias.NEUTRAL

    def test_empty_series(self) -> None:
        """Test an empty series gives zeros, not a division error."""
        summary = summarize_delta([])

        assert summary.total_delta == 0
        assert summary.imbalance_percent == 0
        assert summary.bias is DeltaBias.NEUTRAL

    def test_bullish_bias(self) -> None:
        """Test strong net buying is bullish."""
        buckets = compute_delta_volume([make_trade(10), make_trade(5, "sell")], TWO_MINUTES)
        assert summarize_delta(buckets).bias is DeltaBias.BULLISH

    def test_bearish_bias(self) -> None:
        """Test strong net selling is bearish."""
        buckets = compute_delta_volume([make_trade(2), make_trade(8, "sell")], TWO_MINUTES)

        summary = summarize_delta(buckets)
        assert summary.bias is DeltaBias.BEARISH
        assert summary.imbalance_percent == pytest.approx(60.0)

    def test_small_imbalance_is_neutral(self) -> None:
        """Test imbalance under the threshold stays neutral."""
        buckets = compute_delta_volume([make_trade(11), make_trade(9, "sell")], TWO_MINUTES)
        assert summarize_delta(buckets).bias is DeltaBias.NEUTRAL

    def test_custom_threshold(self) -> None:
        """Test the bias threshold is configurable."""
        buckets = compute_delta_volume([make_trade(11), make_trade(9, "sell")], TWO_MINUTES)
        assert summarize_delta(buckets, bias_threshold_pct=5.0).bias is DeltaBias.BULLISH

    def test_invalid_threshold(self) -> None:
        """Test thresholds outside 0-100 are rejected."""
        with pytest.raises(InvalidParameterError):
            summarize_delta([], bias_threshold_pct=150)

    def test_to_dict(self) -> None:
        """Test the header dictionary shape."""
        d = summarize_delta(compute_delta_volume(two_window_trades(), TWO_MINUTES)).to_dict()

        assert d["totalDelta"] == 2
        assert d["totalBuy"] == 14
        assert d["totalSell"] == 12
        assert d["bias"] == "NEUTRAL"


class TestImbalanceAndCumulative:
    """Tests for get_imbalance_percent and cumulative_delta."""

    def test_imbalance_percent(self) -> None:
        """Test |delta| over total volume."""
        assert get_imbalance_percent(-3, 4, 7) == pytest.approx(3 / 11 * 100)
        assert get_imbalance_percent(0, 0, 0) == 0.0

    def test_cumulative_delta(self) -> None:
        """Test the running delta sum."""
        buckets = compute_delta_volume(two_window_trades(), TWO_MINUTES)
        assert cumulative_delta(buckets) == [5, 2]
        assert cumulative_delta([]) == []
