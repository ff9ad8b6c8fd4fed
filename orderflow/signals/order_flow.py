"""
Order Flow Snapshot and Signal Detector.

analyze_order_flow() runs both aggregators over one batch of trades and
packs the results into an immutable snapshot. Callers recompute the
snapshot whenever their trade batch changes and hand it to the panels;
nothing is cached between calls.

OrderFlowSignalDetector reads snapshots and emits LONG/SHORT signals:
1. Strong buying delta with price at or below the POC -> LONG
2. Strong selling delta with price at or above the POC -> SHORT
Extra confirmation comes from a POC test or a Value Area breakout.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from orderflow.core.config import DEFAULT_CONFIG, OrderFlowConfig
from orderflow.core.errors import EmptyInputError
from orderflow.indicators.delta_volume import (
    DeltaBias,
    DeltaBucket,
    DeltaSummary,
    compute_delta_volume,
    summarize_delta,
)
from orderflow.indicators.volume_profile import (
    PocPosition,
    TradeEvent,
    ValueAreaPosition,
    VolumeProfileResult,
    compute_volume_profile,
    get_hvn_levels,
    get_lvn_levels,
    get_poc_position,
    get_value_area_position,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderFlowSnapshot:
    """Everything the order flow panels show for one batch of trades."""

    symbol: str
    current_price: float
    as_of: datetime
    profile: VolumeProfileResult
    delta_buckets: tuple[DeltaBucket, ...]
    delta_summary: DeltaSummary
    poc_position: PocPosition
    poc_distance_pct: float
    value_area_position: ValueAreaPosition
    hvn_levels: tuple[float, ...] = ()
    lvn_levels: tuple[float, ...] = ()

    @property
    def reasons(self) -> list[str]:
        """Human-readable description of the current order flow."""
        summary = self.delta_summary
        profile = self.profile
        reasons = []

        if summary.bias is DeltaBias.BULLISH:
            reasons.append(f"Strong buying pressure: Delta +{summary.total_delta:,.0f}")
        elif summary.bias is DeltaBias.BEARISH:
            reasons.append(f"Strong selling pressure: Delta {summary.total_delta:,.0f}")
        else:
            reasons.append(
                f"Balanced order flow: imbalance {summary.imbalance_percent:.1f}%"
            )

        if self.poc_position is PocPosition.AT_POC:
            reasons.append(f"Price testing POC at {profile.poc:,.2f}")
        else:
            side = "above" if self.poc_position is PocPosition.ABOVE_POC else "below"
            reasons.append(
                f"Price {abs(self.poc_distance_pct):.2f}% {side} POC at {profile.poc:,.2f}"
            )

        if self.value_area_position is ValueAreaPosition.ABOVE_VALUE_AREA:
            reasons.append(f"Breakout above value area ({profile.value_area_high:,.2f})")
        elif self.value_area_position is ValueAreaPosition.BELOW_VALUE_AREA:
            reasons.append(f"Breakdown below value area ({profile.value_area_low:,.2f})")

        return reasons

    def to_dict(self) -> dict:
        """Convert to the metadata shape the dashboard reads."""
        return {
            "symbol": self.symbol,
            "currentPrice": self.current_price,
            "asOf": self.as_of.isoformat(),
            "volumeProfile": [b.to_dict() for b in self.profile.buckets],
            **self.profile.summary.to_dict(),
            "deltaVolume": [b.to_dict() for b in self.delta_buckets],
            **self.delta_summary.to_dict(),
            "pocPosition": self.poc_position.value,
            "pocDistancePct": self.poc_distance_pct,
            "valueAreaPosition": self.value_area_position.value,
            "hvnLevels": list(self.hvn_levels),
            "lvnLevels": list(self.lvn_levels),
        }


def analyze_order_flow(
    events: Iterable[TradeEvent],
    current_price: float | None = None,
    config: OrderFlowConfig | None = None,
) -> OrderFlowSnapshot:
    """
    Run the volume profile and delta aggregators over one batch.

    Args:
        events: Trades, oldest first
        current_price: Latest price (defaults to the last trade's price)
        config: Analysis parameters

    Returns:
        Immutable OrderFlowSnapshot

    Raises:
        EmptyInputError: No events supplied
        InvalidParameterError: Config values out of range
    """
    config = config or DEFAULT_CONFIG
    events = list(events)
    if not events:
        raise EmptyInputError("Cannot analyze order flow without trades")

    last = max(events, key=lambda e: e.timestamp)
    price = current_price if current_price is not None else last.price

    profile = compute_volume_profile(
        events,
        bucket_width=config.bucket_width,
        value_area_fraction=config.value_area_fraction,
        tie_break=config.tie_break,
        max_buckets=config.max_buckets,
    )
    delta_buckets = compute_delta_volume(
        events,
        time_bucket_size_ms=config.time_bucket_size_ms,
        zero_fill=config.zero_fill,
    )
    delta_summary = summarize_delta(delta_buckets, config.delta_bias_threshold_pct)
    poc_position, poc_distance = get_poc_position(profile, price, config.poc_tolerance_pct)

    return OrderFlowSnapshot(
        symbol=profile.symbol,
        current_price=price,
        as_of=last.traded_at,
        profile=profile,
        delta_buckets=tuple(delta_buckets),
        delta_summary=delta_summary,
        poc_position=poc_position,
        poc_distance_pct=poc_distance,
        value_area_position=get_value_area_position(profile, price),
        hvn_levels=tuple(get_hvn_levels(profile, config.hvn_multiplier)),
        lvn_levels=tuple(get_lvn_levels(profile, config.lvn_multiplier)),
    )


@dataclass
class Signal:
    """A directional trading signal derived from order flow."""

    symbol: str
    direction: str  # "LONG" or "SHORT"
    strength: float  # 0.0 - 1.0
    timestamp: datetime
    price: float
    stop_loss: float
    reasons: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


@dataclass
class OrderFlowSignalConfig:
    """Configuration for order flow signal detection."""

    # Imbalance % that maps to full strength
    full_strength_imbalance_pct: float = 50.0

    # Strength added for a POC test or a Value Area break in the signal's direction
    confirmation_bonus: float = 0.1

    # Minimum signal strength threshold
    min_strength: float = 0.4

    # Stop loss distance behind the POC (%)
    stop_buffer_pct: float = 1.5

    # Snapshots to skip after a signal on the same symbol
    cooldown_snapshots: int = 5


class OrderFlowSignalDetector:
    """
    Detects trading signals from order flow snapshots.

    Stateful only for cooldown tracking; the snapshot itself is never
    modified.
    """

    def __init__(self, config: OrderFlowSignalConfig | None = None):
        """
        Initialize the detector.

        Args:
            config: Configuration for signal detection
        """
        self.config = config or OrderFlowSignalConfig()
        self._last_signal_snapshot: dict[str, int] = {}  # symbol -> snapshot count
        self._snapshot_count: dict[str, int] = {}  # symbol -> total snapshots seen

    def detect(self, snapshot: OrderFlowSnapshot) -> Signal | None:
        """
        Detect an order flow signal.

        Args:
            snapshot: Latest snapshot for a symbol

        Returns:
            Signal if the order flow lines up, None otherwise
        """
        symbol = snapshot.symbol
        self._snapshot_count[symbol] = self._snapshot_count.get(symbol, 0) + 1

        # Check cooldown
        last_signal = self._last_signal_snapshot.get(symbol)
        if (
            last_signal is not None
            and self._snapshot_count[symbol] - last_signal < self.config.cooldown_snapshots
        ):
            return None

        bias = snapshot.delta_summary.bias
        position = snapshot.poc_position

        if bias is DeltaBias.BULLISH and position is not PocPosition.ABOVE_POC:
            direction = "LONG"
            breakout = ValueAreaPosition.ABOVE_VALUE_AREA
        elif bias is DeltaBias.BEARISH and position is not PocPosition.BELOW_POC:
            direction = "SHORT"
            breakout = ValueAreaPosition.BELOW_VALUE_AREA
        else:
            return None

        strength = min(
            snapshot.delta_summary.imbalance_percent / self.config.full_strength_imbalance_pct,
            1.0,
        )
        if position is PocPosition.AT_POC:
            strength += self.config.confirmation_bonus
        if snapshot.value_area_position is breakout:
            strength += self.config.confirmation_bonus
        strength = min(strength, 1.0)

        if strength < self.config.min_strength:
            return None

        poc = snapshot.profile.poc
        buffer = self.config.stop_buffer_pct / 100
        stop_loss = poc * (1 - buffer) if direction == "LONG" else poc * (1 + buffer)

        signal = Signal(
            symbol=symbol,
            direction=direction,
            strength=strength,
            timestamp=snapshot.as_of,
            price=snapshot.current_price,
            stop_loss=stop_loss,
            reasons=snapshot.reasons,
            metadata={
                "delta": snapshot.delta_summary.total_delta,
                "delta_bias": bias.value,
                "imbalance_pct": snapshot.delta_summary.imbalance_percent,
                "poc": poc,
                "value_area_high": snapshot.profile.value_area_high,
                "value_area_low": snapshot.profile.value_area_low,
            },
        )
        self._last_signal_snapshot[symbol] = self._snapshot_count[symbol]
        logger.info(
            "%s %s signal (strength %.2f) at %s", symbol or "?", direction, strength, signal.price
        )
        return signal

    def reset(self, symbol: str | None = None) -> None:
        """Reset cooldown state for one symbol or all of them."""
        if symbol is None:
            self._last_signal_snapshot.clear()
            self._snapshot_count.clear()
        else:
            self._last_signal_snapshot.pop(symbol, None)
            self._snapshot_count.pop(symbol, None)
