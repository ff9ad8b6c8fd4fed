"""
Delta Volume Data Models.

- DeltaBucket: Aggressive buy/sell volume in one time window
- DeltaSummary: Totals and imbalance over a run of windows
"""

from dataclasses import dataclass
from enum import Enum


class DeltaBias(Enum):
    """Net order flow direction."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class DeltaBucket:
    """
    Order flow in one time window.

    time is the window start in epoch milliseconds.
    """

    time: int
    buy_volume: float = 0.0  # Aggressive buys (taker bought)
    sell_volume: float = 0.0  # Aggressive sells (taker sold)
    timestamp_label: str = ""  # UTC window start, "YYYY-MM-DD HH:MM:SS"
    trade_count: int = 0

    @property
    def delta(self) -> float:
        """Net buying pressure (positive = more buyers, negative = more sellers)."""
        return self.buy_volume - self.sell_volume

    @property
    def total_volume(self) -> float:
        """Buy plus sell volume."""
        return self.buy_volume + self.sell_volume

    @property
    def is_empty(self) -> bool:
        """True for a zero-filled window with no trades."""
        return self.trade_count == 0

    def to_dict(self) -> dict:
        """Convert to the shape the chart renderer reads."""
        return {
            "time": self.time,
            "delta": self.delta,
            "buyVolume": self.buy_volume,
            "sellVolume": self.sell_volume,
            "timestamp": self.timestamp_label,
        }


@dataclass(frozen=True)
class DeltaSummary:
    """Totals over a delta series, as shown in the chart header."""

    total_delta: float
    total_buy: float
    total_sell: float
    imbalance_percent: float
    bias: DeltaBias = DeltaBias.NEUTRAL

    @property
    def total_volume(self) -> float:
        """Buy plus sell volume."""
        return self.total_buy + self.total_sell

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "totalDelta": self.total_delta,
            "totalBuy": self.total_buy,
            "totalSell": self.total_sell,
            "imbalancePercent": self.imbalance_percent,
            "bias": self.bias.value,
        }
