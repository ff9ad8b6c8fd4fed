"""
Order flow configuration and thresholds.

Centralizes the bucketing parameters and analysis thresholds so the
aggregators, the signal detector and the panels agree on one set of numbers.
"""

import math
from dataclasses import dataclass
from typing import Literal

from orderflow.core.errors import InvalidParameterError

TieBreak = Literal["above", "below"]

TIE_BREAK_CHOICES: tuple[str, ...] = ("above", "below")

# Upper bound on price buckets in one profile (gaps are zero-filled, so the
# count is price range / width)
MAX_BUCKETS = 10_000


def check_bucket_width(bucket_width: float) -> float:
    """Validate a price bucket width and return it as float."""
    if isinstance(bucket_width, bool) or not isinstance(bucket_width, (int, float)):
        raise InvalidParameterError(f"bucket_width must be a number, got {bucket_width!r}")
    if not math.isfinite(bucket_width) or bucket_width <= 0:
        raise InvalidParameterError(f"bucket_width must be positive, got {bucket_width}")
    return float(bucket_width)


def check_value_area_fraction(fraction: float) -> float:
    """Validate a value area fraction, which must lie in (0, 1]."""
    if isinstance(fraction, bool) or not isinstance(fraction, (int, float)):
        raise InvalidParameterError(f"value_area_fraction must be a number, got {fraction!r}")
    if not (0 < fraction <= 1):
        raise InvalidParameterError(
            f"value_area_fraction must be in (0, 1], got {fraction}"
        )
    return float(fraction)


def check_time_bucket_size(size_ms: int) -> int:
    """Validate a delta time bucket size in milliseconds."""
    if isinstance(size_ms, bool) or not isinstance(size_ms, int):
        raise InvalidParameterError(
            f"time_bucket_size_ms must be an integer, got {size_ms!r}"
        )
    if size_ms <= 0:
        raise InvalidParameterError(f"time_bucket_size_ms must be positive, got {size_ms}")
    return size_ms


def check_max_buckets(max_buckets: int) -> int:
    """Validate the bucket count cap."""
    if isinstance(max_buckets, bool) or not isinstance(max_buckets, int) or max_buckets <= 0:
        raise InvalidParameterError(f"max_buckets must be a positive integer, got {max_buckets!r}")
    return max_buckets


def check_tie_break(tie_break: str) -> TieBreak:
    """Validate the value area tie-break side."""
    if tie_break not in TIE_BREAK_CHOICES:
        raise InvalidParameterError(
            f"tie_break must be one of {', '.join(TIE_BREAK_CHOICES)}, got {tie_break!r}"
        )
    return tie_break  # type: ignore[return-value]


@dataclass
class OrderFlowConfig:
    """Configuration for volume profile and delta volume analysis.

    Percentages are expressed in percent (20.0 = 20%), fractions as decimals
    (0.70 = 70%).
    """

    # =========================================================
    # Volume Profile
    # =========================================================

    # Price increment per bucket (quote currency)
    bucket_width: float = 10.0

    # Share of total volume that defines the Value Area
    # Market profile convention is 70% (about one standard deviation)
    value_area_fraction: float = 0.70

    # Side to expand into when both neighbours carry equal volume
    tie_break: TieBreak = "above"

    # Refuse profiles with more buckets than this
    max_buckets: int = MAX_BUCKETS

    # =========================================================
    # Delta Volume
    # =========================================================

    # Width of each delta window (2 minutes)
    time_bucket_size_ms: int = 120_000

    # Emit empty windows as zero buckets to keep even spacing on the chart
    zero_fill: bool = True

    # =========================================================
    # Analysis Thresholds
    # =========================================================

    # High Volume Node: bucket volume above this multiple of the average
    hvn_multiplier: float = 1.5

    # Low Volume Node: bucket volume below this multiple of the average
    lvn_multiplier: float = 0.5

    # Price within this % of the POC counts as testing it
    poc_tolerance_pct: float = 1.0

    # Imbalance % above which delta is called bullish/bearish
    delta_bias_threshold_pct: float = 20.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.bucket_width = check_bucket_width(self.bucket_width)
        self.value_area_fraction = check_value_area_fraction(self.value_area_fraction)
        self.tie_break = check_tie_break(self.tie_break)
        self.time_bucket_size_ms = check_time_bucket_size(self.time_bucket_size_ms)
        self.max_buckets = check_max_buckets(self.max_buckets)
        if self.hvn_multiplier <= 0 or self.lvn_multiplier <= 0:
            raise InvalidParameterError("HVN/LVN multipliers must be positive")
        if self.poc_tolerance_pct < 0:
            raise InvalidParameterError("poc_tolerance_pct must be non-negative")
        if not (0 <= self.delta_bias_threshold_pct <= 100):
            raise InvalidParameterError("delta_bias_threshold_pct must be between 0 and 100")


# Default configuration instance
DEFAULT_CONFIG = OrderFlowConfig()
