"""
Order Flow Indicators - Pure aggregation over trade batches.

All functions are stateless and operate on lists of TradeEvent.
"""

from .delta_volume import (
    DeltaBias,
    DeltaBucket,
    DeltaSummary,
    compute_delta_volume,
    cumulative_delta,
    summarize_delta,
)
from .volume_profile import (
    PriceBucket,
    ProfileSummary,
    TradeEvent,
    VolumeProfileBuilder,
    VolumeProfileResult,
    compute_volume_profile,
    get_hvn_levels,
    get_lvn_levels,
    get_poc_position,
    get_profile_stats,
    get_value_area_position,
)

__all__ = [
    # Volume Profile - Models
    "TradeEvent",
    "PriceBucket",
    "ProfileSummary",
    "VolumeProfileResult",
    # Volume Profile - Builders
    "compute_volume_profile",
    "VolumeProfileBuilder",
    # Volume Profile - Functions
    "get_hvn_levels",
    "get_lvn_levels",
    "get_poc_position",
    "get_value_area_position",
    "get_profile_stats",
    # Delta Volume
    "DeltaBucket",
    "DeltaSummary",
    "DeltaBias",
    "compute_delta_volume",
    "summarize_delta",
    "cumulative_delta",
]
