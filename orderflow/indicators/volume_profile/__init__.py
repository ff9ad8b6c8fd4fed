"""
Volume Profile Module.

Provides Volume Profile analysis for trading:
- Data models (TradeEvent, PriceBucket, VolumeProfileResult)
- compute_volume_profile and an incremental builder
- Indicator functions (POC, Value Area, HVN/LVN, positions)
"""

from .builder import VolumeProfileBuilder, compute_volume_profile
from .indicator import (
    PocPosition,
    ValueAreaPosition,
    get_delta_at_price,
    get_hvn_levels,
    get_lvn_levels,
    get_poc,
    get_poc_position,
    get_profile_stats,
    get_value_area,
    get_value_area_position,
    is_price_in_value_area,
)
from .models import (
    PriceBucket,
    ProfileSummary,
    TradeEvent,
    VolumeProfileResult,
    bucket_center,
    bucket_index,
    count_buckets,
)

__all__ = [
    # Data models
    "TradeEvent",
    "PriceBucket",
    "ProfileSummary",
    "VolumeProfileResult",
    # Bucket grid
    "bucket_index",
    "bucket_center",
    "count_buckets",
    # Builders
    "compute_volume_profile",
    "VolumeProfileBuilder",
    # Indicator functions
    "PocPosition",
    "ValueAreaPosition",
    "get_poc",
    "get_value_area",
    "get_hvn_levels",
    "get_lvn_levels",
    "get_poc_position",
    "get_value_area_position",
    "is_price_in_value_area",
    "get_delta_at_price",
    "get_profile_stats",
]
