"""
Volume Profile Indicator Functions.

Pure functions for analyzing a computed VolumeProfileResult.

Functions:
- get_poc: Point of Control (highest volume bucket)
- get_value_area: (low, high) of the Value Area
- get_hvn_levels: High Volume Nodes
- get_lvn_levels: Low Volume Nodes
- get_poc_position: Where a price sits relative to the POC
- get_value_area_position: Where a price sits relative to the Value Area
- get_delta_at_price: Delta in the bucket containing a price
"""

from enum import Enum

from .models import VolumeProfileResult


class PocPosition(Enum):
    """Price location relative to the Point of Control."""

    ABOVE_POC = "ABOVE_POC"
    BELOW_POC = "BELOW_POC"
    AT_POC = "AT_POC"


class ValueAreaPosition(Enum):
    """Price location relative to the Value Area."""

    ABOVE_VALUE_AREA = "ABOVE_VALUE_AREA"
    BELOW_VALUE_AREA = "BELOW_VALUE_AREA"
    IN_VALUE_AREA = "IN_VALUE_AREA"


def get_poc(profile: VolumeProfileResult) -> float:
    """
    Point of Control - price level with highest volume.

    The POC represents the "fair value" where most trading occurred.
    It often acts as a magnet for price.
    """
    return profile.poc


def get_value_area(profile: VolumeProfileResult) -> tuple[float, float]:
    """
    Value Area - price range holding value_area_fraction of the volume.

    Returns:
        (value_area_low, value_area_high)
    """
    return (profile.value_area_low, profile.value_area_high)


def _average_bucket_volume(profile: VolumeProfileResult) -> float:
    return profile.total_volume / profile.bucket_count


def get_hvn_levels(profile: VolumeProfileResult, multiplier: float = 1.5) -> list[float]:
    """
    High Volume Nodes - buckets well above the average bucket volume.

    HVNs are areas of price acceptance where significant trading occurred.
    They often act as support/resistance zones.

    Args:
        profile: Profile to analyze
        multiplier: Volume must exceed multiplier x average

    Returns:
        HVN bucket prices, ascending
    """
    threshold = _average_bucket_volume(profile) * multiplier
    return [b.price for b in profile.buckets if b.volume > threshold]


def get_lvn_levels(profile: VolumeProfileResult, multiplier: float = 0.5) -> list[float]:
    """
    Low Volume Nodes - buckets well below the average bucket volume.

    LVNs are areas of price rejection where trading was sparse.
    Price tends to move quickly through these levels.

    Args:
        profile: Profile to analyze
        multiplier: Volume must be under multiplier x average

    Returns:
        LVN bucket prices, ascending
    """
    threshold = _average_bucket_volume(profile) * multiplier
    return [b.price for b in profile.buckets if b.volume < threshold]


def get_poc_position(
    profile: VolumeProfileResult,
    price: float,
    tolerance_pct: float = 1.0,
) -> tuple[PocPosition, float]:
    """
    Classify a price against the POC.

    Args:
        profile: Profile to analyze
        price: Price to classify (usually the current price)
        tolerance_pct: Distance in % within which price is AT_POC

    Returns:
        (position, signed distance from POC in %)
    """
    distance_pct = (price - profile.poc) / profile.poc * 100 if profile.poc else 0.0

    if abs(distance_pct) < tolerance_pct:
        return PocPosition.AT_POC, distance_pct
    if price > profile.poc:
        return PocPosition.ABOVE_POC, distance_pct
    return PocPosition.BELOW_POC, distance_pct


def get_value_area_position(profile: VolumeProfileResult, price: float) -> ValueAreaPosition:
    """Classify a price against the Value Area bounds (inclusive)."""
    if price > profile.value_area_high:
        return ValueAreaPosition.ABOVE_VALUE_AREA
    if price < profile.value_area_low:
        return ValueAreaPosition.BELOW_VALUE_AREA
    return ValueAreaPosition.IN_VALUE_AREA


def is_price_in_value_area(profile: VolumeProfileResult, price: float) -> bool:
    """Check if a price is within the value area."""
    return get_value_area_position(profile, price) is ValueAreaPosition.IN_VALUE_AREA


def get_delta_at_price(profile: VolumeProfileResult, price: float) -> float:
    """
    Get net delta (buy - sell volume) in the bucket containing price.

    Returns:
        Bucket delta, or 0 if price falls outside the profile
    """
    bucket = profile.get_bucket(price)
    return bucket.delta if bucket else 0.0


def get_profile_stats(
    profile: VolumeProfileResult,
    hvn_multiplier: float = 1.5,
    lvn_multiplier: float = 0.5,
) -> dict:
    """
    Get comprehensive statistics for a volume profile.

    Args:
        profile: Profile to analyze
        hvn_multiplier: HVN threshold multiple of average volume
        lvn_multiplier: LVN threshold multiple of average volume

    Returns:
        Dictionary with profile statistics
    """
    total = profile.total_volume
    return {
        "poc": profile.poc,
        "poc_volume": profile.poc_bucket.volume,
        "value_area_low": profile.value_area_low,
        "value_area_high": profile.value_area_high,
        "value_area_volume": profile.value_area_volume,
        "value_area_pct": (profile.value_area_volume / total * 100) if total else 0.0,
        "total_volume": total,
        "total_delta": profile.total_delta,
        "bucket_count": profile.bucket_count,
        "bucket_width": profile.bucket_width,
        "trade_count": profile.trade_count,
        "price_range": profile.price_range,
        "hvn_levels": get_hvn_levels(profile, hvn_multiplier),
        "lvn_levels": get_lvn_levels(profile, lvn_multiplier),
    }
