"""
Delta Volume Module.

Order flow per time window:
- Data models (DeltaBucket, DeltaSummary, DeltaBias)
- compute_delta_volume aggregator
- Summary functions (totals, imbalance, cumulative delta)
"""

from .aggregator import (
    compute_delta_volume,
    cumulative_delta,
    format_window_label,
    get_imbalance_percent,
    summarize_delta,
    window_start,
)
from .models import DeltaBias, DeltaBucket, DeltaSummary

__all__ = [
    # Data models
    "DeltaBucket",
    "DeltaSummary",
    "DeltaBias",
    # Aggregation
    "compute_delta_volume",
    "window_start",
    "format_window_label",
    # Summary functions
    "summarize_delta",
    "get_imbalance_percent",
    "cumulative_delta",
]
