"""
Signals Module - Order flow snapshot and signal detection.

Builds on the indicators layer: snapshots bundle both aggregations for one
batch of trades; the detector turns snapshots into directional signals.
"""

from .order_flow import (
    OrderFlowSignalConfig,
    OrderFlowSignalDetector,
    OrderFlowSnapshot,
    Signal,
    analyze_order_flow,
)

__all__ = [
    "OrderFlowSnapshot",
    "analyze_order_flow",
    "Signal",
    "OrderFlowSignalConfig",
    "OrderFlowSignalDetector",
]
