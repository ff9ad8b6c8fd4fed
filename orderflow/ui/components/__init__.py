"""
Order flow UI components.

Modular Textual widgets for the order flow dashboard.
"""

from .delta_volume_panel import DeltaVolumePanel, render_delta_lines, render_delta_summary
from .signal_panel import SignalPanel, render_signal_lines
from .volume_profile_panel import (
    VolumeProfilePanel,
    render_profile_summary,
    render_volume_profile_lines,
)

__all__ = [
    "VolumeProfilePanel",
    "render_volume_profile_lines",
    "render_profile_summary",
    "DeltaVolumePanel",
    "render_delta_lines",
    "render_delta_summary",
    "SignalPanel",
    "render_signal_lines",
]
