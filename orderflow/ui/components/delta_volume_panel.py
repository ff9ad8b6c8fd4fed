"""
Delta Volume Panel - Signed order flow bars per time window.

Positive delta grows up from the zero line in green, negative delta grows
down in red. Shows the most recent windows that fit the chart width.
"""

from collections.abc import Sequence

from textual.widgets import Static

from orderflow.indicators.delta_volume import DeltaBias, DeltaBucket, DeltaSummary
from orderflow.ui.formatting import format_compact, format_signed_compact

# Theme colors (Rich markup)
COLOR_BUY = "#10b981"  # Green
COLOR_SELL = "#ef4444"  # Red
COLOR_AXIS = "#64748b"  # Gray

# Chart dimensions
CHART_WIDTH = 60
CHART_HEIGHT = 10


def _time_part(label: str) -> str:
    """'2026-01-20 10:02:00' -> '10:02:00'."""
    parts = label.split(" ")
    return parts[1] if len(parts) > 1 else label


def render_delta_lines(
    buckets: Sequence[DeltaBucket],
    width: int = CHART_WIDTH,
    height: int = CHART_HEIGHT,
) -> list[str]:
    """
    Render a delta series as Rich-markup rows.

    Args:
        buckets: Delta buckets, oldest first (read only)
        width: Maximum number of columns (one per window)
        height: Rows above plus below the zero line

    Returns:
        List of markup strings: positive rows, zero line, negative rows,
        then a time axis row
    """
    shown = list(buckets)[-width:]
    if not shown:
        return ["[dim]No delta data[/dim]"]

    up_rows = max(1, height // 2)
    down_rows = max(1, height - up_rows)
    max_abs = max(abs(b.delta) for b in shown)

    heights = []
    for bucket in shown:
        if max_abs == 0 or bucket.delta == 0:
            heights.append(0)
        elif bucket.delta > 0:
            heights.append(max(1, round(bucket.delta / max_abs * up_rows)))
        else:
            heights.append(-max(1, round(-bucket.delta / max_abs * down_rows)))

    label_width = 7
    lines = []

    for row in range(up_rows, 0, -1):
        cells = "".join("█" if h >= row else " " for h in heights)
        label = format_signed_compact(max_abs) if row == up_rows else ""
        lines.append(f"[dim]{label:>{label_width}}[/dim] [{COLOR_BUY}]{cells}[/{COLOR_BUY}]")

    zero = "─" * len(shown)
    lines.append(f"[dim]{'0':>{label_width}}[/dim] [{COLOR_AXIS}]{zero}[/{COLOR_AXIS}]")

    for row in range(1, down_rows + 1):
        cells = "".join("█" if -h >= row else " " for h in heights)
        label = format_compact(-max_abs) if row == down_rows and max_abs else ""
        lines.append(f"[dim]{label:>{label_width}}[/dim] [{COLOR_SELL}]{cells}[/{COLOR_SELL}]")

    first = _time_part(shown[0].timestamp_label)
    last = _time_part(shown[-1].timestamp_label)
    gap = max(1, len(shown) - len(first) - len(last))
    axis = first if len(shown) == 1 else f"{first}{' ' * gap}{last}"
    lines.append(f"{'':>{label_width}} [dim]{axis}[/dim]")

    return lines


def render_delta_summary(summary: DeltaSummary) -> list[str]:
    """Header and summary rows: total delta, imbalance, buy/sell totals."""
    color = COLOR_BUY if summary.total_delta >= 0 else COLOR_SELL
    arrow = "▲" if summary.total_delta >= 0 else "▼"
    bias = {
        DeltaBias.BULLISH: f"[{COLOR_BUY}]BULLISH[/{COLOR_BUY}]",
        DeltaBias.BEARISH: f"[{COLOR_SELL}]BEARISH[/{COLOR_SELL}]",
        DeltaBias.NEUTRAL: "[dim]NEUTRAL[/dim]",
    }[summary.bias]

    return [
        f"Total Delta: [bold {color}]{arrow} {format_signed_compact(summary.total_delta)}"
        f"[/bold {color}]   Imbalance: [bold {color}]{summary.imbalance_percent:.1f}%"
        f"[/bold {color}]   {bias}",
        f"Total Buy: [{COLOR_BUY}]{format_compact(summary.total_buy)} contracts[/{COLOR_BUY}]   "
        f"Total Sell: [{COLOR_SELL}]{format_compact(summary.total_sell)} contracts[/{COLOR_SELL}]   "
        f"Net Delta: [{color}]{format_signed_compact(summary.total_delta)}[/{color}]",
    ]


class DeltaVolumePanel(Static):
    """
    Delta Volume (order flow) chart widget.

    Call update_delta() with freshly computed buckets and their summary.
    """

    DEFAULT_CSS = """
    DeltaVolumePanel {
        height: auto;
        background: #0a0a0a;
        border: solid #333333;
        padding: 1 2;
    }
    """

    def __init__(self, width: int = CHART_WIDTH, height: int = CHART_HEIGHT, **kwargs):
        super().__init__(**kwargs)
        self.chart_width = width
        self.chart_height = height

    def update_delta(
        self,
        buckets: Sequence[DeltaBucket],
        summary: DeltaSummary | None = None,
    ) -> None:
        """
        Redraw the chart.

        Args:
            buckets: Delta series, oldest first (empty for the empty state)
            summary: Totals for the header (shown only when provided)
        """
        header = "[bold cyan]DELTA VOLUME (ORDER FLOW)[/bold cyan]"
        if not buckets:
            self.update(f"{header}\n\n[dim]No trades in range[/dim]")
            return

        lines = [header]
        if summary is not None:
            lines.extend(render_delta_summary(summary))
        lines.append("")
        lines.extend(render_delta_lines(buckets, self.chart_width, self.chart_height))
        self.update("\n".join(lines))
