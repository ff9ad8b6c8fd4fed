"""
Volume Profile Panel - Horizontal volume-at-price histogram.

Uses Unicode eighth blocks for sub-character bar lengths. Highest price
is drawn at the top, like a price axis.
"""

import math

from textual.widgets import Static

from orderflow.indicators.volume_profile import PriceBucket, VolumeProfileResult
from orderflow.ui.formatting import format_compact, format_price

# Theme colors (Rich markup)
COLOR_POC = "#facc15"  # Yellow
COLOR_VALUE_AREA = "#10b981"  # Green
COLOR_NORMAL = "#64748b"  # Gray
COLOR_CURRENT_PRICE = "#a855f7"  # Purple

# Chart dimensions
CHART_WIDTH = 40
CHART_HEIGHT = 24

# Horizontal eighth blocks, empty to full
BAR_BLOCKS = " ▏▎▍▌▋▊▉█"


def _bar(fraction: float, width: int) -> str:
    """Horizontal bar covering fraction of width, in eighth-character steps."""
    eighths = round(max(0.0, min(fraction, 1.0)) * width * 8)
    full, rest = divmod(eighths, 8)
    bar = "█" * full
    if rest:
        bar += BAR_BLOCKS[rest]
    return bar


def _group_rows(buckets: tuple[PriceBucket, ...], height: int) -> list[dict]:
    """
    Merge adjacent buckets so the profile fits in height rows.

    A merged row is POC / in Value Area if any of its buckets is.
    """
    per_row = max(1, math.ceil(len(buckets) / height))
    rows = []
    for start in range(0, len(buckets), per_row):
        chunk = buckets[start : start + per_row]
        rows.append(
            {
                "low": chunk[0].price,
                "high": chunk[-1].price,
                "price": chunk[len(chunk) // 2].price,
                "volume": sum(b.volume for b in chunk),
                "is_poc": any(b.is_poc for b in chunk),
                "in_value_area": any(b.in_value_area for b in chunk),
            }
        )
    return rows


def render_volume_profile_lines(
    profile: VolumeProfileResult,
    current_price: float | None = None,
    width: int = CHART_WIDTH,
    height: int = CHART_HEIGHT,
) -> list[str]:
    """
    Render a profile as Rich-markup rows, highest price first.

    Args:
        profile: Computed volume profile (read only)
        current_price: Price to mark with a purple arrow
        width: Maximum bar length in characters
        height: Maximum number of rows

    Returns:
        List of markup strings, one per chart row
    """
    rows = _group_rows(profile.buckets, height)
    max_volume = max(row["volume"] for row in rows)
    half_width = profile.bucket_width / 2

    price_marked = False
    lines = []

    if current_price is not None and current_price >= rows[-1]["high"] + half_width:
        lines.append(f"[{COLOR_CURRENT_PRICE}]▲ {format_price(current_price)}[/{COLOR_CURRENT_PRICE}]")
        price_marked = True

    for row in reversed(rows):
        if row["is_poc"]:
            color = COLOR_POC
        elif row["in_value_area"]:
            color = COLOR_VALUE_AREA
        else:
            color = COLOR_NORMAL

        fraction = row["volume"] / max_volume if max_volume > 0 else 0.0
        bar = _bar(fraction, width)
        label = format_price(row["price"])
        line = f"[dim]{label:>12}[/dim] [{color}]{bar:<{width}}[/{color}]"

        if (
            current_price is not None
            and not price_marked
            and row["low"] - half_width <= current_price < row["high"] + half_width
        ):
            line += (
                f" [bold {COLOR_CURRENT_PRICE}]◀ {format_price(current_price)}"
                f"[/bold {COLOR_CURRENT_PRICE}]"
            )
            price_marked = True

        lines.append(line)

    if current_price is not None and not price_marked:
        lines.append(f"[{COLOR_CURRENT_PRICE}]▼ {format_price(current_price)}[/{COLOR_CURRENT_PRICE}]")

    return lines


def render_profile_summary(profile: VolumeProfileResult) -> list[str]:
    """Summary rows shown under the histogram."""
    pct = int(round(profile.value_area_fraction * 100))
    return [
        f"[{COLOR_POC}]■[/{COLOR_POC}] POC: [bold {COLOR_POC}]{format_price(profile.poc)}"
        f"[/bold {COLOR_POC}]  ({format_compact(profile.poc_bucket.volume)})",
        f"[{COLOR_VALUE_AREA}]■[/{COLOR_VALUE_AREA}] Value Area ({pct}% volume): "
        f"[{COLOR_VALUE_AREA}]{format_price(profile.value_area_low)} - "
        f"{format_price(profile.value_area_high)}[/{COLOR_VALUE_AREA}]",
        f"[{COLOR_NORMAL}]■[/{COLOR_NORMAL}] Total volume: {format_compact(profile.total_volume)}"
        f" across {profile.bucket_count} levels",
    ]


class VolumeProfilePanel(Static):
    """
    Volume Profile chart widget.

    Call update_profile() with a freshly computed profile whenever the
    trade batch changes.
    """

    DEFAULT_CSS = """
    VolumeProfilePanel {
        height: 1fr;
        background: #0a0a0a;
        border: solid #333333;
        padding: 1 2;
    }
    """

    def __init__(self, width: int = CHART_WIDTH, height: int = CHART_HEIGHT, **kwargs):
        super().__init__(**kwargs)
        self.chart_width = width
        self.chart_height = height

    def update_profile(
        self,
        profile: VolumeProfileResult | None,
        current_price: float | None = None,
    ) -> None:
        """
        Redraw the chart.

        Args:
            profile: Profile to draw, or None for the empty state
            current_price: Optional current price marker
        """
        header = "[bold cyan]VOLUME PROFILE[/bold cyan]"
        if profile is None:
            self.update(f"{header}\n\n[dim]No trades to profile[/dim]")
            return

        lines = render_volume_profile_lines(
            profile, current_price, width=self.chart_width, height=self.chart_height
        )
        summary = render_profile_summary(profile)
        self.update("\n".join([header, ""] + lines + [""] + summary))
