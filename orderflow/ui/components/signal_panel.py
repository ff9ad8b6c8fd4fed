"""
Signal panel component.

Displays the order flow reading for the current snapshot and the latest
detector signal, if any.
"""

from textual.widgets import Static

from orderflow.signals import OrderFlowSnapshot, Signal
from orderflow.ui.formatting import format_price

# Theme colors (Rich markup)
COLOR_UP = "#44ffaa"
COLOR_DOWN = "#ff7777"


def render_signal_lines(snapshot: OrderFlowSnapshot, signal: Signal | None) -> list[str]:
    """Rows describing the snapshot and the signal."""
    lines = [
        f"[bold cyan]{snapshot.symbol or 'TRADES'}[/bold cyan]  "
        f"[bold]{format_price(snapshot.current_price)}[/bold]  "
        f"[dim]{snapshot.as_of:%Y-%m-%d %H:%M:%S} UTC[/dim]",
        "",
    ]
    lines.extend(f"  • {reason}" for reason in snapshot.reasons)

    if snapshot.hvn_levels:
        levels = ", ".join(format_price(p) for p in snapshot.hvn_levels[:5])
        lines.append(f"  • High volume nodes: {levels}")
    if snapshot.lvn_levels:
        levels = ", ".join(format_price(p) for p in snapshot.lvn_levels[:5])
        lines.append(f"  • Low volume nodes: {levels}")

    lines.append("")
    if signal is None:
        lines.append("[dim]No signal[/dim]")
    else:
        color = COLOR_UP if signal.direction == "LONG" else COLOR_DOWN
        lines.append(
            f"[bold {color}]{signal.direction}[/bold {color}] "
            f"strength {signal.strength:.0%}  "
            f"stop {format_price(signal.stop_loss)}"
        )
    return lines


class SignalPanel(Static):
    """Panel showing order flow reasons and the current signal."""

    DEFAULT_CSS = """
    SignalPanel {
        height: auto;
        background: #0a0a0a;
        border: solid #333333;
        padding: 1 2;
    }
    """

    def update_snapshot(self, snapshot: OrderFlowSnapshot | None, signal: Signal | None) -> None:
        """Redraw for a new snapshot (None shows the empty state)."""
        if snapshot is None:
            self.update("[dim]Waiting for trades...[/dim]")
            return
        self.update("\n".join(render_signal_lines(snapshot, signal)))
