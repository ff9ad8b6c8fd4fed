"""
Order Flow Dashboard - Textual app showing Volume Profile and Delta Volume.

The app owns a trade batch and a ChartSettingsStore. Every change (new
batch, new settings) recomputes the snapshot synchronously and pushes the
immutable result into the panels.
"""

import logging
from collections.abc import Callable

import httpx
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from orderflow.core.errors import OrderFlowError
from orderflow.core.settings import ChartSettings, ChartSettingsStore
from orderflow.indicators.volume_profile import TradeEvent, count_buckets
from orderflow.signals import OrderFlowSignalDetector, OrderFlowSnapshot, Signal, analyze_order_flow
from orderflow.ui.components import DeltaVolumePanel, SignalPanel, VolumeProfilePanel

logger = logging.getLogger(__name__)

# Bucket width steps for the +/- bindings
BUCKET_WIDTH_FACTOR = 2.0


class OrderFlowDashboard(App):
    """Terminal order flow dashboard."""

    TITLE = "ORDER FLOW"
    CSS = """
    #main {
        height: 1fr;
    }

    #profile-column {
        width: 60;
    }

    #flow-column {
        width: 1fr;
    }

    #status {
        height: 1;
        background: #1a1a1a;
        color: #888888;
        padding: 0 1;
    }
    """
    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("v", "toggle_profile", "Volume Profile"),
        Binding("plus,equals_sign", "wider_buckets", "Buckets +"),
        Binding("minus", "narrower_buckets", "Buckets -"),
        Binding("r", "reload", "Reload"),
    ]

    def __init__(
        self,
        trades: list[TradeEvent],
        store: ChartSettingsStore,
        reload_trades: Callable[[], list[TradeEvent]] | None = None,
        current_price: float | None = None,
    ):
        """
        Args:
            trades: Trade batch to chart
            store: Settings store (read on start, written on changes)
            reload_trades: Optional callable that returns a fresh batch
            current_price: Price marker (defaults to the last trade)
        """
        super().__init__()
        self.trades = list(trades)
        self.store = store
        self.reload_trades = reload_trades
        self.current_price = current_price
        self.settings: ChartSettings = store.load()
        self.detector = OrderFlowSignalDetector()
        self.snapshot: OrderFlowSnapshot | None = None
        self.signal: Signal | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            with Vertical(id="profile-column"):
                yield VolumeProfilePanel(id="volume-profile")
            with Vertical(id="flow-column"):
                yield DeltaVolumePanel(id="delta-volume")
                yield SignalPanel(id="signal")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_charts()

    def refresh_charts(self) -> None:
        """Recompute the snapshot from the current batch and redraw."""
        status = self.query_one("#status", Static)
        profile_panel = self.query_one("#volume-profile", VolumeProfilePanel)
        delta_panel = self.query_one("#delta-volume", DeltaVolumePanel)
        signal_panel = self.query_one("#signal", SignalPanel)

        profile_panel.display = self.settings.show_volume_profile

        try:
            self.snapshot = analyze_order_flow(
                self.trades,
                current_price=self.current_price,
                config=self.settings.to_config(),
            )
        except OrderFlowError as e:
            logger.warning("Cannot chart order flow: %s", e)
            self.snapshot = None
            self.signal = None
            profile_panel.update_profile(None)
            delta_panel.update_delta([])
            signal_panel.update_snapshot(None, None)
            status.update(f"[#ff7777]{e}[/#ff7777]")
            return

        self.signal = self.detector.detect(self.snapshot)

        profile_panel.update_profile(self.snapshot.profile, self.snapshot.current_price)
        delta_panel.update_delta(self.snapshot.delta_buckets, self.snapshot.delta_summary)
        signal_panel.update_snapshot(self.snapshot, self.signal)

        status.update(
            f"{len(self.trades):,} trades | bucket ${self.settings.bucket_width:g} | "
            f"VA {self.settings.value_area_fraction:.0%} | "
            f"window {self.settings.time_bucket_size_ms // 1000}s"
        )

    def _save_settings(self, **changes) -> None:
        self.settings = self.store.update(**changes)
        self.refresh_charts()

    def action_toggle_profile(self) -> None:
        """Show or hide the volume profile panel."""
        self._save_settings(show_volume_profile=not self.settings.show_volume_profile)

    def action_wider_buckets(self) -> None:
        """Double the price bucket width."""
        self._save_settings(bucket_width=self.settings.bucket_width * BUCKET_WIDTH_FACTOR)

    def action_narrower_buckets(self) -> None:
        """Halve the price bucket width, unless the batch would need too many buckets."""
        new_width = self.settings.bucket_width / BUCKET_WIDTH_FACTOR
        if self.trades:
            low = min(t.price for t in self.trades)
            high = max(t.price for t in self.trades)
            needed = count_buckets(low, high, new_width)
            max_buckets = self.settings.to_config().max_buckets
            if needed > max_buckets:
                logger.info(
                    "Bucket width %g would need %d buckets (max %d)", new_width, needed, max_buckets
                )
                self.notify("Bucket width at minimum for this price range", severity="warning")
                return
        self._save_settings(bucket_width=new_width)

    def action_reload(self) -> None:
        """Fetch a fresh trade batch and recompute."""
        if self.reload_trades is None:
            self.notify("No trade source to reload from", severity="warning")
            return
        try:
            trades = self.reload_trades()
        except (OSError, ValueError, RuntimeError, httpx.HTTPError) as e:
            logger.error("Reload failed: %s", e)
            self.notify(f"Reload failed: {e}", severity="error")
            return
        self.trades = trades
        logger.info("Reloaded %d trades", len(self.trades))
        self.refresh_charts()
