"""
Order Flow CLI - Profile, delta, fetch and dashboard commands.

Usage:
    python -m orderflow profile data/trades/BTCUSDT_trades_20260120.parquet --bucket-width 25
    python -m orderflow delta data/trades/BTCUSDT_trades_20260120.parquet --window 60
    python -m orderflow fetch BTCUSDT --start 2026-01-20:10-00 --end 2026-01-20:11-00
    python -m orderflow dashboard data/trades/BTCUSDT_trades_20260120.parquet
    python -m orderflow settings --set bucket_width=25 --set show_volume_profile=false
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

from rich.console import Console

from orderflow.core.errors import OrderFlowError
from orderflow.core.settings import ChartSettings, ChartSettingsStore

logger = logging.getLogger(__name__)

LOG_FILE = "orderflow.log"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging - file only to avoid interfering with terminal output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=[logging.FileHandler(LOG_FILE)],
    )


def parse_datetime(value: str) -> datetime:
    """
    Parse a UTC datetime from format: yyyy-mm-dd:hh-mm (or yyyy-mm-dd)

    Examples:
        2026-01-12:10-15 -> 2026-01-12 10:15:00 UTC
        2026-01-12 -> 2026-01-12 00:00:00 UTC
    """
    for fmt in ("%Y-%m-%d:%H-%M", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise argparse.ArgumentTypeError(
        f"Invalid datetime format: '{value}'. Expected: yyyy-mm-dd:hh-mm (e.g., 2026-01-12:10-15)"
    )


def parse_setting(value: str) -> tuple[str, object]:
    """Parse key=value for the settings command, converting to the field's type."""
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{value}'")
    key, raw = value.split("=", 1)
    key = key.strip()

    defaults = ChartSettings().to_dict()
    if key not in defaults:
        raise argparse.ArgumentTypeError(
            f"Unknown setting '{key}'. Available: {', '.join(defaults)}"
        )

    current = defaults[key]
    if isinstance(current, bool):
        if raw.lower() not in ("true", "false", "1", "0", "yes", "no"):
            raise argparse.ArgumentTypeError(f"'{key}' expects true/false, got '{raw}'")
        return key, raw.lower() in ("true", "1", "yes")
    try:
        return key, type(current)(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid value for '{key}': {raw}") from e


def _load_trades(args: argparse.Namespace) -> list:
    from orderflow.historical.trade_storage import TradeStorage

    storage = TradeStorage(verbose=args.verbose)
    return list(storage.load_trades(Path(args.file), symbol=args.symbol))


def _settings_for(args: argparse.Namespace) -> ChartSettings:
    """Saved settings with command-line overrides applied."""
    settings = ChartSettingsStore(args.data_dir).load()
    overrides = {
        "bucket_width": getattr(args, "bucket_width", None),
        "value_area_fraction": getattr(args, "value_area", None),
        "tie_break": getattr(args, "tie_break", None),
        "time_bucket_size_ms": (
            args.window * 1000 if getattr(args, "window", None) is not None else None
        ),
    }
    data = settings.to_dict()
    data.update({k: v for k, v in overrides.items() if v is not None})
    if getattr(args, "no_zero_fill", False):
        data["zero_fill"] = False
    return ChartSettings.from_dict(data)


def cmd_profile(args: argparse.Namespace) -> int:
    """Print the volume profile of a trade file."""
    from orderflow.indicators.volume_profile import compute_volume_profile, get_profile_stats
    from orderflow.ui.components import render_volume_profile_lines
    from orderflow.ui.formatting import format_compact, format_price

    settings = _settings_for(args)
    config = settings.to_config()
    trades = _load_trades(args)
    profile = compute_volume_profile(
        trades,
        bucket_width=config.bucket_width,
        value_area_fraction=config.value_area_fraction,
        tie_break=config.tie_break,
        max_buckets=config.max_buckets,
    )

    if args.json:
        print(json.dumps(profile.to_dict(), indent=2))
        return 0

    stats = get_profile_stats(profile, config.hvn_multiplier, config.lvn_multiplier)

    print("Volume Profile")
    print("=" * 60)
    print(f"  Trades: {stats['trade_count']:,}")
    print(f"  Bucket width: {format_price(stats['bucket_width'])}")
    print(f"  POC: {format_price(stats['poc'])} ({format_compact(stats['poc_volume'])})")
    print(
        f"  Value Area: {format_price(stats['value_area_low'])} - "
        f"{format_price(stats['value_area_high'])} ({stats['value_area_pct']:.1f}% of volume)"
    )
    print(f"  Total volume: {format_compact(stats['total_volume'])}")
    print()

    console = Console(highlight=False)
    for line in render_volume_profile_lines(profile, args.price, height=args.rows):
        console.print(line)

    return 0


def cmd_delta(args: argparse.Namespace) -> int:
    """Print the delta volume series of a trade file."""
    from orderflow.indicators.delta_volume import compute_delta_volume, summarize_delta
    from orderflow.ui.components import render_delta_lines
    from orderflow.ui.formatting import format_compact, format_signed_compact

    settings = _settings_for(args)
    config = settings.to_config()
    trades = _load_trades(args)
    buckets = compute_delta_volume(
        trades,
        time_bucket_size_ms=config.time_bucket_size_ms,
        zero_fill=config.zero_fill,
    )
    summary = summarize_delta(buckets, config.delta_bias_threshold_pct)

    if args.json:
        print(
            json.dumps(
                {"buckets": [b.to_dict() for b in buckets], **summary.to_dict()},
                indent=2,
            )
        )
        return 0

    print("Delta Volume")
    print("=" * 60)
    for bucket in buckets:
        print(
            f"  {bucket.timestamp_label}  "
            f"buy {format_compact(bucket.buy_volume):>8}  "
            f"sell {format_compact(bucket.sell_volume):>8}  "
            f"delta {format_signed_compact(bucket.delta):>8}"
        )
    print()
    print(f"  Total Delta: {format_signed_compact(summary.total_delta)}")
    print(f"  Total Buy: {format_compact(summary.total_buy)}")
    print(f"  Total Sell: {format_compact(summary.total_sell)}")
    print(f"  Imbalance: {summary.imbalance_percent:.1f}% ({summary.bias.value})")
    print()

    console = Console(highlight=False)
    for line in render_delta_lines(buckets):
        console.print(line)

    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch trades from Binance and save them."""
    from orderflow.historical.binance import BinanceTradeFetcher
    from orderflow.historical.trade_storage import TradeStorage, generate_trade_filename

    symbol = args.symbol_arg.upper()
    end = args.end or datetime.now(timezone.utc)
    start = args.start or end - timedelta(hours=1)

    print("=" * 60)
    print("Binance Trade Fetcher")
    print("=" * 60)
    print(f"  Symbol: {symbol}")
    print(f"  Range: {start:%Y-%m-%d %H:%M} to {end:%Y-%m-%d %H:%M} UTC")
    print()

    with BinanceTradeFetcher() as fetcher:
        if args.recent:
            trades = fetcher.fetch_recent(symbol, limit=args.recent)
        else:
            trades = fetcher.fetch(symbol, start, end, verbose=True)

    if not trades:
        print("  No trades found. Check the time range and symbol.")
        return 1

    storage = TradeStorage(verbose=True)
    filename = generate_trade_filename(
        symbol, trades[0].traded_at, trades[-1].traded_at, extension=args.format
    )
    output_path = storage.save_trades(trades, Path(args.output) / filename)
    print(f"  Output file: {output_path}")

    return 0


def cmd_dashboard(args: argparse.Namespace) -> int:
    """Launch the Textual dashboard for a trade file or a live symbol."""
    from orderflow.ui.dashboard import OrderFlowDashboard

    store = ChartSettingsStore(args.data_dir)

    if args.file:
        app = OrderFlowDashboard(
            trades=_load_trades(args),
            store=store,
            reload_trades=lambda: _load_trades(args),
            current_price=args.price,
        )
        app.run()
        return 0

    from orderflow.historical.binance import MAX_LIMIT, BinanceTradeFetcher

    symbol = (args.symbol or store.load().symbol).upper()
    with BinanceTradeFetcher() as fetcher:
        app = OrderFlowDashboard(
            trades=fetcher.fetch_recent(symbol, limit=MAX_LIMIT),
            store=store,
            reload_trades=lambda: fetcher.fetch_recent(symbol, limit=MAX_LIMIT),
            current_price=args.price,
        )
        app.run()
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    """Show or change saved chart settings."""
    store = ChartSettingsStore(args.data_dir)

    if args.reset:
        store.reset()
        print("Settings reset to defaults")

    if args.set:
        settings = store.update(**dict(args.set))
    else:
        settings = store.load()

    print("Chart Settings")
    print("=" * 40)
    for key, value in settings.to_dict().items():
        print(f"  {key}: {value}")
    if not store.has_saved_settings:
        print("  (defaults - nothing saved yet)")

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="orderflow",
        description="Volume Profile and Delta Volume for crypto trades",
    )
    parser.add_argument(
        "--data-dir", default="data", help="Directory for saved settings (default: data)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output and logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Shared trade-file arguments
    source = argparse.ArgumentParser(add_help=False)
    source.add_argument("file", help="Trade file (.parquet or .csv)")
    source.add_argument("--symbol", "-s", default=None, help="Only use trades for this symbol")
    source.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    profile = subparsers.add_parser("profile", parents=[source], help="Volume profile")
    profile.add_argument("--bucket-width", "-w", type=float, help="Price bucket width")
    profile.add_argument("--value-area", type=float, help="Value Area fraction (default 0.70)")
    profile.add_argument(
        "--tie-break", choices=["above", "below"], help="Value Area tie-break side"
    )
    profile.add_argument("--price", type=float, help="Current price marker")
    profile.add_argument("--rows", type=int, default=24, help="Chart height in rows (default 24)")
    profile.set_defaults(func=cmd_profile)

    delta = subparsers.add_parser("delta", parents=[source], help="Delta volume")
    delta.add_argument("--window", type=int, help="Window size in seconds (default 120)")
    delta.add_argument(
        "--no-zero-fill", action="store_true", help="Omit windows without trades"
    )
    delta.set_defaults(func=cmd_delta)

    fetch = subparsers.add_parser("fetch", help="Fetch trades from Binance")
    fetch.add_argument("symbol_arg", metavar="SYMBOL", help="Trading pair (e.g., BTCUSDT)")
    fetch.add_argument("--start", type=parse_datetime, help="Start (UTC) yyyy-mm-dd:hh-mm")
    fetch.add_argument("--end", type=parse_datetime, help="End (UTC) yyyy-mm-dd:hh-mm")
    fetch.add_argument("--recent", type=int, help="Fetch only the N most recent trades")
    fetch.add_argument(
        "--output", "-o", default="data/trades", help="Output directory (default: data/trades)"
    )
    fetch.add_argument("--format", choices=["parquet", "csv"], default="parquet")
    fetch.set_defaults(func=cmd_fetch)

    dashboard = subparsers.add_parser("dashboard", help="Interactive terminal dashboard")
    dashboard.add_argument("file", nargs="?", help="Trade file (omit to pull recent trades)")
    dashboard.add_argument("--symbol", "-s", default=None, help="Symbol filter / live symbol")
    dashboard.add_argument("--price", type=float, help="Current price marker")
    dashboard.set_defaults(func=cmd_dashboard)

    settings = subparsers.add_parser("settings", help="Show or change chart settings")
    settings.add_argument(
        "--set", action="append", type=parse_setting, metavar="KEY=VALUE", help="Change a setting"
    )
    settings.add_argument("--reset", action="store_true", help="Reset to defaults")
    settings.set_defaults(func=cmd_settings)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse arguments and run a command, returning the exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except (OrderFlowError, FileNotFoundError, ValueError, KeyError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
