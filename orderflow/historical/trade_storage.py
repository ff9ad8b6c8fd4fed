"""
Trade Data Storage.

Stores and loads trade batches in efficient formats:
- Parquet: Primary format (~10x smaller than CSV, fast columnar reads)
- CSV: Plain-text format for hand-made fixtures and spreadsheets

Usage:
    storage = TradeStorage()

    # Save trades
    storage.save_trades(trades, Path("data/trades/BTCUSDT_trades_20260120.parquet"))

    # Load trades
    for trade in storage.load_trades(Path("data/trades/BTCUSDT_trades_20260120.parquet")):
        process(trade)
"""

import csv
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from orderflow.indicators.volume_profile.models import TradeEvent

logger = logging.getLogger(__name__)

CSV_FIELDS = ["timestamp", "price", "volume", "is_buyer_maker", "symbol"]


def _parse_bool(value: str) -> bool:
    """Parse CSV booleans written as true/false or 1/0."""
    normalized = value.strip().lower()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no", ""):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


class TradeStorage:
    """
    Stores and loads TradeEvent batches in Parquet or CSV format.

    The format follows the file extension: .parquet or .csv.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the storage.

        Args:
            verbose: Print progress information
        """
        self.verbose = verbose

    def _log(self, message: str) -> None:
        """Log message, and print it if verbose mode is enabled."""
        if self.verbose:
            print(message)
        logger.info(message)

    def save_trades(
        self,
        trades: Iterable[TradeEvent],
        filepath: Path,
        format: str = "auto",
    ) -> Path:
        """
        Save trades to file.

        Args:
            trades: TradeEvent objects
            filepath: Output file path
            format: "parquet", "csv", or "auto" (based on extension)

        Returns:
            Path to saved file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        # Determine format
        if format == "auto":
            if filepath.suffix == ".csv":
                format = "csv"
            else:
                format = "parquet"
                filepath = filepath.with_suffix(".parquet")

        trades = list(trades)

        if format == "parquet":
            return self._save_parquet(trades, filepath)
        if format == "csv":
            return self._save_csv(trades, filepath)
        raise ValueError(f"Unknown format: {format}. Use 'parquet', 'csv' or 'auto'")

    def _save_parquet(self, trades: list[TradeEvent], filepath: Path) -> Path:
        """Save trades to Parquet format."""
        self._log(f"Saving {len(trades)} trades to Parquet: {filepath}")

        table = pa.table(
            {
                "timestamp": pa.array([t.timestamp for t in trades], type=pa.int64()),
                "price": pa.array([t.price for t in trades], type=pa.float64()),
                "volume": pa.array([t.volume for t in trades], type=pa.float64()),
                "is_buyer_maker": pa.array([t.is_buyer_maker for t in trades], type=pa.bool_()),
                "symbol": pa.array([t.symbol for t in trades], type=pa.string()),
            }
        )

        pq.write_table(table, filepath, compression="snappy")

        size_kb = filepath.stat().st_size / 1024
        self._log(f"  Saved {len(trades)} trades ({size_kb:.1f} KB)")

        return filepath

    def _save_csv(self, trades: list[TradeEvent], filepath: Path) -> Path:
        """Save trades to CSV format."""
        self._log(f"Saving {len(trades)} trades to CSV: {filepath}")

        with filepath.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()

            for trade in trades:
                writer.writerow(
                    {
                        "timestamp": trade.timestamp,
                        "price": trade.price,
                        "volume": trade.volume,
                        "is_buyer_maker": "true" if trade.is_buyer_maker else "false",
                        "symbol": trade.symbol,
                    }
                )

        size_kb = filepath.stat().st_size / 1024
        self._log(f"  Saved {len(trades)} trades ({size_kb:.1f} KB)")

        return filepath

    def load_trades(
        self,
        filepath: Path,
        symbol: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> Iterator[TradeEvent]:
        """
        Load trades from file.

        Args:
            filepath: Path to trades file
            symbol: Optional symbol filter
            start_time: Optional start time filter (inclusive)
            end_time: Optional end time filter (inclusive)

        Yields:
            TradeEvent objects in file order
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        start_ms = int(start_time.timestamp() * 1000) if start_time else None
        end_ms = int(end_time.timestamp() * 1000) if end_time else None

        if filepath.suffix == ".parquet":
            rows = self._read_parquet(filepath)
        else:
            rows = self._read_csv(filepath)

        count = 0
        for row in rows:
            if symbol and row["symbol"].upper() != symbol.upper():
                continue
            if start_ms is not None and row["timestamp"] < start_ms:
                continue
            if end_ms is not None and row["timestamp"] > end_ms:
                continue

            yield TradeEvent(
                price=row["price"],
                volume=row["volume"],
                is_buyer_maker=row["is_buyer_maker"],
                timestamp=row["timestamp"],
                symbol=row["symbol"],
            )
            count += 1

        self._log(f"  Loaded {count} trades")

    def _read_parquet(self, filepath: Path) -> Iterator[dict]:
        """Read Parquet rows as dictionaries."""
        self._log(f"Loading trades from Parquet: {filepath}")

        table = pq.read_table(filepath)

        for row in table.to_pylist():
            yield {
                "timestamp": int(row["timestamp"]),
                "price": float(row["price"]),
                "volume": float(row["volume"]),
                "is_buyer_maker": bool(row["is_buyer_maker"]),
                "symbol": row["symbol"] or "",
            }

    def _read_csv(self, filepath: Path) -> Iterator[dict]:
        """Read CSV rows as dictionaries."""
        self._log(f"Loading trades from CSV: {filepath}")

        with filepath.open("r", newline="") as f:
            reader = csv.DictReader(f)

            for line_no, row in enumerate(reader, start=2):
                try:
                    yield {
                        "timestamp": int(row["timestamp"]),
                        "price": float(row["price"]),
                        "volume": float(row["volume"]),
                        "is_buyer_maker": _parse_bool(row["is_buyer_maker"]),
                        "symbol": row.get("symbol") or "",
                    }
                except (KeyError, ValueError) as e:
                    raise ValueError(f"Invalid trade row at {filepath}:{line_no}: {e}") from e

    def get_file_info(self, filepath: Path) -> dict:
        """
        Get information about a trade data file.

        Args:
            filepath: Path to trades file

        Returns:
            Dictionary with file information
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        info = {
            "path": str(filepath),
            "size_bytes": filepath.stat().st_size,
            "size_mb": filepath.stat().st_size / (1024 * 1024),
            "format": filepath.suffix.lstrip("."),
        }

        if filepath.suffix == ".parquet":
            parquet_file = pq.ParquetFile(filepath)
            info["num_rows"] = parquet_file.metadata.num_rows
            info["num_columns"] = parquet_file.metadata.num_columns
            if parquet_file.metadata.num_row_groups:
                info["compression"] = parquet_file.metadata.row_group(0).column(0).compression

        return info


def generate_trade_filename(
    symbol: str,
    start_date: datetime,
    end_date: datetime | None = None,
    extension: str = "parquet",
) -> str:
    """
    Generate a descriptive filename for trade data.

    Args:
        symbol: Trading pair
        start_date: Start date
        end_date: End date (optional, uses start_date if not provided)
        extension: File extension

    Returns:
        Filename string
    """
    start_str = start_date.strftime("%Y%m%d")

    if end_date and end_date.date() != start_date.date():
        end_str = end_date.strftime("%Y%m%d")
        return f"{symbol}_trades_{start_str}_to_{end_str}.{extension}"
    return f"{symbol}_trades_{start_str}.{extension}"
