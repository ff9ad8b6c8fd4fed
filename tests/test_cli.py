"""
Tests for the command line interface (profile, delta, settings).
"""

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from orderflow.cli import parse_datetime, parse_setting, run
from orderflow.historical.trade_storage import TradeStorage
from orderflow.indicators.volume_profile import TradeEvent

# 2026-01-20 10:00:00 UTC
BASE_MS = 1_768_903_200_000


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each CLI test from its own directory so the log file lands there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def trade_file(workdir: Path) -> Path:
    trades = [
        TradeEvent(price=100, volume=10, is_buyer_maker=False, timestamp=BASE_MS, symbol="BTCUSDT"),
        TradeEvent(price=100, volume=5, is_buyer_maker=True, timestamp=BASE_MS + 1_000, symbol="BTCUSDT"),
        TradeEvent(price=101, volume=20, is_buyer_maker=False, timestamp=BASE_MS + 130_000, symbol="BTCUSDT"),
    ]
    return TradeStorage().save_trades(trades, workdir / "trades.csv")


class TestArgumentParsing:
    """Tests for argument converters."""

    def test_parse_datetime(self) -> None:
        """Test both accepted datetime formats."""
        assert parse_datetime("2026-01-12:10-15") == datetime(2026, 1, 12, 10, 15, tzinfo=timezone.utc)
        assert parse_datetime("2026-01-12") == datetime(2026, 1, 12, tzinfo=timezone.utc)
        with pytest.raises(argparse.ArgumentTypeError):
            parse_datetime("12/01/2026")

    def test_parse_setting(self) -> None:
        """Test values are converted to the setting's type."""
        assert parse_setting("bucket_width=25") == ("bucket_width", 25.0)
        assert parse_setting("time_bucket_size_ms=60000") == ("time_bucket_size_ms", 60_000)
        assert parse_setting("zero_fill=false") == ("zero_fill", False)
        assert parse_setting("symbol=ETHUSDT") == ("symbol", "ETHUSDT")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_setting("colour=red")


class TestCommands:
    """Tests for running commands end to end."""

    def test_profile(self, trade_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test the profile table."""
        assert run(["profile", str(trade_file), "--bucket-width", "1"]) == 0

        out = capsys.readouterr().out
        assert "POC: $101" in out
        assert "Value Area: $100 - $101" in out

    def test_profile_json(self, trade_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test JSON output."""
        assert run(["profile", str(trade_file), "-w", "1", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["poc"] == 101.0
        assert [b["volume"] for b in data["buckets"]] == [15.0, 20.0]

    def test_delta_json(self, trade_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test delta output with two-minute windows."""
        assert run(["delta", str(trade_file), "--window", "120", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [b["delta"] for b in data["buckets"]] == [5.0, 20.0]
        assert data["totalDelta"] == 25.0

    def test_settings_used_as_defaults(
        self, trade_file: Path, workdir: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Test saved settings drive later commands."""
        data_dir = str(workdir / "data")
        assert run(["--data-dir", data_dir, "settings", "--set", "bucket_width=10"]) == 0
        capsys.readouterr()

        assert run(["--data-dir", data_dir, "profile", str(trade_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [b["price"] for b in data["buckets"]] == [100.0]

    def test_missing_file(self, workdir: Path, capsys: pytest.CaptureFixture) -> None:
        """Test a missing trade file exits with 1."""
        assert run(["profile", str(workdir / "missing.csv")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_width(self, trade_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test an invalid bucket width exits with 1."""
        assert run(["profile", str(trade_file), "--bucket-width", "0"]) == 1
        assert "bucket_width" in capsys.readouterr().err
