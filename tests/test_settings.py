"""
Unit tests for OrderFlowConfig and the chart settings store.
"""

import json
from pathlib import Path

import pytest

from orderflow.core.config import DEFAULT_CONFIG, OrderFlowConfig
from orderflow.core.errors import InvalidParameterError
from orderflow.core.settings import ChartSettings, ChartSettingsStore


class TestOrderFlowConfig:
    """Tests for OrderFlowConfig validation."""

    def test_defaults(self) -> None:
        """Test default thresholds."""
        assert DEFAULT_CONFIG.value_area_fraction == 0.70
        assert DEFAULT_CONFIG.time_bucket_size_ms == 120_000
        assert DEFAULT_CONFIG.tie_break == "above"
        assert DEFAULT_CONFIG.zero_fill is True
        assert DEFAULT_CONFIG.max_buckets == 10_000

    @pytest.mark.parametrize(
        "changes",
        [
            {"bucket_width": 0},
            {"value_area_fraction": 0},
            {"value_area_fraction": 1.5},
            {"time_bucket_size_ms": -1},
            {"tie_break": "sideways"},
            {"hvn_multiplier": 0},
            {"delta_bias_threshold_pct": 101},
            {"max_buckets": 0},
            {"max_buckets": 2.5},
        ],
    )
    def test_invalid_values(self, changes: dict) -> None:
        """Test out-of-range values are rejected."""
        with pytest.raises(InvalidParameterError):
            OrderFlowConfig(**changes)


class TestChartSettings:
    """Tests for ChartSettings."""

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Test settings written by other versions still load."""
        settings = ChartSettings.from_dict({"bucket_width": 25.0, "theme": "dark"})

        assert settings.bucket_width == 25.0
        assert settings.symbol == "BTCUSDT"

    def test_to_config(self) -> None:
        """Test settings carry over and thresholds come from the base config."""
        base = OrderFlowConfig(delta_bias_threshold_pct=35.0, max_buckets=500)
        config = ChartSettings(bucket_width=5.0, zero_fill=False).to_config(base)

        assert config.bucket_width == 5.0
        assert config.zero_fill is False
        assert config.delta_bias_threshold_pct == 35.0
        assert config.max_buckets == 500


class TestChartSettingsStore:
    """Tests for ChartSettingsStore."""

    def test_defaults_when_nothing_saved(self, tmp_path: Path) -> None:
        """Test load() without a file returns defaults."""
        store = ChartSettingsStore(tmp_path)

        assert not store.has_saved_settings
        assert store.load() == ChartSettings()

    def test_save_and_load(self, tmp_path: Path) -> None:
        """Test saved settings come back unchanged."""
        store = ChartSettingsStore(tmp_path / "nested")
        settings = ChartSettings(symbol="ETHUSDT", bucket_width=2.5, show_volume_profile=False)

        path = store.save(settings)
        assert path == tmp_path / "nested" / "settings.json"
        assert store.load() == settings

    def test_update(self, tmp_path: Path) -> None:
        """Test update() merges changes and persists them."""
        store = ChartSettingsStore(tmp_path)
        store.update(bucket_width=25.0)
        updated = store.update(time_bucket_size_ms=60_000)

        assert updated.bucket_width == 25.0
        assert updated.time_bucket_size_ms == 60_000
        assert json.loads(store.settings_file.read_text())["bucket_width"] == 25.0

    def test_update_unknown_key(self, tmp_path: Path) -> None:
        """Test unknown keys are rejected."""
        with pytest.raises(KeyError):
            ChartSettingsStore(tmp_path).update(colour="red")

    def test_invalid_value_not_saved(self, tmp_path: Path) -> None:
        """Test a value that fails validation never reaches disk."""
        store = ChartSettingsStore(tmp_path)

        with pytest.raises(InvalidParameterError):
            store.update(value_area_fraction=2.0)
        assert not store.has_saved_settings

    def test_corrupt_file(self, tmp_path: Path) -> None:
        """Test a corrupt settings file raises ValueError."""
        store = ChartSettingsStore(tmp_path)
        store.settings_file.write_text("{not json")

        with pytest.raises(ValueError, match="Invalid settings file"):
            store.load()

    def test_reset(self, tmp_path: Path) -> None:
        """Test reset() deletes the saved file."""
        store = ChartSettingsStore(tmp_path)
        store.save(ChartSettings(bucket_width=1.0))
        store.reset()

        assert not store.has_saved_settings
        assert store.load() == ChartSettings()
