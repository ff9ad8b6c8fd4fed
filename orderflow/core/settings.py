"""
Chart Settings Store

Persists the chart preferences (symbol, bucket sizes, overlay toggles) to
disk so the dashboard opens the way it was left.

The store is an explicit object handed to whoever needs it. Nothing reads
or writes settings behind the caller's back.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from orderflow.core.config import OrderFlowConfig

logger = logging.getLogger(__name__)


@dataclass
class ChartSettings:
    """
    User chart preferences that get persisted to disk.

    Only the knobs a user can change from the dashboard live here;
    analysis thresholds stay in OrderFlowConfig.
    """

    symbol: str = "BTCUSDT"
    bucket_width: float = 10.0
    value_area_fraction: float = 0.70
    tie_break: str = "above"
    time_bucket_size_ms: int = 120_000
    zero_fill: bool = True
    show_volume_profile: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ChartSettings":
        """Create from dictionary, ignoring keys this version does not know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_config(self, base: OrderFlowConfig | None = None) -> OrderFlowConfig:
        """
        Build an analysis config from these settings.

        Args:
            base: Config supplying the thresholds not stored in settings

        Returns:
            Validated OrderFlowConfig
        """
        base = base or OrderFlowConfig()
        return OrderFlowConfig(
            bucket_width=self.bucket_width,
            value_area_fraction=self.value_area_fraction,
            tie_break=self.tie_break,  # type: ignore[arg-type]
            time_bucket_size_ms=self.time_bucket_size_ms,
            zero_fill=self.zero_fill,
            max_buckets=base.max_buckets,
            hvn_multiplier=base.hvn_multiplier,
            lvn_multiplier=base.lvn_multiplier,
            poc_tolerance_pct=base.poc_tolerance_pct,
            delta_bias_threshold_pct=base.delta_bias_threshold_pct,
        )


class ChartSettingsStore:
    """
    Loads and saves ChartSettings as JSON.

    Layout:
        <data_dir>/settings.json
    """

    SETTINGS_FILENAME = "settings.json"

    def __init__(self, data_dir: str | Path = "data"):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the settings file
        """
        self.data_dir = Path(data_dir)
        self.settings_file = self.data_dir / self.SETTINGS_FILENAME

    @property
    def has_saved_settings(self) -> bool:
        """Check if settings were saved before."""
        return self.settings_file.exists()

    def load(self) -> ChartSettings:
        """
        Load settings from disk.

        Returns:
            Saved settings, or defaults if nothing has been saved yet
        """
        if not self.has_saved_settings:
            return ChartSettings()

        try:
            data = json.loads(self.settings_file.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid settings file {self.settings_file}: {e}") from e

        settings = ChartSettings.from_dict(data)
        logger.debug("Loaded chart settings from %s", self.settings_file)
        return settings

    def save(self, settings: ChartSettings) -> Path:
        """
        Write settings to disk.

        Args:
            settings: Settings to persist

        Returns:
            Path of the settings file
        """
        # Validate before persisting so a bad value never reaches disk
        settings.to_config()

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file.write_text(json.dumps(settings.to_dict(), indent=2))
        logger.info("Saved chart settings to %s", self.settings_file)
        return self.settings_file

    def update(self, **changes: Any) -> ChartSettings:
        """
        Apply changes to the saved settings and persist them.

        Args:
            **changes: Field names and new values

        Returns:
            The updated settings
        """
        current = self.load().to_dict()
        unknown = set(changes) - set(current)
        if unknown:
            raise KeyError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        current.update(changes)
        settings = ChartSettings.from_dict(current)
        self.save(settings)
        return settings

    def reset(self) -> None:
        """Delete saved settings."""
        if self.settings_file.exists():
            self.settings_file.unlink()
