"""Core configuration, settings persistence and errors."""

from orderflow.core.config import DEFAULT_CONFIG, OrderFlowConfig
from orderflow.core.errors import EmptyInputError, InvalidParameterError, OrderFlowError
from orderflow.core.settings import ChartSettings, ChartSettingsStore

__all__ = [
    "OrderFlowConfig",
    "DEFAULT_CONFIG",
    "OrderFlowError",
    "EmptyInputError",
    "InvalidParameterError",
    "ChartSettings",
    "ChartSettingsStore",
]
