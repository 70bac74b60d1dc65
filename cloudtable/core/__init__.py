"""Core module initialization."""

from .config_manager import ConfigManager, CloudTableConfig, AccountConfig, LoggingConfig
from .logging_config import setup_logging

__all__ = [
    "ConfigManager",
    "CloudTableConfig",
    "AccountConfig",
    "LoggingConfig",
    "setup_logging",
]
