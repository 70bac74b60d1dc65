"""
Configuration management for cloudtable.

Handles loading, validation, and access to account and logging settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from cloudtable.auth.credentials import StorageCredentials
from cloudtable.table.client import CloudTableClient

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.WARNING
    format: str = "text"
    file: Optional[str] = None

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    model_config = ConfigDict(use_enum_values=True)


class AccountConfig(BaseModel):
    """Storage account settings."""
    name: Optional[str] = None
    key: Optional[str] = Field(default=None, description="Base64-encoded account key")
    key_name: Optional[str] = Field(default=None, description="Key identifier emitted with signatures")
    table_endpoint: Optional[str] = Field(
        default=None,
        description="Explicit Table service endpoint, e.g. http://127.0.0.1:10002/devstoreaccount1"
    )
    endpoint_suffix: str = "core.windows.net"
    use_https: bool = True


class CloudTableConfig(BaseModel):
    """Main cloudtable configuration schema."""

    account: AccountConfig = Field(default_factory=AccountConfig)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def table_endpoint(self) -> str:
        """
        Resolve the Table service endpoint.

        Raises:
            ValueError: If neither an endpoint nor an account name is configured
        """
        if self.account.table_endpoint:
            return self.account.table_endpoint
        if not self.account.name:
            raise ValueError("Either account.table_endpoint or account.name must be configured")
        scheme = "https" if self.account.use_https else "http"
        return f"{scheme}://{self.account.name}.table.{self.account.endpoint_suffix}"

    def credentials(self) -> StorageCredentials:
        """Build credentials from the account section; anonymous without a key."""
        if self.account.key:
            if not self.account.name:
                raise ValueError("account.name is required when account.key is set")
            return StorageCredentials.from_account_key(
                self.account.name, self.account.key, self.account.key_name
            )
        return StorageCredentials.anonymous()


class ConfigManager:
    """
    Manages cloudtable configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. Explicit overrides
    2. Environment variables (CLOUDTABLE_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    ENV_VARS = {
        "CLOUDTABLE_ACCOUNT_NAME": ("account", "name"),
        "CLOUDTABLE_ACCOUNT_KEY": ("account", "key"),
        "CLOUDTABLE_KEY_NAME": ("account", "key_name"),
        "CLOUDTABLE_TABLE_ENDPOINT": ("account", "table_endpoint"),
        "CLOUDTABLE_ENDPOINT_SUFFIX": ("account", "endpoint_suffix"),
        "CLOUDTABLE_LOG_LEVEL": ("logging", "level"),
        "CLOUDTABLE_LOG_FILE": ("logging", "file"),
    }

    def __init__(self):
        self._config: Optional[CloudTableConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> CloudTableConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            overrides: Dictionary of explicit overrides

        Returns:
            Validated CloudTableConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)

        if overrides:
            config_dict = self._merge_configs(config_dict, overrides)

        try:
            self._config = CloudTableConfig(**config_dict)
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        self._log_configuration()
        return self._config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        for env_name, (section, key) in self.ENV_VARS.items():
            if value := os.getenv(env_name):
                if section == "logging" and key == "level":
                    value = value.upper()
                config.setdefault(section, {})[key] = value

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration with the account key redacted."""
        config_dict = self._config.model_dump()

        if config_dict["account"].get("key"):
            config_dict["account"]["key"] = REDACTED

        logger.debug(f"Active configuration: {json.dumps(config_dict, indent=2)}")

    def get_config(self) -> CloudTableConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def create_client(self) -> CloudTableClient:
        """Build a table service client from the loaded configuration."""
        config = self.get_config()
        return CloudTableClient(config.table_endpoint(), config.credentials())
