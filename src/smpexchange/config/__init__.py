"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, optional_env_var, parse_flag, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .exchange import ExchangeConfig, get_exchange_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ExchangeConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_database_config",
    "get_exchange_config",
    "get_storage_config",
    "optional_env_var",
    "parse_flag",
    "require_env_var",
    "require_env_vars",
]
