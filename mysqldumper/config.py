"""
Configuration loading and validation for MySQL Dumper.

Example::

    connection:
      dsn: "root:${MYSQL_PASSWORD}@tcp(localhost:3306)/shop"
    dump:
      tables: [users, orders]
      drop_table: true
      where: "id < 1000"
      output: ./dumps/shop.sql
    source:
      merge_insert: 500
    logging:
      level: INFO
"""

import os
import re
from typing import Any, Optional

import yaml

from .connection import DatabaseConnection
from .exceptions import ConfigError
from .models import DumpOptions, SourceOptions


class ConfigLoader:
    """Loads and validates configuration from YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
    SECTIONS = ('connection', 'dump', 'source', 'logging')

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = self._load_config() if config_path else {}

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file '{self.config_path}' must contain a mapping")
        unknown = set(config) - set(self.SECTIONS)
        if unknown:
            raise ConfigError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")

        return self._resolve_env_vars(config)

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def _section(self, name: str) -> dict[str, Any]:
        section = self.config.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Configuration section '{name}' must be a mapping")
        return section

    def get_connection_settings(self) -> dict[str, Any]:
        """Get connection settings."""
        return self._section('connection')

    def get_dsn(self, override: Optional[str] = None) -> Optional[str]:
        """Get the DSN, preferring an explicit override."""
        return override or self.get_connection_settings().get('dsn')

    def create_connection(self, dsn: Optional[str] = None) -> DatabaseConnection:
        """Build a DatabaseConnection from a DSN or from host/user settings."""
        dsn = self.get_dsn(dsn)
        if dsn:
            return DatabaseConnection.from_dsn(dsn)

        settings = self.get_connection_settings()
        if 'host' not in settings or 'user' not in settings:
            raise ConfigError("Connection requires a DSN or 'host' and 'user' settings")
        return DatabaseConnection(
            host=settings['host'],
            port=int(settings.get('port', DatabaseConnection.DEFAULT_PORT)),
            user=settings['user'],
            password=settings.get('password', ''),
            database=settings.get('database')
        )

    def get_dump_options(self, overrides: Optional[dict[str, Any]] = None) -> DumpOptions:
        """Get validated dump options, with overrides taking priority."""
        return DumpOptions.from_configs(self._section('dump'), overrides or {})

    def get_source_settings(self) -> dict[str, Any]:
        """Get source settings, including the non-option 'input' key."""
        return self._section('source')

    def get_source_options(self, overrides: Optional[dict[str, Any]] = None) -> SourceOptions:
        """Get validated source options, with overrides taking priority."""
        settings = {k: v for k, v in self.get_source_settings().items() if k != 'input'}
        return SourceOptions.from_configs(settings, overrides or {})

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self._section('logging')
