"""
Centralized configuration management for the XML record extraction system.

This module provides the ConfigManager class that serves as the single source of truth
for extraction configuration: loading the root path and column schema from YAML or
JSON files, applying environment variable overrides, and building the database
connection settings used by the ODBC output.

Example extraction config (YAML):

    root: mediawiki/page
    default_timezone: UTC
    schema:
      - {name: id, type: long}
      - {name: title, type: string}
      - {name: revision/timestamp, type: timestamp, format: "%Y-%m-%dT%H:%M:%SZ", timezone: UTC}
      - {name: revision/text, type: string}

The same keys may also be nested under a top-level ``parser`` mapping.
"""

import os
import json
import logging

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass

import yaml

from ..exceptions import ConfigurationError
from ..mapping.timestamp_parser import TimestampParser
from ..models import Column, ColumnType, ExtractionConfig, Schema
from .processing_defaults import ProcessingDefaults


@dataclass
class DatabaseConfig:
    """Database configuration for the ODBC output with environment variable support."""
    connection_string: str
    driver: str = "ODBC Driver 17 for SQL Server"
    server: str = "localhost"
    database: str = "XmlRecords"
    trusted_connection: bool = True
    connection_timeout: int = ProcessingDefaults.CONNECTION_TIMEOUT

    @classmethod
    def from_environment(cls) -> 'DatabaseConfig':
        """Create database configuration from environment variables."""
        connection_string = os.environ.get('XML_RECORDS_CONNECTION_STRING')

        if connection_string:
            return cls(connection_string=connection_string)

        driver = os.environ.get('XML_RECORDS_DB_DRIVER', cls.driver)
        server = os.environ.get('XML_RECORDS_DB_SERVER', cls.server)
        database = os.environ.get('XML_RECORDS_DB_DATABASE', cls.database)
        trusted_connection = os.environ.get('XML_RECORDS_DB_TRUSTED_CONNECTION', 'true').lower() == 'true'
        connection_timeout = int(os.environ.get('XML_RECORDS_DB_CONNECTION_TIMEOUT', cls.connection_timeout))

        connection_string = (
            f"DRIVER={{{driver}}};"
            f"SERVER={server};"
            f"DATABASE={database};"
        )
        if trusted_connection:
            connection_string += "Trusted_Connection=yes;"
        else:
            username = os.environ.get('XML_RECORDS_DB_USERNAME', '')
            password = os.environ.get('XML_RECORDS_DB_PASSWORD', '')
            connection_string += f"UID={username};PWD={password};"
        connection_string += f"Connection Timeout={connection_timeout};TrustServerCertificate=yes;"

        return cls(
            connection_string=connection_string,
            driver=driver,
            server=server,
            database=database,
            trusted_connection=trusted_connection,
            connection_timeout=connection_timeout
        )


class ConfigManager:
    """
    Centralized configuration manager serving as single source of truth.

    Precedence for run-level settings, lowest to highest: ProcessingDefaults,
    the extraction config file, XML_RECORDS_* environment variables. The CLI
    applies its own arguments on top of the result.
    """

    # Environment variable -> (config key, converter)
    ENVIRONMENT_OVERRIDES = {
        'XML_RECORDS_PAGE_SIZE': ('page_size', int),
        'XML_RECORDS_READ_CHUNK_SIZE': ('read_chunk_size', int),
        'XML_RECORDS_DEFAULT_TIMEZONE': ('default_timezone', str),
        'XML_RECORDS_DEFAULT_TIMESTAMP_FORMAT': ('default_timestamp_format', str),
    }

    # Column entry keys that are not type options
    _COLUMN_KEYS = ('name', 'type')

    def __init__(self, base_config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            base_config_path: Base path for relative config file paths. If None,
                uses XML_RECORDS_CONFIG_PATH or the current directory.
        """
        self.logger = logging.getLogger(__name__)
        if base_config_path is not None:
            self.base_config_path = Path(base_config_path)
        else:
            self.base_config_path = Path(os.environ.get('XML_RECORDS_CONFIG_PATH', Path.cwd()))

        self.database_config = DatabaseConfig.from_environment()
        self._extraction_config_cache: Dict[str, ExtractionConfig] = {}

        self.logger.debug(f"ConfigManager initialized with base path: {self.base_config_path}")

    def get_database_connection_string(self) -> str:
        return self.database_config.connection_string

    def load_extraction_config(self, config_path: Union[str, Path]) -> ExtractionConfig:
        """
        Load an extraction config file with caching.

        Args:
            config_path: Path to a .yaml/.yml or .json file, absolute or relative
                to the base config path

        Returns:
            Validated extraction configuration

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        cache_key = str(config_path)
        if cache_key in self._extraction_config_cache:
            self.logger.debug(f"Returning cached extraction config for {config_path}")
            return self._extraction_config_cache[cache_key]

        full_path = self.base_config_path / config_path

        if not full_path.exists():
            raise ConfigurationError(f"Extraction config file not found: {full_path}")

        suffix = full_path.suffix.lower()
        try:
            with open(full_path, 'r', encoding='utf-8') as file:
                if suffix in ('.yaml', '.yml'):
                    config_data = yaml.safe_load(file)
                elif suffix == '.json':
                    config_data = json.load(file)
                else:
                    raise ConfigurationError(f"Unsupported file format: {full_path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to parse extraction config file {full_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read extraction config file {full_path}: {e}") from e

        config = self.build_extraction_config(config_data)
        self._extraction_config_cache[cache_key] = config

        self.logger.info(f"Loaded extraction config from {full_path} (root '{config.root}', {len(config.schema)} columns)")
        return config

    def build_extraction_config(self, config_data: Any) -> ExtractionConfig:
        """
        Build and validate an extraction config from parsed file contents.

        Args:
            config_data: Mapping with root, schema and optional run-level keys

        Returns:
            Validated extraction configuration

        Raises:
            ConfigurationError: If the root path or column list is malformed
        """
        if not isinstance(config_data, dict):
            raise ConfigurationError("Extraction config must be a mapping")
        if isinstance(config_data.get('parser'), dict):
            config_data = config_data['parser']

        settings = {
            'page_size': config_data.get('page_size', ProcessingDefaults.PAGE_SIZE),
            'read_chunk_size': config_data.get('read_chunk_size', ProcessingDefaults.READ_CHUNK_SIZE),
            'default_timezone': config_data.get('default_timezone', ProcessingDefaults.DEFAULT_TIMEZONE),
            'default_timestamp_format': config_data.get('default_timestamp_format',
                                                        ProcessingDefaults.DEFAULT_TIMESTAMP_FORMAT),
        }
        settings.update(self._environment_overrides())

        if 'root' not in config_data:
            raise ConfigurationError("Extraction config is missing 'root'")
        if 'schema' not in config_data:
            raise ConfigurationError("Extraction config is missing 'schema'")

        schema = self._parse_schema(config_data['schema'])

        try:
            config = ExtractionConfig(
                root=config_data['root'],
                schema=schema,
                default_timezone=settings['default_timezone'],
                default_timestamp_format=settings['default_timestamp_format'],
                page_size=int(settings['page_size']),
                read_chunk_size=int(settings['read_chunk_size'])
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid extraction config: {e}") from e

        self._validate_extraction_config(config)
        return config

    def _environment_overrides(self) -> Dict[str, Any]:
        overrides = {}
        for variable, (key, converter) in self.ENVIRONMENT_OVERRIDES.items():
            value = os.environ.get(variable)
            if value is None:
                continue
            try:
                overrides[key] = converter(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {variable}: {value!r}") from e
            self.logger.debug(f"{key} overridden from environment: {overrides[key]}")
        return overrides

    def _parse_schema(self, schema_data: Any) -> Schema:
        """Parse an ordered list of column entries into a Schema."""
        if not isinstance(schema_data, list) or not schema_data:
            raise ConfigurationError("'schema' must be a non-empty list of columns")

        columns: List[Column] = []
        for position, entry in enumerate(schema_data):
            columns.append(self._parse_column(entry, position))
        return Schema(columns)

    def _parse_column(self, entry: Any, position: int) -> Column:
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Column #{position} must be a mapping with 'name' and 'type'")
        if 'name' not in entry or 'type' not in entry:
            raise ConfigurationError(f"Column #{position} requires both 'name' and 'type'")

        options = {
            key: str(value) for key, value in entry.items()
            if key not in self._COLUMN_KEYS and value is not None
        }
        try:
            return Column(name=entry['name'], type=ColumnType.from_name(entry['type']), options=options)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid column #{position} ({entry.get('name')!r}): {e}") from e

    def _validate_extraction_config(self, config: ExtractionConfig) -> None:
        """
        Validate cross-field rules before any document is processed.

        - every timestamp column must have a resolvable timezone
        - duplicate column names are allowed but reported
        """
        for column in config.schema:
            if column.type is ColumnType.TIMESTAMP:
                try:
                    TimestampParser.for_column(column, config)
                except ValueError as e:
                    raise ConfigurationError(f"Invalid timestamp options for column '{column.name}': {e}") from e

        duplicates = config.schema.duplicate_names()
        if duplicates:
            self.logger.warning(f"Duplicate column names (first definition wins): {duplicates}")

    def get_configuration_summary(self, config: Optional[ExtractionConfig] = None) -> Dict[str, Any]:
        """
        Get a summary of the current configuration.

        Args:
            config: Optional extraction config to include

        Returns:
            Dictionary describing paths, database and extraction settings
        """
        summary: Dict[str, Any] = {
            'base_config_path': str(self.base_config_path),
            'database': {
                'server': self.database_config.server,
                'database': self.database_config.database,
                'connection_string_configured': bool(self.database_config.connection_string),
            },
        }
        if config is not None:
            summary['extraction'] = {
                'root': config.root,
                'columns': [f"{column.name}:{column.type.value}" for column in config.schema],
                'page_size': config.page_size,
                'default_timezone': config.default_timezone,
                'default_timestamp_format': config.default_timestamp_format,
            }
        return summary

    def clear_cache(self) -> None:
        """Clear all cached configurations."""
        self._extraction_config_cache.clear()
        self.logger.debug("Configuration cache cleared")


_config_manager: Optional[ConfigManager] = None


def get_config_manager(base_config_path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        base_config_path: Base path for configuration files (used only on first call)

    Returns:
        Global ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(base_config_path)
    return _config_manager


def reset_config_manager() -> None:
    """Reset the global configuration manager (primarily for testing)."""
    global _config_manager
    _config_manager = None
