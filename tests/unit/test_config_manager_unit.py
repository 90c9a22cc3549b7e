"""
Tests for the centralized ConfigManager.

This module tests extraction config loading from YAML and JSON, environment
variable overrides, validation, caching and database settings.
"""

import os
import json
import tempfile
import unittest
from pathlib import Path

from xml_records.config.config_manager import (
    ConfigManager,
    DatabaseConfig,
    get_config_manager,
    reset_config_manager
)
from xml_records.config.processing_defaults import ProcessingDefaults
from xml_records.exceptions import ConfigurationError
from xml_records.models import ColumnType


ENV_VARS = [
    'XML_RECORDS_CONNECTION_STRING',
    'XML_RECORDS_DB_DRIVER',
    'XML_RECORDS_DB_SERVER',
    'XML_RECORDS_DB_DATABASE',
    'XML_RECORDS_DB_TRUSTED_CONNECTION',
    'XML_RECORDS_DB_USERNAME',
    'XML_RECORDS_DB_PASSWORD',
    'XML_RECORDS_DB_CONNECTION_TIMEOUT',
    'XML_RECORDS_PAGE_SIZE',
    'XML_RECORDS_READ_CHUNK_SIZE',
    'XML_RECORDS_DEFAULT_TIMEZONE',
    'XML_RECORDS_DEFAULT_TIMESTAMP_FORMAT',
    'XML_RECORDS_CONFIG_PATH',
]

MEDIAWIKI_YAML = """
root: mediawiki/page
schema:
  - {name: id, type: long}
  - {name: title, type: string}
  - {name: revision/timestamp, type: timestamp, format: "%Y-%m-%dT%H:%M:%SZ", timezone: UTC}
  - {name: revision/text, type: string}
"""


class EnvironmentIsolation(unittest.TestCase):
    """Clears XML_RECORDS_* variables around each test."""

    def setUp(self):
        self._saved_env = {var: os.environ.pop(var) for var in ENV_VARS if var in os.environ}
        reset_config_manager()

    def tearDown(self):
        for var in ENV_VARS:
            os.environ.pop(var, None)
        os.environ.update(self._saved_env)
        reset_config_manager()


class TestDatabaseConfig(EnvironmentIsolation):
    """Test DatabaseConfig class."""

    def test_default_configuration(self):
        config = DatabaseConfig.from_environment()

        self.assertEqual(config.driver, "ODBC Driver 17 for SQL Server")
        self.assertEqual(config.server, "localhost")
        self.assertTrue(config.trusted_connection)
        self.assertEqual(config.connection_timeout, 30)
        self.assertIn("DRIVER={ODBC Driver 17 for SQL Server}", config.connection_string)
        self.assertIn("Trusted_Connection=yes", config.connection_string)

    def test_environment_variable_override(self):
        os.environ['XML_RECORDS_DB_SERVER'] = 'dbhost'
        os.environ['XML_RECORDS_DB_DATABASE'] = 'WikiDB'
        os.environ['XML_RECORDS_DB_CONNECTION_TIMEOUT'] = '60'

        config = DatabaseConfig.from_environment()

        self.assertEqual(config.server, 'dbhost')
        self.assertEqual(config.connection_timeout, 60)
        self.assertIn("SERVER=dbhost", config.connection_string)
        self.assertIn("DATABASE=WikiDB", config.connection_string)

    def test_sql_authentication(self):
        os.environ['XML_RECORDS_DB_TRUSTED_CONNECTION'] = 'false'
        os.environ['XML_RECORDS_DB_USERNAME'] = 'loader'
        os.environ['XML_RECORDS_DB_PASSWORD'] = 'secret'

        config = DatabaseConfig.from_environment()

        self.assertFalse(config.trusted_connection)
        self.assertIn("UID=loader;PWD=secret;", config.connection_string)
        self.assertNotIn("Trusted_Connection", config.connection_string)

    def test_direct_connection_string(self):
        os.environ['XML_RECORDS_CONNECTION_STRING'] = "DRIVER={Test Driver};SERVER=s;DATABASE=d;"

        config = DatabaseConfig.from_environment()

        self.assertEqual(config.connection_string, "DRIVER={Test Driver};SERVER=s;DATABASE=d;")


class TestConfigManagerLoading(EnvironmentIsolation):
    """Test loading extraction configs from files."""

    def setUp(self):
        super().setUp()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)
        self.manager = ConfigManager(self.base)

    def tearDown(self):
        self.temp_dir.cleanup()
        super().tearDown()

    def write(self, name, content):
        (self.base / name).write_text(content, encoding='utf-8')
        return name

    def test_load_yaml(self):
        config = self.manager.load_extraction_config(self.write('wiki.yml', MEDIAWIKI_YAML))

        self.assertEqual(config.root, 'mediawiki/page')
        self.assertEqual(config.schema.column_names, ['id', 'title', 'revision/timestamp', 'revision/text'])
        self.assertIs(config.schema.lookup('id').type, ColumnType.LONG)
        self.assertEqual(config.schema.lookup('revision/timestamp').get_option('format'), '%Y-%m-%dT%H:%M:%SZ')
        self.assertEqual(config.page_size, ProcessingDefaults.PAGE_SIZE)
        self.assertEqual(config.default_timezone, ProcessingDefaults.DEFAULT_TIMEZONE)

    def test_load_json(self):
        data = {
            'root': 'items/item',
            'page_size': 50,
            'schema': [{'name': 'price', 'type': 'DOUBLE'}, {'name': 'ok', 'type': 'boolean'}]
        }
        config = self.manager.load_extraction_config(self.write('items.json', json.dumps(data)))

        self.assertEqual(config.page_size, 50)
        self.assertIs(config.schema.lookup('price').type, ColumnType.DOUBLE)

    def test_parser_section(self):
        content = "parser:\n  root: r\n  schema:\n    - {name: a, type: string}\n"
        config = self.manager.load_extraction_config(self.write('embedded.yaml', content))
        self.assertEqual(config.root, 'r')

    def test_absolute_path(self):
        path = self.base / self.write('abs.yml', MEDIAWIKI_YAML)
        config = ConfigManager('/nonexistent').load_extraction_config(path)
        self.assertEqual(config.root, 'mediawiki/page')

    def test_caching(self):
        name = self.write('wiki.yml', MEDIAWIKI_YAML)
        first = self.manager.load_extraction_config(name)
        self.assertIs(self.manager.load_extraction_config(name), first)

        self.manager.clear_cache()
        self.assertIsNot(self.manager.load_extraction_config(name), first)

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            self.manager.load_extraction_config('nope.yml')

    def test_unsupported_extension(self):
        with self.assertRaises(ConfigurationError):
            self.manager.load_extraction_config(self.write('wiki.toml', 'root = "r"'))

    def test_malformed_yaml(self):
        with self.assertRaises(ConfigurationError):
            self.manager.load_extraction_config(self.write('bad.yml', 'root: [unclosed'))

    def test_malformed_json(self):
        with self.assertRaises(ConfigurationError):
            self.manager.load_extraction_config(self.write('bad.json', '{"root": '))


class TestBuildExtractionConfig(EnvironmentIsolation):
    """Test validation and overrides when building configs."""

    def setUp(self):
        super().setUp()
        self.manager = ConfigManager('.')

    def build(self, **overrides):
        data = {'root': 'r', 'schema': [{'name': 'a', 'type': 'string'}]}
        data.update(overrides)
        return self.manager.build_extraction_config(data)

    def test_invalid_inputs(self):
        cases = [
            {'root': ''},
            {'root': '/r'},
            {'root': 'r//s'},
            {'schema': []},
            {'schema': 'a'},
            {'schema': [{'name': 'a'}]},
            {'schema': [{'type': 'string'}]},
            {'schema': [{'name': 'a', 'type': 'decimal'}]},
            {'schema': [{'name': 'a/', 'type': 'string'}]},
            {'schema': ['a']},
            {'page_size': 0},
            {'page_size': 'many'},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ConfigurationError):
                    self.build(**overrides)

    def test_missing_root_and_schema(self):
        with self.assertRaises(ConfigurationError):
            self.manager.build_extraction_config({'schema': [{'name': 'a', 'type': 'string'}]})
        with self.assertRaises(ConfigurationError):
            self.manager.build_extraction_config({'root': 'r'})
        with self.assertRaises(ConfigurationError):
            self.manager.build_extraction_config(None)

    def test_unresolvable_timezone(self):
        with self.assertRaises(ConfigurationError):
            self.build(schema=[{'name': 't', 'type': 'timestamp', 'timezone': 'Nowhere/Special'}])
        with self.assertRaises(ConfigurationError):
            self.build(default_timezone='Nowhere/Special',
                       schema=[{'name': 't', 'type': 'timestamp'}])

    def test_column_options_are_strings(self):
        config = self.build(schema=[{'name': 't', 'type': 'timestamp', 'timezone': '+09:00', 'format': '%Y'}])
        column = config.schema.lookup('t')
        self.assertEqual(column.options, {'timezone': '+09:00', 'format': '%Y'})

    def test_duplicate_columns_warn(self):
        with self.assertLogs('xml_records.config.config_manager', level='WARNING') as logs:
            config = self.build(schema=[{'name': 'a', 'type': 'string'}, {'name': 'a', 'type': 'long'}])
        self.assertIn('Duplicate column names', logs.output[0])
        self.assertIs(config.schema.lookup('a').type, ColumnType.STRING)

    def test_environment_overrides_file_values(self):
        os.environ['XML_RECORDS_PAGE_SIZE'] = '25'
        os.environ['XML_RECORDS_DEFAULT_TIMEZONE'] = '+01:00'
        os.environ['XML_RECORDS_READ_CHUNK_SIZE'] = '1024'

        config = self.build(page_size=500, default_timezone='UTC')

        self.assertEqual(config.page_size, 25)
        self.assertEqual(config.default_timezone, '+01:00')
        self.assertEqual(config.read_chunk_size, 1024)

    def test_invalid_environment_value(self):
        os.environ['XML_RECORDS_PAGE_SIZE'] = 'lots'
        with self.assertRaises(ConfigurationError):
            self.build()

    def test_configuration_summary(self):
        config = self.build()
        summary = self.manager.get_configuration_summary(config)

        self.assertEqual(summary['extraction']['root'], 'r')
        self.assertEqual(summary['extraction']['columns'], ['a:string'])
        self.assertTrue(summary['database']['connection_string_configured'])
        self.assertNotIn('extraction', self.manager.get_configuration_summary())


class TestGlobalConfigManager(EnvironmentIsolation):
    """Test the module-level singleton accessors."""

    def test_singleton(self):
        manager = get_config_manager()
        self.assertIs(get_config_manager(), manager)

    def test_reset(self):
        manager = get_config_manager()
        reset_config_manager()
        self.assertIsNot(get_config_manager(), manager)

    def test_config_path_from_environment(self):
        os.environ['XML_RECORDS_CONFIG_PATH'] = '/etc/xml_records'
        self.assertEqual(ConfigManager().base_config_path, Path('/etc/xml_records'))


class TestProcessingDefaults(unittest.TestCase):

    def test_to_dict(self):
        defaults = ProcessingDefaults.to_dict()
        self.assertEqual(defaults['PAGE_SIZE'], 1000)
        self.assertEqual(defaults['DEFAULT_TIMEZONE'], 'UTC')
        self.assertNotIn('to_dict', defaults)


if __name__ == '__main__':
    unittest.main()
