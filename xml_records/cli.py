"""
Command-line interface for the XML Record Extraction system.

This module provides the main entry point for running extraction jobs
from the command line:

    xml-records config.yml dump1.xml dump2.xml.gz --output records.jsonl
    xml-records config.yml dumps/ --odbc-table wiki_page --target-schema staging
"""

import sys
import logging
import argparse
import dataclasses

from typing import Optional

from . import __version__
from .config.config_manager import get_config_manager
from .config.processing_defaults import ProcessingDefaults
from .exceptions import XMLExtractionError
from .monitoring.performance_monitor import PerformanceMonitor
from .output.page_outputs import JsonLinesPageOutput
from .processing.file_input import FileInput
from .processing.sequential_processor import SequentialProcessor


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xml-records",
        description="Extract flat, typed records from XML documents."
    )
    parser.add_argument("config", help="Extraction config file (.yml, .yaml or .json)")
    parser.add_argument("inputs", nargs="+", help="XML files or directories, processed in order")
    parser.add_argument("--output", "-o", default="-",
                        help="JSON Lines output file, or '-' for stdout (default)")
    parser.add_argument("--odbc-table",
                        help="Write records to this database table instead of JSON Lines "
                             "(connection from XML_RECORDS_CONNECTION_STRING)")
    parser.add_argument("--target-schema", default=ProcessingDefaults.ODBC_TARGET_SCHEMA,
                        help=f"Database schema of --odbc-table (default: {ProcessingDefaults.ODBC_TARGET_SCHEMA})")
    parser.add_argument("--page-size", type=_positive_int,
                        help="Records per output page (overrides config and environment)")
    parser.add_argument("--log-level", default=ProcessingDefaults.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help=f"Logging level (default: {ProcessingDefaults.LOG_LEVEL})")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _create_output(args, config, config_manager):
    if args.odbc_table:
        # pyodbc needs a system ODBC library; only load it when asked for
        try:
            from .database.odbc_page_output import OdbcPageOutput
        except ImportError as e:
            raise XMLExtractionError(f"ODBC output unavailable: {e}", error_category="output_error") from e
        return OdbcPageOutput(
            connection_string=config_manager.get_database_connection_string(),
            table_name=args.odbc_table,
            schema=config.schema,
            target_schema=args.target_schema,
            batch_size=ProcessingDefaults.ODBC_BATCH_SIZE,
            connection_timeout=config_manager.database_config.connection_timeout
        )
    if args.output == "-":
        return JsonLinesPageOutput(sys.stdout)
    return JsonLinesPageOutput(args.output, encoding=ProcessingDefaults.JSONL_ENCODING)


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI application.

    Args:
        args: Optional command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for extraction errors, 2 for usage errors)
    """
    if args is None:
        args = sys.argv[1:]

    try:
        parsed = build_argument_parser().parse_args(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 2

    # Set up logging without reconfiguring root if already configured
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, parsed.log_level))
    logger = logging.getLogger(__name__)

    logger.info(f"XML Record Extraction System v{__version__}")

    try:
        config_manager = get_config_manager()
        config = config_manager.load_extraction_config(parsed.config)
        if parsed.page_size:
            config = dataclasses.replace(config, page_size=parsed.page_size)

        if logger.isEnabledFor(logging.DEBUG):
            ProcessingDefaults.log_summary(logger)
        summary = config_manager.get_configuration_summary(config)['extraction']
        logger.info(f"Root: {summary['root']}")
        logger.info(f"Columns: {', '.join(summary['columns'])}")
        logger.info(f"Page Size: {summary['page_size']}")

        file_input = FileInput.from_paths(parsed.inputs)
        logger.info(f"Input Files: {len(file_input)}")

        output = _create_output(parsed, config, config_manager)
        processor = SequentialProcessor(config, output, monitor=PerformanceMonitor())
        result = processor.process_files(file_input)

        logger.info(f"Processed {result.files_processed} files, {result.records_emitted} records "
                    f"in {result.processing_time_seconds:.2f}s")
        return 0

    except XMLExtractionError as e:
        logger.error(f"Extraction failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
