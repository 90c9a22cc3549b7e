"""
Centralized configuration defaults for XML record extraction.

This module defines operational configuration constants used throughout the system.
Configuration files, environment variables and CLI arguments can override them.
"""


class ProcessingDefaults:
    """
    Centralized operational configuration for extraction runs.

    All values are defaults that can be overridden:
    - in the extraction config file (page_size, default_timezone, ...)
    - via environment (XML_RECORDS_PAGE_SIZE, XML_RECORDS_DEFAULT_TIMEZONE, ...)
    - via CLI (xml-records config.yml input.xml --page-size 500 --log-level DEBUG)
    """

    # Paging
    PAGE_SIZE = 1000  # Records per page handed to the output
    READ_CHUNK_SIZE = 65536  # Bytes fed to the XML tokenizer at a time

    # Timestamp columns
    DEFAULT_TIMEZONE = "UTC"
    DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%N %z"

    # Outputs
    JSONL_ENCODING = "utf-8"
    ODBC_BATCH_SIZE = 500  # Records per executemany call
    ODBC_TARGET_SCHEMA = "dbo"
    CONNECTION_TIMEOUT = 30  # Connection timeout in seconds

    # Logging
    LOG_LEVEL = "WARNING"  # Default logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)

    @classmethod
    def to_dict(cls) -> dict:
        """
        Export all defaults as a dictionary.

        Returns:
            Dictionary of all ProcessingDefaults class attributes.
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if not key.startswith('_') and key.isupper()
        }

    @classmethod
    def log_summary(cls, logger) -> None:
        """
        Log a summary of all operational defaults.

        Args:
            logger: Logger instance to write the summary to
        """
        config_dict = cls.to_dict()
        summary = "\n".join([f"  {key}: {value}" for key, value in sorted(config_dict.items())])
        logger.info(f"Processing Configuration Defaults:\n{summary}")
