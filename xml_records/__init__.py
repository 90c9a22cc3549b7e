"""
XML Record Extraction System

A streaming, schema-driven tool for turning large XML documents into flat,
typed records delivered page by page to JSON Lines files or database tables.
"""

__version__ = "1.0.0"
__author__ = "XML Records Team"

# Import core models and interfaces for easy access
from .models import (
    Column,
    ColumnType,
    Schema,
    ExtractionConfig,
    ExtractionResult,
    Page
)

from .interfaces import (
    PageOutputInterface,
    FileInputInterface
)

from .exceptions import (
    XMLExtractionError,
    XMLParsingError,
    CoercionError,
    InvalidNumberError,
    InvalidTimestampError,
    ConfigurationError,
    OutputError,
    DatabaseConnectionError,
    DatabaseConstraintError
)

__all__ = [
    # Core models
    "Column",
    "ColumnType",
    "Schema",
    "ExtractionConfig",
    "ExtractionResult",
    "Page",

    # Interfaces
    "PageOutputInterface",
    "FileInputInterface",

    # Exceptions
    "XMLExtractionError",
    "XMLParsingError",
    "CoercionError",
    "InvalidNumberError",
    "InvalidTimestampError",
    "ConfigurationError",
    "OutputError",
    "DatabaseConnectionError",
    "DatabaseConstraintError"
]
