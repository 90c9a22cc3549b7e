"""
Core data models for the XML record extraction system.

This module defines the primary data structures used throughout the system
for schema definition, run configuration, output pages and run results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class ColumnType(Enum):
    """Supported scalar types for extracted columns."""
    STRING = "string"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    JSON = "json"

    @classmethod
    def from_name(cls, name: str) -> 'ColumnType':
        """
        Look up a column type by its configuration name (case-insensitive).

        Raises:
            ValueError: If the name is not a supported type
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            supported = ", ".join(t.value for t in cls)
            raise ValueError(f"Unsupported column type '{name}' (expected one of: {supported})")


def validate_element_path(path: str, what: str) -> None:
    """
    Check that a '/'-joined element path has no empty segments.

    Raises:
        ValueError: If the path is empty, starts or ends with '/', or contains '//'
    """
    if not path or not isinstance(path, str):
        raise ValueError(f"{what} cannot be empty")
    if any(segment == "" for segment in path.split("/")):
        raise ValueError(f"{what} '{path}' must not contain empty path segments")


@dataclass
class Column:
    """
    A named, typed slot in the output schema.

    Attributes:
        name: Root-relative element path, '/'-separated (e.g. "revision/text")
        type: Declared scalar type
        options: Type-specific options (e.g. "format" and "timezone" for timestamps)
        index: Position of the column in its schema, assigned by Schema
    """
    name: str
    type: ColumnType
    options: Dict[str, str] = field(default_factory=dict)
    index: int = -1

    def __post_init__(self):
        """Validate the column and normalize its type."""
        validate_element_path(self.name, "Column name")
        self.type = ColumnType.from_name(self.type)
        if self.options is None:
            self.options = {}

    def get_option(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.options.get(key, default)


class Schema:
    """
    Ordered, read-only set of columns shared by every document in a run.

    The column order determines record field order. A path-keyed lookup table
    is built once here; when two columns share a name the first one wins.
    """

    def __init__(self, columns: List[Column]):
        if not columns:
            raise ValueError("At least one column must be specified")
        self._columns = tuple(columns)
        self._by_name: Dict[str, Column] = {}
        for index, column in enumerate(self._columns):
            column.index = index
            self._by_name.setdefault(column.name, column)

    @property
    def columns(self) -> List[Column]:
        return list(self._columns)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self._columns]

    def lookup(self, name: str) -> Optional[Column]:
        """Return the column named by a root-relative path, or None."""
        return self._by_name.get(name)

    def duplicate_names(self) -> List[str]:
        """Return column names that appear more than once."""
        seen = set()
        duplicates = []
        for column in self._columns:
            if column.name in seen and column.name not in duplicates:
                duplicates.append(column.name)
            seen.add(column.name)
        return duplicates

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __getitem__(self, index: int) -> Column:
        return self._columns[index]

    def __repr__(self) -> str:
        return f"Schema({self.column_names!r})"


@dataclass
class ExtractionConfig:
    """
    Configuration parameters for an extraction run.

    Attributes:
        root: '/'-joined path of the record boundary element (e.g. "mediawiki/page")
        schema: Columns to extract under each root element
        default_timezone: Timezone applied to timestamp columns without their own
        default_timestamp_format: Format applied to timestamp columns without their own
        page_size: Number of records per page handed to the output
        read_chunk_size: Number of bytes fed to the tokenizer at a time
    """
    root: str
    schema: Schema
    default_timezone: str = "UTC"
    default_timestamp_format: str = "%Y-%m-%d %H:%M:%S.%N %z"
    page_size: int = 1000
    read_chunk_size: int = 65536

    def __post_init__(self):
        """Validate extraction configuration."""
        validate_element_path(self.root, "Root path")
        if not isinstance(self.schema, Schema):
            self.schema = Schema(list(self.schema or []))
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.read_chunk_size <= 0:
            raise ValueError("read_chunk_size must be positive")


@dataclass
class Page:
    """An ordered batch of records handed to an output in one call."""
    records: List[Dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


@dataclass
class ExtractionResult:
    """
    Results from an extraction run.

    Attributes:
        files_processed: Number of input files parsed to completion
        records_emitted: Total number of records emitted across all files
        processing_time_seconds: Total processing time
        records_per_file: Records emitted per input file, in processing order
        errors: Error messages encountered (at most one, since errors are fatal)
        performance_metrics: Dictionary of performance metrics
    """
    files_processed: int = 0
    records_emitted: int = 0
    processing_time_seconds: float = 0.0
    records_per_file: Dict[str, int] = None
    errors: List[str] = None
    performance_metrics: Dict[str, Any] = None

    def __post_init__(self):
        """Initialize default values for mutable fields."""
        if self.records_per_file is None:
            self.records_per_file = {}
        if self.errors is None:
            self.errors = []
        if self.performance_metrics is None:
            self.performance_metrics = {}

    @property
    def success(self) -> bool:
        return not self.errors
