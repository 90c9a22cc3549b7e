"""
Type coercion from captured element text to typed column values.

Numbers are parsed strictly with ASCII digits only. Longs allow no surrounding
whitespace; doubles first drop leading and trailing control characters and
spaces (everything up to U+0020), so values indented onto their own line parse.
Booleans are parsed leniently: only text equal to "true" ignoring case is
True, and everything else, including malformed text, is silently False.
That leniency is intended and must not be tightened, since existing data
relies on it.
"""

import math
import re

from typing import Any, Callable, Dict

from ..exceptions import InvalidNumberError, InvalidTimestampError
from ..models import Column, ColumnType, ExtractionConfig, Schema
from ..utils import StringUtils
from .timestamp_parser import TimestampParser


LONG_MIN = -(2 ** 63)
LONG_MAX = 2 ** 63 - 1

_LONG_PATTERN = re.compile(r'[+-]?[0-9]+')
_DOUBLE_PATTERN = re.compile(r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')
# Characters trimmed from both ends of double text
_DOUBLE_TRIM = "".join(chr(code) for code in range(0x21))
_DOUBLE_SPECIALS = {
    'NaN': math.nan,
    'Infinity': math.inf,
    '+Infinity': math.inf,
    '-Infinity': -math.inf,
}


class TypeCoercer:
    """
    Converts raw element text to the value required by a column's type.

    One TimestampParser is built per timestamp column when the coercer is
    created, so format and timezone problems surface before any document is read.
    """

    def __init__(self, schema: Schema, config: ExtractionConfig):
        """
        Initialize the coercer for a schema.

        Args:
            schema: Schema whose columns will be coerced
            config: Run configuration supplying timestamp defaults

        Raises:
            ValueError: If a timestamp column has an unresolvable timezone
        """
        self.schema = schema
        self._timestamp_parsers: Dict[int, TimestampParser] = {}
        for column in schema:
            if column.type is ColumnType.TIMESTAMP:
                self._timestamp_parsers[column.index] = TimestampParser.for_column(column, config)

        self._converters: Dict[ColumnType, Callable[[str, Column], Any]] = {
            ColumnType.STRING: self._to_string,
            ColumnType.JSON: self._to_json_text,
            ColumnType.LONG: self._to_long,
            ColumnType.DOUBLE: self._to_double,
            ColumnType.BOOLEAN: self._to_boolean,
            ColumnType.TIMESTAMP: self._to_timestamp,
        }

    def coerce(self, raw: str, column: Column) -> Any:
        """
        Convert captured text to the column's typed value.

        Args:
            raw: Character data captured for the column, untrimmed
            column: Column the text was captured for

        Returns:
            str, int, float, bool or aware datetime depending on the column type

        Raises:
            InvalidNumberError: For malformed long/double text
            InvalidTimestampError: For text the column's timestamp parser rejects
        """
        return self._converters[column.type](raw, column)

    def timestamp_parser(self, column: Column) -> TimestampParser:
        return self._timestamp_parsers[column.index]

    def _to_string(self, raw: str, column: Column) -> str:
        return raw

    def _to_json_text(self, raw: str, column: Column) -> str:
        # JSON columns are opaque text; no parsing or validation
        return raw

    def _to_long(self, raw: str, column: Column) -> int:
        if not _LONG_PATTERN.fullmatch(raw):
            raise self._invalid_number(raw, column)
        value = int(raw)
        if value < LONG_MIN or value > LONG_MAX:
            raise self._invalid_number(raw, column, "out of 64-bit range")
        return value

    def _to_double(self, raw: str, column: Column) -> float:
        text = raw.strip(_DOUBLE_TRIM)
        if text in _DOUBLE_SPECIALS:
            return _DOUBLE_SPECIALS[text]
        if not _DOUBLE_PATTERN.fullmatch(text):
            raise self._invalid_number(raw, column)
        return float(text)

    def _to_boolean(self, raw: str, column: Column) -> bool:
        return raw.lower() == "true"

    def _to_timestamp(self, raw: str, column: Column):
        parser = self.timestamp_parser(column)
        try:
            return parser.parse(raw)
        except ValueError as e:
            raise InvalidTimestampError(
                f"Invalid timestamp for column '{column.name}': {e}",
                column_name=column.name,
                source_value=raw,
                target_type=column.type.value
            ) from e

    def _invalid_number(self, raw: str, column: Column, reason: str = "not a valid number") -> InvalidNumberError:
        return InvalidNumberError(
            f"Invalid {column.type.value} for column '{column.name}': {StringUtils.truncate(raw)!r} is {reason}",
            column_name=column.name,
            source_value=raw,
            target_type=column.type.value
        )
