"""
Timestamp parsing for timestamp-typed columns.

Formats are strptime-style. The Ruby-style fraction directives %N and %L are
accepted as aliases of %f, so fractions are honoured up to microseconds.
Results are timezone-aware datetimes normalized to UTC.
"""

import re

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..models import Column, ExtractionConfig


_OFFSET_PATTERN = re.compile(r'([+-])(\d{2}):?(\d{2})')
_FRACTION_DIRECTIVES = re.compile(r'(?<!%)%[NL]')


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """
    Resolve a timezone name to a tzinfo.

    Accepts "UTC"/"GMT"/"Z", fixed offsets such as "+09:00" or "-0500", and
    IANA names such as "Asia/Tokyo".

    Raises:
        ValueError: If the name cannot be resolved
    """
    if name is None or name.strip().upper() in ("UTC", "GMT", "Z"):
        return timezone.utc

    name = name.strip()
    match = _OFFSET_PATTERN.fullmatch(name)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-offset if sign == '-' else offset)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone '{name}'") from e


class TimestampParser:
    """Parses timestamp text with one format in one default timezone."""

    def __init__(self, format: str, timezone_name: str = "UTC"):
        """
        Initialize the parser.

        Args:
            format: strptime-style format, %N/%L allowed for fractions
            timezone_name: Timezone used when the text carries no offset

        Raises:
            ValueError: If the timezone cannot be resolved
        """
        if not format:
            raise ValueError("Timestamp format cannot be empty")
        self.format = format
        self.timezone_name = timezone_name
        self.tzinfo = resolve_timezone(timezone_name)
        self._strptime_format = _FRACTION_DIRECTIVES.sub('%f', format)

    @classmethod
    def for_column(cls, column: Column, config: ExtractionConfig) -> 'TimestampParser':
        """Build a parser from column options, falling back to run defaults."""
        return cls(
            format=column.get_option('format') or config.default_timestamp_format,
            timezone_name=column.get_option('timezone') or config.default_timezone
        )

    def parse(self, text: str) -> datetime:
        """
        Parse timestamp text into an aware UTC datetime.

        Raises:
            ValueError: If the text does not match the format
        """
        try:
            parsed = datetime.strptime(text, self._strptime_format)
        except ValueError as e:
            raise ValueError(f"'{text}' does not match format '{self.format}': {e}") from e

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self.tzinfo)
        return parsed.astimezone(timezone.utc)

    def __repr__(self) -> str:
        return f"TimestampParser(format={self.format!r}, timezone={self.timezone_name!r})"
