"""
Utility functions for common patterns across the XML record extraction system.
"""

import re


class StringUtils:
    """Utility methods for string processing."""

    # Cached regex patterns for performance
    _regex_cache = {
        'path_separator': re.compile(r'/+'),
        'bracket': re.compile(r'[\[\]]'),
    }

    @staticmethod
    def sql_column_name(column_name: str) -> str:
        """
        Derive a SQL column identifier from a root-relative column path.

        Examples:
            'revision/text' -> 'revision_text'
            'id' -> 'id'

        Args:
            column_name: Column name as configured in the schema

        Returns:
            Identifier safe to wrap in [brackets]
        """
        name = StringUtils._regex_cache['path_separator'].sub('_', column_name)
        return StringUtils._regex_cache['bracket'].sub('', name)

    @staticmethod
    def truncate(value: str, limit: int = 80) -> str:
        """Shorten a value for log and error messages."""
        if value is None or len(value) <= limit:
            return value
        return value[:limit] + "..."
