"""
Column matching for streaming XML extraction.

Resolves an open element path to the schema column it names, relative to the
configured record root.
"""

from typing import Optional

from ..models import Column, Schema


class MatchResolver:
    """
    Decides whether an element path names a configured column.

    Only paths strictly below the root path have a root-relative path: the root
    element itself and anything outside it never match. The prefix test works
    on whole path segments, so with root "a/b" the path "a/bc/d" is outside.
    """

    def __init__(self, root_path: str, schema: Schema):
        self.root_path = root_path
        self.schema = schema
        self._prefix = root_path + "/"

    def relative_path(self, current_path: str) -> Optional[str]:
        """
        Strip the root path and one separator from an element path.

        Args:
            current_path: '/'-joined path of the open element

        Returns:
            The root-relative path, or None when the element is outside or
            exactly at the root
        """
        if not current_path.startswith(self._prefix):
            return None
        return current_path[len(self._prefix):]

    def resolve(self, current_path: str) -> Optional[Column]:
        """Return the column named by the element's root-relative path, or None."""
        relative = self.relative_path(current_path)
        if relative is None:
            return None
        return self.schema.lookup(relative)

    def is_root(self, current_path: str) -> bool:
        return current_path == self.root_path
