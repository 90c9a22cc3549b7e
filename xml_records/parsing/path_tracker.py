"""
Path tracking for streaming XML extraction.

The tracker mirrors the tokenizer's nesting: one push per element open and one
pop per element close, so its depth always equals the current XML depth.
"""

from typing import Dict, List, Optional


class PathStack:
    """Stack of currently open element names, document element first."""

    SEPARATOR = "/"

    def __init__(self):
        self._names: List[str] = []

    def push(self, name: str) -> None:
        self._names.append(name)

    def pop(self) -> str:
        """
        Remove and return the innermost element name.

        Raises:
            IndexError: If no element is open
        """
        if not self._names:
            raise IndexError("pop from empty path stack")
        return self._names.pop()

    def current_path(self) -> str:
        """Return the open path joined with '/' (empty string when nothing is open)."""
        return self.SEPARATOR.join(self._names)

    @property
    def depth(self) -> int:
        return len(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"PathStack({self.current_path()!r})"


class NamespaceScopes:
    """
    Rebuilds qualified names from lxml's ``{uri}local`` tag form.

    lxml reports each element's namespace declarations in the ``nsmap`` passed
    to the parser target's start(). Keeping one uri -> prefix scope per open
    element turns ``{uri}local`` back into ``prefix:local`` as written in the
    document, or plain ``local`` for the default namespace.
    """

    def __init__(self):
        self._scopes: List[Dict[str, Optional[str]]] = [{}]

    def push(self, nsmap: Optional[Dict[Optional[str], str]] = None) -> None:
        """Open an element scope with the namespace declarations made on it."""
        if not nsmap:
            self._scopes.append(self._scopes[-1])
            return
        scope = dict(self._scopes[-1])
        for prefix, uri in nsmap.items():
            scope[uri] = prefix
        self._scopes.append(scope)

    def pop(self) -> None:
        if len(self._scopes) == 1:
            raise IndexError("pop from empty namespace scope stack")
        self._scopes.pop()

    def qualified_name(self, tag: str) -> str:
        """Return the name of ``tag`` as written in the document."""
        if not tag.startswith("{"):
            return tag
        uri, _, local = tag[1:].partition("}")
        prefix = self._scopes[-1].get(uri)
        return f"{prefix}:{local}" if prefix else local
