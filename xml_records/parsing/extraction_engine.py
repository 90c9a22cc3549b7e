"""
Streaming record extraction engine.

The RecordAssembler is an lxml parser target: the tokenizer calls start(),
data(), end() and close() as it reads a document, and the assembler turns
those events into typed records without ever building a tree.

State carried between events:
- the open element path (PathStack), built from qualified names as written
  in the document (NamespaceScopes undoes lxml's ``{uri}local`` form)
- whether a record is in progress (EngineState plus the current RecordBuilder)
- the ActiveMatch of the innermost matched element, plus any outer
  matches it suspended

Capture is scoped to the innermost matched element. An element naming a
column always starts a match; if another match is active it is suspended and
resumed when the nested element closes. Text is only taken while the
capturing element is the innermost open element, so with mixed content a
matched element keeps its own direct text and nothing from its children.
"""

import logging

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import XMLExtractionError
from ..mapping.type_coercion import TypeCoercer
from ..models import Column, Schema
from .match_resolver import MatchResolver
from .path_tracker import NamespaceScopes, PathStack


class EngineState(Enum):
    """Whether the engine is between records or inside one."""
    IDLE = "idle"
    IN_RECORD = "in_record"


@dataclass
class ActiveMatch:
    """Text being captured for the one open element that names a column."""
    column: Column
    depth: int
    parts: List[str] = field(default_factory=list)

    def append(self, text: str) -> None:
        self.parts.append(text)

    @property
    def text(self) -> str:
        return "".join(self.parts)


class RecordBuilder:
    """A partially filled row; unwritten columns stay None."""

    def __init__(self, schema: Schema):
        self.schema = schema
        self._values: List[Any] = [None] * len(schema)

    def set(self, column: Column, value: Any) -> None:
        self._values[column.index] = value

    def get(self, column: Column) -> Any:
        return self._values[column.index]

    def build(self) -> Dict[str, Any]:
        return {column.name: self._values[column.index] for column in self.schema}


class RecordAssembler:
    """
    Event-driven state machine turning one XML document into records.

    One assembler handles exactly one document; a fresh one (and so a fresh
    path stack and match slot) is created for every input file. Finished
    records go to ``page_builder.add_record()``. A match interrupted by a
    nested matched element waits in a stack until that element closes.
    """

    def __init__(self, resolver: MatchResolver, coercer: TypeCoercer, page_builder,
                 source_name: Optional[str] = None):
        """
        Initialize the assembler for one document.

        Args:
            resolver: Column matcher for the run's root path and schema
            coercer: Converter from captured text to typed values
            page_builder: Receiver of finished records (PageBuilder)
            source_name: Optional input file name used in errors and logs
        """
        self.logger = logging.getLogger(__name__)
        self.resolver = resolver
        self.coercer = coercer
        self.page_builder = page_builder
        self.source_name = source_name

        self.path = PathStack()
        self.namespaces = NamespaceScopes()
        self.state = EngineState.IDLE
        self.active_match: Optional[ActiveMatch] = None
        self._suspended: List[ActiveMatch] = []
        self.record: Optional[RecordBuilder] = None
        self.records_emitted = 0
        self._discarded = False

    def start(self, tag: str, attrib=None, nsmap=None) -> None:
        """Handle an element-open event. Attributes are received but unused."""
        self.namespaces.push(nsmap)
        self.path.push(self.namespaces.qualified_name(tag))
        current_path = self.path.current_path()

        if self.resolver.is_root(current_path):
            self.state = EngineState.IN_RECORD
            self.record = RecordBuilder(self.resolver.schema)

        column = self.resolver.resolve(current_path)
        if column is not None:
            if self.active_match is not None:
                self._suspended.append(self.active_match)
            self.active_match = ActiveMatch(column=column, depth=self.path.depth)

    def data(self, text: str) -> None:
        """Handle a character-data event."""
        if self.active_match is not None and self.active_match.depth == self.path.depth:
            self.active_match.append(text)

    def end(self, tag: str) -> None:
        """Handle an element-close event."""
        current_path = self.path.current_path()

        if self.resolver.is_root(current_path):
            self._emit_record()

        match = self.active_match
        if match is not None and match.depth == self.path.depth:
            self.active_match = self._suspended.pop() if self._suspended else None
            self._write_value(match)

        self.path.pop()
        self.namespaces.pop()

    def close(self) -> int:
        """
        Handle the end of the document.

        Returns:
            Number of records emitted for this document
        """
        source = self.source_name or "<document>"
        if self._discarded:
            self.record = None
            self.state = EngineState.IDLE
            return self.records_emitted

        if self.state is EngineState.IN_RECORD:
            # Only a root close emits; a record still open here is dropped
            self.logger.warning(f"Discarding unterminated record at end of {source}")
            self.record = None
            self.state = EngineState.IDLE

        self.logger.debug(f"End of {source}: {self.records_emitted} records extracted")
        return self.records_emitted

    def discard(self) -> None:
        """Drop any open record so close() finishes quietly; used when parsing failed."""
        self._discarded = True
        self.active_match = None
        self._suspended.clear()

    def _emit_record(self) -> None:
        self.page_builder.add_record(self.record.build())
        self.records_emitted += 1
        self.record = None
        self.state = EngineState.IDLE

    def _write_value(self, match: ActiveMatch) -> None:
        try:
            value = self.coercer.coerce(match.text, match.column)
        except XMLExtractionError as e:
            if e.source_name is None:
                e.source_name = self.source_name
            raise

        if self.record is not None:
            self.record.set(match.column, value)
