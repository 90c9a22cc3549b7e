"""
Streaming XML tokenizer driver built on lxml.

This module feeds raw document bytes to an lxml parser whose target is a
RecordAssembler, so records are extracted in a single pass while the input
is read, without materializing a DOM.
"""

import io
import logging

from typing import Any, BinaryIO, Dict, Optional

from lxml import etree

from ..exceptions import XMLExtractionError, XMLParsingError
from ..mapping.type_coercion import TypeCoercer
from ..models import ExtractionConfig
from .extraction_engine import RecordAssembler
from .match_resolver import MatchResolver


class XMLRecordParser:
    """
    Single-pass XML record extractor for one run.

    The parser owns the run-wide, read-only pieces (match resolver and type
    coercer). Every document gets a fresh RecordAssembler and a fresh lxml
    tokenizer, so no path or match state leaks from one file to the next.

    Tokenizer settings:
    - recover is off: malformed XML fails the document
    - resolve_entities/no_network: no external entity or network access
    - huge_tree: very large text nodes (e.g. wiki revisions) are allowed
    """

    def __init__(self, config: ExtractionConfig, coercer: Optional[TypeCoercer] = None):
        """
        Initialize the parser for a run.

        Args:
            config: Extraction configuration (root path, schema, chunk size)
            coercer: Optional pre-built type coercer; built from config if omitted
        """
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.resolver = MatchResolver(config.root, config.schema)
        self.coercer = coercer or TypeCoercer(config.schema, config)

        # Performance tracking
        self.parse_count = 0
        self.records_emitted = 0

        self.logger.debug(f"XMLRecordParser initialized for root '{config.root}' with {len(config.schema)} columns")

    def _create_tokenizer(self, target: RecordAssembler) -> etree.XMLParser:
        return etree.XMLParser(
            target=target,
            recover=False,
            resolve_entities=False,
            no_network=True,
            huge_tree=True
        )

    def parse_stream(self, stream: BinaryIO, page_builder, source_name: Optional[str] = None) -> int:
        """
        Extract every record from one document read from a binary stream.

        Args:
            stream: Binary stream positioned at the start of the document
            page_builder: Receiver of finished records (PageBuilder)
            source_name: Optional input file name for logs and errors

        Returns:
            Number of records emitted for the document

        Raises:
            XMLParsingError: If the tokenizer rejects the document
            CoercionError: If captured text cannot be converted to its column type
        """
        self.parse_count += 1
        source_name = source_name or f"document_{self.parse_count}"

        assembler = RecordAssembler(self.resolver, self.coercer, page_builder, source_name)
        tokenizer = self._create_tokenizer(assembler)

        bytes_read = 0
        closed = False
        try:
            while True:
                chunk = stream.read(self.config.read_chunk_size)
                if not chunk:
                    break
                bytes_read += len(chunk)
                tokenizer.feed(chunk)
            if bytes_read == 0:
                raise XMLParsingError(f"XML content is empty in {source_name}", source_name=source_name)
            closed = True
            emitted = tokenizer.close()
        except XMLExtractionError:
            raise
        except etree.XMLSyntaxError as e:
            error_msg = f"XML syntax error in {source_name}: {e}"
            self.logger.error(error_msg)
            raise XMLParsingError(error_msg, source_name=source_name) from e
        finally:
            if not closed:
                self._discard_tokenizer(tokenizer, assembler)

        self.records_emitted += emitted
        self.logger.debug(f"Parsed {source_name}: {emitted} records")
        return emitted

    def _discard_tokenizer(self, tokenizer, assembler: RecordAssembler) -> None:
        """Close a tokenizer abandoned mid-document, releasing its parser state."""
        assembler.discard()
        try:
            tokenizer.close()
        except etree.LxmlError as e:
            # An incomplete document always fails to close; the original error wins
            self.logger.debug(f"Tokenizer for {assembler.source_name} discarded: {e}")

    def parse_bytes(self, content: bytes, page_builder, source_name: Optional[str] = None) -> int:
        """
        Extract every record from an in-memory document.

        Args:
            content: Whole document as bytes (str is encoded as UTF-8)
            page_builder: Receiver of finished records (PageBuilder)
            source_name: Optional name for logs and errors

        Returns:
            Number of records emitted for the document
        """
        if isinstance(content, str):
            content = content.encode('utf-8')
        return self.parse_stream(io.BytesIO(content or b''), page_builder, source_name)

    def get_performance_stats(self) -> Dict[str, Any]:
        """
        Get parser statistics.

        Returns:
            Dictionary containing parse and record counts
        """
        return {
            'parse_count': self.parse_count,
            'records_emitted': self.records_emitted,
            'root_path': self.config.root,
            'column_count': len(self.config.schema),
        }

    def reset_stats(self) -> None:
        """Reset statistics."""
        self.parse_count = 0
        self.records_emitted = 0
