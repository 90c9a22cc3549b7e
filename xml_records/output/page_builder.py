"""
Record buffering between the extraction engine and a paged output.

Records are collected into pages of a fixed size. A full page goes to the
output immediately; the remainder of a file goes at flush(), which also
checkpoints the output so that file's records become durable.
"""

import logging

from typing import Any, Dict, List

from ..interfaces import PageOutputInterface
from ..models import Page, Schema


class PageBuilder:
    """
    Buffers finished records into pages for a PageOutputInterface.

    Lifecycle per run: add_record() many times, flush() after each input
    file, finish() after the last file, close() always. On failure, abort()
    drops the unflushed buffer and tells the output to discard everything
    since its last checkpoint.
    """

    def __init__(self, schema: Schema, output: PageOutputInterface, page_size: int = 1000):
        """
        Initialize the page builder.

        Args:
            schema: Schema of the records being buffered
            output: Destination for pages
            page_size: Maximum number of records per page
        """
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.logger = logging.getLogger(__name__)
        self.schema = schema
        self.output = output
        self.page_size = page_size

        self._buffer: List[Dict[str, Any]] = []
        self._closed = False

        self.records_added = 0
        self.pages_added = 0

    def add_record(self, record: Dict[str, Any]) -> None:
        """Buffer one finished record, handing over a page once it is full."""
        self._buffer.append(record)
        self.records_added += 1
        if len(self._buffer) >= self.page_size:
            self._send_page()

    def flush(self) -> None:
        """Hand over any buffered records and checkpoint the output."""
        if self._buffer:
            self._send_page()
        self.output.checkpoint()

    def finish(self) -> None:
        """Flush remaining records and finalize the output."""
        if self._buffer:
            self._send_page()
        self.output.finish()
        self.logger.debug(f"PageBuilder finished: {self.records_added} records in {self.pages_added} pages")

    def abort(self) -> None:
        """Drop unflushed records and discard uncheckpointed output."""
        if self._buffer:
            self.logger.debug(f"Dropping {len(self._buffer)} unflushed records")
        self._buffer = []
        self.output.abort()

    def close(self) -> None:
        """Release the output; unflushed records are never delivered."""
        if self._closed:
            return
        self._closed = True
        self._buffer = []
        self.output.close()

    @property
    def buffered_count(self) -> int:
        return len(self._buffer)

    def _send_page(self) -> None:
        page = Page(records=self._buffer)
        self._buffer = []
        self.output.add(page)
        self.pages_added += 1
