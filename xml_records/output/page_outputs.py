"""
File and in-memory implementations of PageOutputInterface.

Both outputs honour checkpoints: records added after the last checkpoint are
discarded by abort(), so a failed run never exposes a partial file's records.
"""

import json
import logging

from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from ..exceptions import OutputError
from ..interfaces import PageOutputInterface
from ..models import Page


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class ListPageOutput(PageOutputInterface):
    """
    Collects records in memory.

    ``records`` holds only checkpointed records; pages added since the last
    checkpoint wait in ``pending`` until checkpoint() or finish().
    """

    def __init__(self):
        self.records: List[Dict[str, Any]] = []
        self.pending: List[Dict[str, Any]] = []
        self.pages_received = 0
        self.checkpoints = 0
        self.finished = False
        self.aborted = False
        self.closed = False

    def add(self, page: Page) -> None:
        self.pending.extend(page.records)
        self.pages_received += 1

    def checkpoint(self) -> None:
        self.records.extend(self.pending)
        self.pending = []
        self.checkpoints += 1

    def finish(self) -> None:
        self.checkpoint()
        self.finished = True

    def abort(self) -> None:
        self.pending = []
        self.aborted = True

    def close(self) -> None:
        self.closed = True


class JsonLinesPageOutput(PageOutputInterface):
    """
    Writes one JSON object per record.

    Timestamps are written as ISO 8601 strings; json columns stay raw strings.
    When writing to a file path, abort() truncates the file back to the last
    checkpoint. A caller-supplied stream cannot be rewound, so abort() only
    stops further writes to it.
    """

    def __init__(self, destination: Union[str, Path, TextIO], encoding: str = "utf-8"):
        """
        Initialize the output.

        Args:
            destination: File path to create/overwrite, or an open text stream
            encoding: Encoding used when opening a file path
        """
        self.logger = logging.getLogger(__name__)
        self.encoding = encoding
        self.records_written = 0
        self._committed_offset = 0
        self._aborted = False

        if isinstance(destination, (str, Path)):
            self.path: Optional[Path] = Path(destination)
            try:
                self._stream = open(self.path, 'w', encoding=encoding, newline='\n')
            except OSError as e:
                raise OutputError(f"Cannot open output file {self.path}: {e}") from e
            self._owns_stream = True
        else:
            self.path = None
            self._stream = destination
            self._owns_stream = False

    def add(self, page: Page) -> None:
        if self._aborted:
            raise OutputError("Cannot add records to an aborted output")
        try:
            for record in page:
                self._stream.write(json.dumps(record, ensure_ascii=False, default=_json_default))
                self._stream.write('\n')
                self.records_written += 1
        except (OSError, TypeError, ValueError) as e:
            raise OutputError(f"Failed to write records to {self.path or 'stream'}: {e}") from e

    def checkpoint(self) -> None:
        self._stream.flush()
        if self._owns_stream:
            self._committed_offset = self._stream.tell()

    def finish(self) -> None:
        self.checkpoint()
        self.logger.info(f"Wrote {self.records_written} records to {self.path or 'stream'}")

    def abort(self) -> None:
        self._aborted = True
        if not self._owns_stream:
            return
        self._stream.flush()
        self._stream.seek(self._committed_offset)
        self._stream.truncate()
        self.logger.warning(f"Output {self.path} rolled back to last checkpoint")

    def close(self) -> None:
        if self._owns_stream and not self._stream.closed:
            self._stream.close()
