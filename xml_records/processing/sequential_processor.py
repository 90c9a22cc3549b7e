"""
Sequential document driver.

Runs the extraction engine over input files strictly one at a time, in
order. Each file gets a fresh tokenizer and engine state; the page builder
is flushed (and the output checkpointed) after every complete file, so a
failure part-way through a run leaves only whole files behind.
"""

import io
import time
import logging

from typing import BinaryIO, ContextManager, Iterable, Optional, Tuple

from ..exceptions import XMLExtractionError
from ..interfaces import FileInputInterface, PageOutputInterface
from ..models import ExtractionConfig, ExtractionResult
from ..monitoring.performance_monitor import PerformanceMonitor
from ..output.page_builder import PageBuilder
from ..parsing.xml_parser import XMLRecordParser


class SequentialProcessor:
    """
    Single-threaded driver for one extraction run.

    The processor owns the page builder for the run and always closes it,
    which in turn closes the output. On any error the unflushed page is
    dropped, the output is aborted back to its last checkpoint and the error
    is re-raised; ``last_result`` still describes how far the run got.
    """

    def __init__(self,
                 config: ExtractionConfig,
                 output: PageOutputInterface,
                 monitor: Optional[PerformanceMonitor] = None,
                 parser: Optional[XMLRecordParser] = None):
        """
        Initialize the sequential processor.

        Args:
            config: Extraction configuration shared by every document
            output: Destination for extracted pages
            monitor: Optional performance monitor for throughput/memory metrics
            parser: Optional pre-built parser (built from config if omitted)
        """
        self.logger = logging.getLogger(__name__)
        self.config = config
        self.output = output
        self.monitor = monitor
        self.parser = parser or XMLRecordParser(config)
        self.last_result: Optional[ExtractionResult] = None

        self.logger.info(f"SequentialProcessor initialized (root '{config.root}', page size {config.page_size})")

    def process_files(self, file_input: FileInputInterface) -> ExtractionResult:
        """
        Extract records from every file of a FileInput.

        Args:
            file_input: Ordered input files

        Returns:
            ExtractionResult summarizing the run

        Raises:
            XMLExtractionError: On the first parsing, coercion, input or output failure
        """
        return self._run(file_input.open())

    def process_documents(self, documents: Iterable[Tuple[str, bytes]]) -> ExtractionResult:
        """
        Extract records from in-memory documents.

        Args:
            documents: (name, content) pairs in processing order

        Returns:
            ExtractionResult summarizing the run
        """
        def streams():
            for name, content in documents:
                if isinstance(content, str):
                    content = content.encode('utf-8')
                yield name, io.BytesIO(content or b'')

        return self._run(streams())

    def _run(self, sources: Iterable[Tuple[str, ContextManager[BinaryIO]]]) -> ExtractionResult:
        start_time = time.time()
        result = ExtractionResult()
        self.last_result = result

        page_builder = PageBuilder(self.config.schema, self.output, self.config.page_size)
        if self.monitor is not None:
            self.monitor.start_monitoring()

        current_name = None
        try:
            for name, source in sources:
                current_name = name
                with source as stream:
                    records = self._process_stream(stream, page_builder, name)
                page_builder.flush()

                result.files_processed += 1
                result.records_emitted += records
                result.records_per_file[name] = records
                if self.monitor is not None:
                    self.monitor.record_file(name, records)
                self.logger.info(f"File {result.files_processed} ({name}): {records} records")
                current_name = None

            page_builder.finish()
        except Exception as e:
            where = f" while processing {current_name}" if current_name else ""
            self.logger.error(f"Extraction failed{where}: {e}")
            result.errors.append(str(e))
            page_builder.abort()
            raise
        finally:
            page_builder.close()
            result.processing_time_seconds = time.time() - start_time
            if self.monitor is not None and self.monitor.is_monitoring:
                result.performance_metrics = self.monitor.stop_monitoring().to_dict()

        self.logger.info(
            f"Extraction complete - Files: {result.files_processed}, "
            f"Records: {result.records_emitted}, Time: {result.processing_time_seconds:.2f}s"
        )
        return result

    def _process_stream(self, stream: BinaryIO, page_builder: PageBuilder, name: str) -> int:
        try:
            return self.parser.parse_stream(stream, page_builder, source_name=name)
        except OSError as e:
            # Unreadable or corrupt (e.g. bad gzip) input
            raise XMLExtractionError(f"Failed to read {name}: {e}", source_name=name,
                                     error_category="input_error") from e
