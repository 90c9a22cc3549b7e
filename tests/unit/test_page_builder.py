"""
Unit tests for PageBuilder paging and checkpoint behavior.
"""

import sys
import os
base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
if base_dir not in sys.path:
    sys.path.insert(0, base_dir)

import pytest

from xml_records.models import Column, ColumnType, Schema
from xml_records.output.page_builder import PageBuilder
from xml_records.output.page_outputs import ListPageOutput


@pytest.fixture
def schema():
    return Schema([Column("v", ColumnType.LONG)])


@pytest.fixture
def output():
    return ListPageOutput()


def records(*values):
    return [{"v": v} for v in values]


class TestPaging:

    def test_full_pages_are_sent_immediately(self, schema, output):
        builder = PageBuilder(schema, output, page_size=2)
        for record in records(1, 2, 3):
            builder.add_record(record)

        assert output.pages_received == 1
        assert output.pending == records(1, 2)
        assert builder.buffered_count == 1

    def test_flush_sends_partial_page_and_checkpoints(self, schema, output):
        builder = PageBuilder(schema, output, page_size=10)
        builder.add_record({"v": 1})
        builder.flush()

        assert output.records == records(1)
        assert output.checkpoints == 1
        assert builder.buffered_count == 0

    def test_flush_with_empty_buffer_still_checkpoints(self, schema, output):
        builder = PageBuilder(schema, output, page_size=10)
        builder.flush()
        assert output.pages_received == 0
        assert output.checkpoints == 1

    def test_finish(self, schema, output):
        builder = PageBuilder(schema, output, page_size=2)
        for record in records(1, 2, 3):
            builder.add_record(record)
        builder.finish()

        assert output.finished
        assert output.records == records(1, 2, 3)
        assert builder.records_added == 3
        assert builder.pages_added == 2

    def test_invalid_page_size(self, schema, output):
        with pytest.raises(ValueError):
            PageBuilder(schema, output, page_size=0)


class TestAbortAndClose:

    def test_abort_drops_buffer_and_uncheckpointed_pages(self, schema, output):
        builder = PageBuilder(schema, output, page_size=2)
        builder.add_record({"v": 1})
        builder.flush()
        for record in records(2, 3, 4):
            builder.add_record(record)
        builder.abort()

        assert output.aborted
        assert output.records == records(1)
        assert output.pending == []
        assert builder.buffered_count == 0

    def test_close_never_delivers_buffer(self, schema, output):
        builder = PageBuilder(schema, output, page_size=10)
        builder.add_record({"v": 1})
        builder.close()

        assert output.closed
        assert output.pages_received == 0

    def test_close_is_idempotent(self, schema):
        class CountingOutput(ListPageOutput):
            close_calls = 0

            def close(self):
                self.close_calls += 1

        output = CountingOutput()
        builder = PageBuilder(schema, output)
        builder.close()
        builder.close()
        assert output.close_calls == 1
