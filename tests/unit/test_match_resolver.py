"""
Unit tests for MatchResolver root-relative path resolution.
"""

import sys
import os
base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
if base_dir not in sys.path:
    sys.path.insert(0, base_dir)

import pytest

from xml_records.models import Column, ColumnType, Schema
from xml_records.parsing.match_resolver import MatchResolver


@pytest.fixture
def resolver():
    schema = Schema([
        Column("c/d", ColumnType.STRING),
        Column("id", ColumnType.LONG),
    ])
    return MatchResolver("a/b", schema)


class TestRelativePath:

    def test_strictly_below_root(self, resolver):
        assert resolver.relative_path("a/b/c/d") == "c/d"

    def test_root_itself_has_no_relative_path(self, resolver):
        assert resolver.relative_path("a/b") is None

    def test_unrelated_path(self, resolver):
        assert resolver.relative_path("x/y") is None

    def test_prefix_must_end_on_segment_boundary(self, resolver):
        assert resolver.relative_path("a/bc/d") is None

    def test_ancestor_of_root(self, resolver):
        assert resolver.relative_path("a") is None


class TestResolve:

    def test_resolves_configured_column(self, resolver):
        column = resolver.resolve("a/b/c/d")
        assert column is not None
        assert column.name == "c/d"

    def test_intermediate_container_does_not_match(self, resolver):
        assert resolver.resolve("a/b/c") is None

    def test_deeper_than_column_does_not_match(self, resolver):
        assert resolver.resolve("a/b/c/d/e") is None

    def test_match_is_case_sensitive(self, resolver):
        assert resolver.resolve("a/b/ID") is None
        assert resolver.resolve("a/b/id").type is ColumnType.LONG

    def test_is_root(self, resolver):
        assert resolver.is_root("a/b")
        assert not resolver.is_root("a/b/c")
        assert not resolver.is_root("a")

    def test_duplicate_column_names_first_wins(self):
        first = Column("x", ColumnType.STRING)
        second = Column("x", ColumnType.LONG)
        resolver = MatchResolver("r", Schema([first, second]))
        assert resolver.resolve("r/x") is first
