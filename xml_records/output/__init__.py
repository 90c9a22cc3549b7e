"""Paged record outputs."""

from .page_builder import PageBuilder
from .page_outputs import JsonLinesPageOutput, ListPageOutput

__all__ = ['PageBuilder', 'JsonLinesPageOutput', 'ListPageOutput']
