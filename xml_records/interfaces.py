"""
Abstract interfaces for the XML record extraction system.

This module defines the contracts that replaceable components must implement
so the extraction engine can be wired to different outputs and input sources.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, ContextManager, Iterator, Tuple

from .models import Page


class PageOutputInterface(ABC):
    """
    Abstract interface for paged record outputs.

    Lifecycle: any number of add() calls, with checkpoint() after each complete
    input file, then finish() once per run. abort() discards everything added
    since the last checkpoint. close() releases resources and is always called.
    """

    @abstractmethod
    def add(self, page: Page) -> None:
        """
        Accept a page of records.

        Args:
            page: Records in schema order, each a dict of column name to value
        """
        pass

    @abstractmethod
    def checkpoint(self) -> None:
        """Make every record added so far durable (called once per complete input file)."""
        pass

    @abstractmethod
    def finish(self) -> None:
        """Finalize the output after the last input file."""
        pass

    @abstractmethod
    def abort(self) -> None:
        """Discard records added since the last checkpoint."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release resources."""
        pass


class FileInputInterface(ABC):
    """Abstract interface for sources of logical input files."""

    @abstractmethod
    def open(self) -> Iterator[Tuple[str, ContextManager[BinaryIO]]]:
        """
        Iterate over input files in processing order.

        Returns:
            Iterator of (name, context manager) pairs; each context manager
            yields a binary stream over one whole file
        """
        pass
