"""
Input file discovery and opening.

FileInput turns command-line style paths into an ordered list of XML files
and opens each one as a binary stream, decompressing gzip and bzip2 files
on the fly.
"""

import bz2
import gzip
import logging

from pathlib import Path
from typing import BinaryIO, ContextManager, Iterable, Iterator, List, Tuple, Union

from ..exceptions import ConfigurationError, XMLExtractionError
from ..interfaces import FileInputInterface


class FileInput(FileInputInterface):
    """
    Ordered sequence of XML input files.

    Files are processed in the order given. Directories are expanded to the
    XML files they directly contain, sorted by name.
    """

    XML_SUFFIXES = ('.xml', '.xml.gz', '.xml.bz2')

    def __init__(self, paths: Iterable[Union[str, Path]]):
        self.logger = logging.getLogger(__name__)
        self.paths: List[Path] = [Path(p) for p in paths]

    @classmethod
    def from_paths(cls, paths: Iterable[Union[str, Path]]) -> 'FileInput':
        """
        Build a FileInput from files and directories.

        Args:
            paths: Files and/or directories, in processing order

        Returns:
            FileInput over the expanded file list

        Raises:
            ConfigurationError: If a path does not exist or nothing is left to read
        """
        expanded: List[Path] = []
        for raw_path in paths:
            path = Path(raw_path)
            if path.is_dir():
                matches = sorted(
                    child for child in path.iterdir()
                    if child.is_file() and cls.is_xml_file(child)
                )
                if not matches:
                    logging.getLogger(__name__).warning(f"No XML files found in directory {path}")
                expanded.extend(matches)
            elif path.is_file():
                expanded.append(path)
            else:
                raise ConfigurationError(f"Input path not found: {path}")

        if not expanded:
            raise ConfigurationError("No input files to process")
        return cls(expanded)

    @classmethod
    def is_xml_file(cls, path: Path) -> bool:
        name = path.name.lower()
        return any(name.endswith(suffix) for suffix in cls.XML_SUFFIXES)

    @staticmethod
    def open_path(path: Path) -> ContextManager[BinaryIO]:
        """Open one file for binary reading, decompressing by extension."""
        suffix = path.suffix.lower()
        if suffix == '.gz':
            return gzip.open(path, 'rb')
        if suffix == '.bz2':
            return bz2.open(path, 'rb')
        return open(path, 'rb')

    def open(self) -> Iterator[Tuple[str, ContextManager[BinaryIO]]]:
        for path in self.paths:
            self.logger.debug(f"Opening input file {path}")
            try:
                source = self.open_path(path)
            except OSError as e:
                raise XMLExtractionError(f"Failed to open {path}: {e}", source_name=str(path),
                                         error_category="input_error") from e
            yield str(path), source

    def __len__(self) -> int:
        return len(self.paths)
