"""
Processing module for the XML record extraction system.

This module provides input file handling and the sequential document driver.
"""

from .file_input import FileInput
from .sequential_processor import SequentialProcessor

__all__ = [
    'FileInput',
    'SequentialProcessor'
]
