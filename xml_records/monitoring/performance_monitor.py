"""
Performance monitoring for extraction runs.

This module tracks per-file record counts, throughput and process memory so
a run can report how fast it went and how much memory it needed.
"""

import time
import logging

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import psutil


@dataclass
class PerformanceMetrics:
    """Container for performance metrics."""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    files_processed: int = 0
    records_emitted: int = 0
    elapsed_seconds: float = 0.0
    records_per_second: float = 0.0
    peak_memory_mb: float = 0.0
    records_per_file: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files_processed': self.files_processed,
            'records_emitted': self.records_emitted,
            'elapsed_seconds': self.elapsed_seconds,
            'records_per_second': self.records_per_second,
            'peak_memory_mb': self.peak_memory_mb,
        }


class PerformanceMonitor:
    """
    Collects run metrics for the document driver.

    Memory is sampled with psutil whenever a file completes and when
    sample_resources() is called, rather than from a background thread, since
    processing is strictly sequential.
    """

    def __init__(self):
        """Initialize the performance monitor."""
        self.logger = logging.getLogger(__name__)
        self._metrics = PerformanceMetrics()
        self._is_monitoring = False
        self._started_at = 0.0
        self._process = psutil.Process()

    @property
    def is_monitoring(self) -> bool:
        return self._is_monitoring

    def start_monitoring(self) -> None:
        """Start a fresh measurement."""
        if self._is_monitoring:
            self.logger.warning("Performance monitoring already started")
            return

        self._metrics = PerformanceMetrics(start_time=datetime.now())
        self._started_at = time.perf_counter()
        self._is_monitoring = True
        self.sample_resources()
        self.logger.debug("Performance monitoring started")

    def record_file(self, name: str, records: int) -> None:
        """Record one completed input file."""
        if not self._is_monitoring:
            return
        self._metrics.files_processed += 1
        self._metrics.records_emitted += records
        self._metrics.records_per_file[name] = records
        self.sample_resources()

    def sample_resources(self) -> float:
        """
        Sample current process memory and update the peak.

        Returns:
            Current resident set size in MB (0.0 if it cannot be read)
        """
        try:
            memory_mb = self._process.memory_info().rss / 1024 / 1024
        except psutil.Error as e:
            self.logger.warning(f"Error sampling process memory: {e}")
            return 0.0

        if memory_mb > self._metrics.peak_memory_mb:
            self._metrics.peak_memory_mb = memory_mb
        return memory_mb

    def get_current_metrics(self) -> Dict[str, Any]:
        """Get a snapshot of the running measurement."""
        if not self._is_monitoring:
            return {}
        elapsed = time.perf_counter() - self._started_at
        snapshot = self._metrics.to_dict()
        snapshot['elapsed_seconds'] = elapsed
        snapshot['records_per_second'] = self._metrics.records_emitted / elapsed if elapsed > 0 else 0.0
        return snapshot

    def stop_monitoring(self) -> PerformanceMetrics:
        """Stop monitoring and return the final metrics."""
        if not self._is_monitoring:
            self.logger.warning("Performance monitoring not started")
            return self._metrics

        self.sample_resources()
        self._is_monitoring = False
        self._metrics.end_time = datetime.now()
        self._metrics.elapsed_seconds = time.perf_counter() - self._started_at
        if self._metrics.elapsed_seconds > 0:
            self._metrics.records_per_second = self._metrics.records_emitted / self._metrics.elapsed_seconds

        self.logger.info(f"Performance monitoring stopped. {self._metrics.records_emitted} records from "
                         f"{self._metrics.files_processed} files in {self._metrics.elapsed_seconds:.2f} seconds "
                         f"({self._metrics.records_per_second:.1f} records/sec, "
                         f"peak memory {self._metrics.peak_memory_mb:.1f} MB)")
        return self._metrics
