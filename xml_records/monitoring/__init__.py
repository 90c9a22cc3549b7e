"""
Monitoring module for the XML record extraction system.

This module provides throughput and memory metrics for extraction runs.
"""

from .performance_monitor import PerformanceMonitor, PerformanceMetrics

__all__ = [
    'PerformanceMonitor',
    'PerformanceMetrics'
]
