"""
Observability module for the color extraction pipeline.

Provides performance monitoring, per-run tracking, and metrics collection.
"""

from .metrics import (
    PerformanceMetrics,
    ExtractionMetrics,
    MetricsCollector,
    ExtractionTracker,
    get_metrics_collector,
    performance_monitor,
    performance_tracked,
    log_memory_usage,
)

__all__ = [
    'PerformanceMetrics',
    'ExtractionMetrics',
    'MetricsCollector',
    'ExtractionTracker',
    'get_metrics_collector',
    'performance_monitor',
    'performance_tracked',
    'log_memory_usage',
]
