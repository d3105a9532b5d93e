"""
Tests for metrics collection and extraction tracking.
"""

import numpy as np
import pytest

from palette_engine.config import config
from palette_engine.services.colors.extraction import extract_colors
from palette_engine.services.observability import (
    ExtractionTracker,
    MetricsCollector,
    PerformanceMetrics,
    get_metrics_collector,
    log_memory_usage,
    performance_monitor,
    performance_tracked,
)


def make_metrics(name, duration, error=None):
    return PerformanceMetrics(
        operation_name=name,
        duration_ms=duration,
        memory_usage_mb=100.0,
        cpu_percent=10.0,
        sample_count=0,
        cluster_count=0,
        timestamp=0.0,
        error=error,
    )


class TestMetricsCollector:
    """Test aggregation"""

    def test_operation_stats(self):
        collector = MetricsCollector()
        collector.record_performance(make_metrics("clustering", 10.0))
        collector.record_performance(make_metrics("clustering", 30.0, error="boom"))

        stats = collector.get_operation_stats("clustering")
        assert stats["total_calls"] == 2
        assert stats["error_count"] == 1
        assert stats["error_rate"] == 0.5
        assert stats["duration_stats"]["mean_ms"] == 20.0
        assert stats["duration_stats"]["max_ms"] == 30.0

    def test_unknown_operation(self):
        assert MetricsCollector().get_operation_stats("missing") == {}

    def test_all_stats_and_reset(self):
        collector = MetricsCollector()
        collector.record_performance(make_metrics("a", 1.0))
        collector.record_performance(make_metrics("b", 2.0, error="x"))

        summary = collector.get_all_stats()
        assert summary["total_operations"] == 2
        assert summary["total_errors"] == 1
        assert set(summary["operations"]) == {"a", "b"}
        assert collector.get_recent_metrics(1)[0]["operation_name"] == "b"

        collector.reset()
        assert collector.get_all_stats()["total_operations"] == 0


class TestPerformanceMonitor:
    """Test the monitoring context manager and decorator"""

    def test_records_success(self):
        with performance_monitor("unit_op", sample_count=5, cluster_count=2):
            pass

        recent = get_metrics_collector().get_recent_metrics(1)[0]
        assert recent["operation_name"] == "unit_op"
        assert recent["sample_count"] == 5
        assert recent["error"] is None

    def test_records_error_and_reraises(self):
        with pytest.raises(RuntimeError):
            with performance_monitor("failing_op"):
                raise RuntimeError("boom")

        stats = get_metrics_collector().get_operation_stats("failing_op")
        assert stats["error_count"] == 1

    def test_disabled(self, monkeypatch):
        monkeypatch.setattr(config, "METRICS_ENABLED", False)
        with performance_monitor("quiet_op"):
            pass
        assert get_metrics_collector().get_operation_stats("quiet_op") == {}

    def test_decorator_counts_samples(self):
        @performance_tracked("decorated_op")
        def work(samples, k):
            return samples.shape[0] * k

        assert work(np.zeros((7, 3)), k=2) == 14
        recent = get_metrics_collector().get_recent_metrics(1)[0]
        assert recent["sample_count"] == 7
        assert recent["cluster_count"] == 2

    def test_extraction_records_stages(self, solid_red_image):
        extract_colors(solid_red_image, 2)
        operations = get_metrics_collector().get_all_stats()["operations"]
        for name in ("preprocessing", "pixel_sampling", "kmeans_clustering", "result_assembly"):
            assert name in operations


class TestExtractionTracker:
    """Test per-run tracking"""

    def test_finish_summarizes_stages(self):
        tracker = ExtractionTracker(image_size=(10, 10), color_count=3)
        tracker.log_stage("preprocessing", 1.0, output_size=(5, 5))
        tracker.log_stage("sampling", 2.0, sample_count=25)
        tracker.log_stage("clustering", 3.0, iterations=4, converged=True)
        tracker.log_warning("few samples")

        metrics = tracker.finish(palette_size=2)
        assert metrics.extraction_id == tracker.extraction_id
        assert metrics.processed_image_size == (5, 5)
        assert metrics.sample_count == 25
        assert metrics.iterations == 4
        assert metrics.converged
        assert metrics.final_palette_size == 2
        assert metrics.warnings == ["few samples"]

    def test_trackers_are_independent(self):
        first = ExtractionTracker(image_size=(1, 1), color_count=1)
        second = ExtractionTracker(image_size=(1, 1), color_count=1)
        first.log_warning("only first")

        assert first.extraction_id != second.extraction_id
        assert second.finish(palette_size=1).warnings == []


def test_log_memory_usage():
    snapshot = log_memory_usage("unit")
    assert snapshot["stage"] == "unit"
    assert snapshot["memory_mb"] > 0
