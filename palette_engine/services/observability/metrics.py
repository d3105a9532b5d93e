"""
Observability metrics for the color extraction pipeline.

Stage timings, process memory and CPU are sampled with psutil and kept in a
bounded, lock-protected collector. The pipeline only ever writes here:
nothing recorded in this module feeds back into an extraction result.
"""

import threading
import time
from collections import Counter, defaultdict, deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from functools import wraps
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

import numpy as np
import psutil
from loguru import logger

from palette_engine.config import config
from palette_engine.utils.ids import generate_extraction_id

# Samples kept per operation for percentile stats
_PER_OPERATION_WINDOW = 100


@dataclass
class PerformanceMetrics:
    """One timed pipeline operation."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    cpu_percent: float
    sample_count: int
    cluster_count: int
    timestamp: float
    error: Optional[str] = None


@dataclass
class ExtractionMetrics:
    """Summary of one extraction run, built by ExtractionTracker.finish()."""
    extraction_id: str
    total_duration_ms: float
    preprocessing_duration_ms: float
    sampling_duration_ms: float
    clustering_duration_ms: float
    assembly_duration_ms: float

    input_image_size: Tuple[int, int]
    processed_image_size: Tuple[int, int]
    sample_count: int

    cluster_count: int
    iterations: int
    converged: bool
    final_palette_size: int

    warnings: List[str] = field(default_factory=list)


def _summarize(values: Sequence[float], unit: str) -> Dict[str, float]:
    array = np.asarray(values, dtype=np.float64)
    return {
        f"mean_{unit}": float(array.mean()),
        f"median_{unit}": float(np.median(array)),
        f"p95_{unit}": float(np.percentile(array, 95)),
        f"p99_{unit}": float(np.percentile(array, 99)),
        f"min_{unit}": float(array.min()),
        f"max_{unit}": float(array.max()),
    }


class MetricsCollector:
    """Thread-safe store of recent PerformanceMetrics, grouped by operation."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._history: Deque[PerformanceMetrics] = deque(maxlen=max_history)
        self._by_operation: Dict[str, Deque[PerformanceMetrics]] = defaultdict(
            lambda: deque(maxlen=_PER_OPERATION_WINDOW)
        )
        self._calls: Counter = Counter()
        self._errors: Counter = Counter()

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        with self._lock:
            self._history.append(metrics)
            self._by_operation[metrics.operation_name].append(metrics)
            self._calls[metrics.operation_name] += 1
            if metrics.error:
                self._errors[metrics.operation_name] += 1

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """
        Aggregate the recent window of one operation.

        Returns:
            Call and error counts plus duration, memory and CPU summaries,
            or an empty dict if the operation was never recorded
        """
        with self._lock:
            return self._stats_locked(operation_name)

    def _stats_locked(self, operation_name: str) -> Dict[str, Any]:
        window = list(self._by_operation.get(operation_name, ()))
        if not window:
            return {}

        calls = self._calls[operation_name]
        errors = self._errors[operation_name]
        memory = [m.memory_usage_mb for m in window]
        cpu = [m.cpu_percent for m in window]

        return {
            "operation_name": operation_name,
            "total_calls": calls,
            "error_count": errors,
            "error_rate": errors / max(1, calls),
            "duration_stats": _summarize([m.duration_ms for m in window], "ms"),
            "memory_stats": {"mean_mb": float(np.mean(memory)), "peak_mb": float(np.max(memory))},
            "cpu_stats": {"mean_percent": float(np.mean(cpu)), "peak_percent": float(np.max(cpu))},
        }

    def get_all_stats(self) -> Dict[str, Any]:
        with self._lock:
            total_calls = sum(self._calls.values())
            total_errors = sum(self._errors.values())
            return {
                "operations": {name: self._stats_locked(name) for name in self._calls},
                "total_operations": total_calls,
                "total_errors": total_errors,
                "overall_error_rate": total_errors / max(1, total_calls),
            }

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent records, oldest first, as plain dicts."""
        with self._lock:
            return [asdict(m) for m in list(self._history)[-limit:]]

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._by_operation.clear()
            self._calls.clear()
            self._errors.clear()


_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector shared by every extraction."""
    return _metrics_collector


def _process_snapshot() -> Tuple[float, float]:
    """(RSS in MB, system CPU percent since the previous call)."""
    rss_mb = psutil.Process().memory_info().rss / (1024 * 1024)
    return rss_mb, psutil.cpu_percent()


@contextmanager
def performance_monitor(operation_name: str, sample_count: int = 0, cluster_count: int = 0):
    """
    Time the enclosed block and record a PerformanceMetrics entry.

    Exceptions are recorded on the entry and re-raised. When
    config.METRICS_ENABLED is off the block runs unobserved.
    """
    if not config.METRICS_ENABLED:
        yield
        return

    start = time.perf_counter()
    start_memory, start_cpu = _process_snapshot()
    error: Optional[str] = None

    try:
        yield
    except Exception as e:
        error = f"{type(e).__name__}: {e}"
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        end_memory, end_cpu = _process_snapshot()
        entry = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=duration_ms,
            memory_usage_mb=max(start_memory, end_memory),
            cpu_percent=max(start_cpu, end_cpu),
            sample_count=sample_count,
            cluster_count=cluster_count,
            timestamp=time.time(),
            error=error,
        )
        _metrics_collector.record_performance(entry)

        if error:
            logger.error(f"{operation_name} failed after {duration_ms:.1f}ms: {error}")
        else:
            logger.debug(f"{operation_name} took {duration_ms:.1f}ms "
                         f"(rss {entry.memory_usage_mb:.1f}MB, cpu {entry.cpu_percent:.1f}%)")


def performance_tracked(operation_name: str):
    """
    Decorator form of performance_monitor.

    The first 2-D array positional argument is reported as the sample
    matrix; the cluster count is read from a `k` or `color_count` keyword.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            samples = next((a for a in args if getattr(a, "ndim", None) == 2), None)
            sample_count = int(samples.shape[0]) if samples is not None else 0
            cluster_count = kwargs.get("k", kwargs.get("color_count", 0))

            with performance_monitor(operation_name, sample_count, cluster_count):
                return func(*args, **kwargs)
        return wrapper
    return decorator


class ExtractionTracker:
    """
    Stage-by-stage record of a single extraction call.

    Each call creates its own tracker, so concurrent extractions never share
    tracking state.
    """

    def __init__(self, image_size: Tuple[int, int], color_count: int):
        self.extraction_id = generate_extraction_id()
        self.image_size = image_size
        self.color_count = color_count
        self.warnings: List[str] = []
        self.stages: Dict[str, Dict[str, Any]] = {}
        self._start = time.perf_counter()

        logger.info(f"Extraction {self.extraction_id} started "
                    f"(image {image_size[0]}x{image_size[1]}, colors {color_count})")

    def log_stage(self, stage_name: str, duration_ms: float, **details):
        self.stages[stage_name] = {"duration_ms": duration_ms, **details}
        logger.debug(f"Extraction {self.extraction_id}: {stage_name} in {duration_ms:.1f}ms")

    def log_warning(self, message: str):
        self.warnings.append(message)
        logger.warning(f"Extraction {self.extraction_id}: {message}")

    def _stage(self, name: str, key: str, default: Any) -> Any:
        return self.stages.get(name, {}).get(key, default)

    def finish(self, palette_size: int) -> ExtractionMetrics:
        """Close the run and return its ExtractionMetrics."""
        total_ms = (time.perf_counter() - self._start) * 1000

        metrics = ExtractionMetrics(
            extraction_id=self.extraction_id,
            total_duration_ms=total_ms,
            preprocessing_duration_ms=self._stage("preprocessing", "duration_ms", 0.0),
            sampling_duration_ms=self._stage("sampling", "duration_ms", 0.0),
            clustering_duration_ms=self._stage("clustering", "duration_ms", 0.0),
            assembly_duration_ms=self._stage("assembly", "duration_ms", 0.0),
            input_image_size=self.image_size,
            processed_image_size=self._stage("preprocessing", "output_size", self.image_size),
            sample_count=self._stage("sampling", "sample_count", 0),
            cluster_count=self.color_count,
            iterations=self._stage("clustering", "iterations", 0),
            converged=self._stage("clustering", "converged", False),
            final_palette_size=palette_size,
            warnings=list(self.warnings),
        )

        logger.info(f"Extraction {self.extraction_id} finished in {total_ms:.1f}ms "
                    f"with {palette_size} colors and {len(self.warnings)} warnings")
        return metrics


def log_memory_usage(stage_name: str) -> Dict[str, Any]:
    """Log and return the process RSS and CPU usage at a pipeline stage."""
    process = psutil.Process()
    snapshot = {
        "stage": stage_name,
        "memory_mb": process.memory_info().rss / (1024 * 1024),
        "cpu_percent": process.cpu_percent(),
        "timestamp": time.time(),
    }
    logger.debug(f"Memory at {stage_name}: {snapshot['memory_mb']:.1f}MB "
                 f"(cpu {snapshot['cpu_percent']:.1f}%)")
    return snapshot
