"""
Unit tests for MetricsCollector.

Tests metrics collection functionality including:
- Thread-safety under concurrent access
- Bounded storage with LRU eviction
- The timed_operation decorator
"""

import asyncio
import threading

import pytest

from gallery_db.observability.metrics import (MetricsCollector,
                                              get_metrics_collector,
                                              record_operation,
                                              timed_operation)


class TestMetricsCollectorThreadSafety:
    """Test thread-safety of metrics collection."""

    def test_concurrent_record_operation(self):
        """Concurrent record_operation calls lose no executions."""
        collector = MetricsCollector()
        num_threads = 8
        per_thread = 50
        barrier = threading.Barrier(num_threads)

        def worker(thread_id: int):
            barrier.wait()
            for i in range(per_thread):
                collector.record_operation("images.save", duration_ms=1.0 + i, worker=thread_id)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(num_threads)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert collector.get_operation_count("images.save") == num_threads * per_thread
        assert len(collector.get_metrics()["metrics"]) == num_threads


class TestMetricsCollectorBounds:
    """Test bounded storage."""

    def test_evicts_least_recently_used(self):
        collector = MetricsCollector(max_metrics=2)
        collector.record_operation("a", 1.0)
        collector.record_operation("b", 1.0)
        collector.record_operation("a", 1.0)
        collector.record_operation("c", 1.0)

        keys = set(collector.get_metrics()["metrics"])
        assert keys == {"a", "c"}

    def test_prefix_filter(self):
        collector = MetricsCollector()
        collector.record_operation("images.save", 1.0)
        collector.record_operation("users.save", 1.0)

        assert set(collector.get_metrics("images")["metrics"]) == {"images.save"}


class TestOperationMetrics:
    """Test aggregation of a single series."""

    def test_aggregates(self):
        collector = MetricsCollector()
        collector.record_operation("users.get", 10.0)
        collector.record_operation("users.get", 30.0, success=False)

        summary = collector.get_metrics()["metrics"]["users.get"]
        assert summary["count"] == 2
        assert summary["avg_duration_ms"] == 20.0
        assert summary["min_duration_ms"] == 10.0
        assert summary["max_duration_ms"] == 30.0
        assert summary["error_rate_percent"] == 50.0

    def test_global_collector(self):
        record_operation("connection.connect", 5.0)
        assert get_metrics_collector().get_operation_count("connection.connect") == 1


class TestTimedOperation:
    """Test the timed_operation decorator."""

    @pytest.mark.asyncio
    async def test_records_success(self):
        @timed_operation("demo.ok")
        async def ok(value):
            return value * 2

        assert await ok(21) == 42
        collector = get_metrics_collector()
        assert collector.get_operation_count("demo.ok") == 1
        assert collector.get_error_count("demo.ok") == 0

    @pytest.mark.asyncio
    async def test_records_failure_and_reraises(self):
        @timed_operation("demo.fail")
        async def fail():
            raise LookupError("missing")

        with pytest.raises(LookupError):
            await fail()

        collector = get_metrics_collector()
        assert collector.get_operation_count("demo.fail") == 1
        assert collector.get_error_count("demo.fail") == 1

    @pytest.mark.asyncio
    async def test_records_cancellation_as_failure(self):
        @timed_operation("demo.slow")
        async def slow():
            await asyncio.sleep(10)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(slow(), timeout=0.01)

        collector = get_metrics_collector()
        assert collector.get_operation_count("demo.slow") == 1
        assert collector.get_error_count("demo.slow") == 1

    def test_preserves_metadata(self):
        @timed_operation("demo.named")
        async def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
