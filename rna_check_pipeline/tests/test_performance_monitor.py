#!/usr/bin/env python3

"""
Unit tests for phase timing and memory monitoring.
"""

import unittest
import sys
import os

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from rna_check_pipeline.core.exceptions import MemoryError as PipelineMemoryError
from rna_check_pipeline.utils.performance_monitor import PerformanceMonitor


class TestPerformanceMonitor(unittest.TestCase):
    """Test PerformanceMonitor class."""

    def test_phases_accumulate(self):
        """Re-entering a phase adds to its totals instead of replacing them."""
        monitor = PerformanceMonitor()
        for _ in range(3):
            with monitor.phase_context("homology_search"):
                monitor.record_operations(20)
        metrics = monitor.phase_metrics["homology_search"]
        self.assertEqual(metrics.entries, 3)
        self.assertEqual(metrics.operations_count, 60)
        self.assertIsNone(metrics.started_at)
        self.assertIsNone(monitor.current_phase)
        self.assertGreater(metrics.peak_memory_mb, 0)

    def test_phase_ended_on_error(self):
        monitor = PerformanceMonitor(enabled=False)
        with self.assertRaises(ValueError):
            with monitor.phase_context("report"):
                raise ValueError("boom")
        self.assertIsNone(monitor.current_phase)

    def test_starting_phase_ends_previous(self):
        monitor = PerformanceMonitor(enabled=False)
        monitor.start_phase("annotation_scan")
        monitor.start_phase("homology_search")
        self.assertIsNone(monitor.phase_metrics["annotation_scan"].started_at)
        self.assertEqual(monitor.end_phase().phase_name, "homology_search")
        self.assertIsNone(monitor.end_phase())

    def test_disabled_monitor_reports_no_memory(self):
        monitor = PerformanceMonitor(enabled=False)
        self.assertEqual(monitor.get_memory_usage(), 0.0)
        self.assertTrue(monitor.check_memory_limit())

    def test_memory_limit(self):
        monitor = PerformanceMonitor(memory_limit_mb=1)
        with self.assertLogs(level="WARNING"):
            with self.assertRaises(PipelineMemoryError) as ctx:
                monitor.check_memory_limit()
        self.assertEqual(ctx.exception.limit, 1)

    def test_summary(self):
        monitor = PerformanceMonitor(enabled=False)
        with monitor.phase_context("annotation_scan"):
            monitor.record_operations(5)
        summary = monitor.get_performance_summary()
        self.assertEqual(summary["memory_limit_mb"], 4096)
        self.assertEqual(summary["phases"]["annotation_scan"]["operations_count"], 5)
        with self.assertLogs(level="INFO") as logs:
            monitor.log_performance_report()
        self.assertTrue(any("annotation_scan" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
