"""Tests for calibench.bench.calibration — warm-up calibration."""

from __future__ import annotations

import itertools
import time
import unittest
from unittest.mock import patch

from calibench.bench.calibration import CalibrationResult, calibrate


class TestCalibrate(unittest.TestCase):
    """Tests for calibrate()."""

    def test_zero_budget_runs_one_batch(self) -> None:
        calls = []
        result = calibrate(lambda: calls.append(1), 0)
        self.assertEqual(result.iterations, 1)
        self.assertEqual(len(calls), 1)
        self.assertGreaterEqual(result.elapsed, 0)

    def test_batches_double_until_budget(self) -> None:
        """Each batch takes 100ns on the fake clock: 100, 200, 300 >= 250."""
        clock = itertools.count(0, 100)
        calls = []
        with patch("calibench.bench.calibration.time.perf_counter_ns", lambda: next(clock)):
            result = calibrate(lambda: calls.append(1), 250)
        self.assertEqual(result.iterations, 1 + 2 + 4)
        self.assertEqual(len(calls), 7)
        self.assertEqual(result.elapsed, 300)

    def test_real_work_reaches_budget(self) -> None:
        budget = 10_000_000
        result = calibrate(lambda: time.sleep(0.001), budget)
        self.assertGreaterEqual(result.elapsed, budget)
        # Totals are always 2**k - 1.
        self.assertEqual((result.iterations + 1) & result.iterations, 0)
        self.assertGreaterEqual(result.iterations, 3)


class TestCalibrationResult(unittest.TestCase):
    """Tests for CalibrationResult.mean_cost_ns."""

    def test_mean_cost(self) -> None:
        self.assertAlmostEqual(CalibrationResult(iterations=4, elapsed=1000).mean_cost_ns, 250.0)

    def test_mean_cost_clamped(self) -> None:
        self.assertEqual(CalibrationResult(iterations=1000, elapsed=0).mean_cost_ns, 1.0)
        self.assertEqual(CalibrationResult(iterations=1000, elapsed=10).mean_cost_ns, 1.0)


if __name__ == "__main__":
    unittest.main()
