"""Tests for calibench.bench.compare — run-to-run comparison."""

from __future__ import annotations

import math
import unittest

from calibench.bench.compare import (
    Comparison,
    classify_change,
    compare_analyses,
    compare_timings,
    percent_change,
)
from calibench.bench.results import SamplingData, TimingData
from calibench.bench.stats import summarize


def _analysis(times: list[int], per_sample: int = 1):
    return summarize(SamplingData(samples=[per_sample] * len(times), times=times))


class TestPercentChange(unittest.TestCase):
    """Tests for percent_change()."""

    def test_increase_and_decrease(self) -> None:
        self.assertAlmostEqual(percent_change(110.0, 100.0), 10.0)
        self.assertAlmostEqual(percent_change(90.0, 100.0), -10.0)

    def test_zero_old(self) -> None:
        self.assertEqual(percent_change(0.0, 0.0), 0.0)
        self.assertEqual(percent_change(5.0, 0.0), float("inf"))


class TestClassifyChange(unittest.TestCase):
    """Tests for classify_change()."""

    def test_large_and_significant_increase_is_worse(self) -> None:
        self.assertIs(classify_change(5.0, 0.01), Comparison.WORSE)

    def test_large_and_significant_decrease_is_better(self) -> None:
        self.assertIs(classify_change(-5.0, 0.01), Comparison.BETTER)

    def test_small_change_is_same(self) -> None:
        self.assertIs(classify_change(0.5, 0.0), Comparison.SAME)
        self.assertIs(classify_change(-0.99, 0.0), Comparison.SAME)

    def test_insignificant_change_is_same(self) -> None:
        self.assertIs(classify_change(50.0, 0.06), Comparison.SAME)

    def test_boundaries(self) -> None:
        self.assertIs(classify_change(1.0, 0.05), Comparison.WORSE)
        self.assertIs(classify_change(-1.0, 0.05), Comparison.BETTER)

    def test_nan_is_same(self) -> None:
        self.assertIs(classify_change(50.0, float("nan")), Comparison.SAME)
        self.assertIs(classify_change(float("nan"), 0.0), Comparison.SAME)

    def test_custom_thresholds(self) -> None:
        self.assertIs(classify_change(3.0, 0.01, noise_threshold_pct=5.0), Comparison.SAME)
        self.assertIs(classify_change(3.0, 0.08, significance_level=0.1), Comparison.WORSE)


class TestCompareAnalyses(unittest.TestCase):
    """Tests for compare_analyses()."""

    def test_slower_run_is_worse(self) -> None:
        new = _analysis([200 + i for i in range(10)])
        old = _analysis([100 + i for i in range(10)])
        result = compare_analyses(new, old, num_resamples=1000, seed=1)
        self.assertIs(result.verdict, Comparison.WORSE)
        self.assertTrue(result.significant)
        self.assertGreater(result.mean_change_pct, 90.0)
        self.assertGreater(result.t, 0)
        self.assertLessEqual(result.p, 0.05)
        self.assertIs(result.old, old)

    def test_faster_run_is_better(self) -> None:
        new = _analysis([100 + i for i in range(10)])
        old = _analysis([200 + i for i in range(10)])
        result = compare_analyses(new, old, num_resamples=1000, seed=1)
        self.assertIs(result.verdict, Comparison.BETTER)
        self.assertLess(result.mean_change_pct, 0)

    def test_identical_runs_are_same(self) -> None:
        times = [100, 104, 98, 101, 99, 103, 97, 102]
        result = compare_analyses(
            _analysis(times), _analysis(times), num_resamples=1000, seed=1
        )
        self.assertIs(result.verdict, Comparison.SAME)
        self.assertEqual(result.mean_change_pct, 0.0)
        self.assertFalse(result.significant)

    def test_change_within_noise_is_same(self) -> None:
        new = _analysis([1005 + i for i in range(10)], per_sample=10)
        old = _analysis([1000 + i for i in range(10)], per_sample=10)
        result = compare_analyses(new, old, num_resamples=500, seed=1)
        self.assertLess(abs(result.mean_change_pct), 1.0)
        self.assertIs(result.verdict, Comparison.SAME)

    def test_single_samples(self) -> None:
        result = compare_analyses(_analysis([200]), _analysis([100]), num_resamples=1000)
        self.assertTrue(math.isnan(result.t))
        self.assertTrue(math.isnan(result.p))
        self.assertAlmostEqual(result.mean_change_pct, 100.0)
        self.assertIs(result.verdict, Comparison.SAME)

    def test_min_max_changes(self) -> None:
        new = _analysis([110, 220, 330])
        old = _analysis([100, 200, 300])
        result = compare_analyses(new, old, num_resamples=100, seed=1)
        self.assertAlmostEqual(result.min_change_pct, 10.0)
        self.assertAlmostEqual(result.max_change_pct, 10.0)


class TestCompareTimings(unittest.TestCase):
    """Tests for compare_timings()."""

    @staticmethod
    def _timing(elapsed: int) -> TimingData:
        return TimingData(min_nanos=elapsed // 20, max_nanos=elapsed // 5, elapsed=elapsed, iterations=10)

    def test_slower_is_worse(self) -> None:
        result = compare_timings(self._timing(1100), self._timing(1000))
        self.assertIs(result.verdict, Comparison.WORSE)
        self.assertAlmostEqual(result.mean_change_pct, 10.0)

    def test_faster_is_better(self) -> None:
        result = compare_timings(self._timing(900), self._timing(1000))
        self.assertIs(result.verdict, Comparison.BETTER)

    def test_small_change_is_same(self) -> None:
        result = compare_timings(self._timing(1020), self._timing(1000))
        self.assertIs(result.verdict, Comparison.SAME)


if __name__ == "__main__":
    unittest.main()
