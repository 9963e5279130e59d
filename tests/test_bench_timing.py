"""Tests for calibench.bench.timing — plain timing helpers."""

from __future__ import annotations

import contextlib
import io
import math
import unittest
from unittest.mock import MagicMock, patch

from bench_test_helpers import ResultsDirTestCase

from calibench.bench import storage
from calibench.bench.display import ComparingPrinter, SimplePrinter
from calibench.bench.labels import ANONYMOUS_LABEL
from calibench.bench.results import TimingData
from calibench.bench.timing import (
    TimedIterator,
    run_timed,
    run_timed_from_iterator,
    run_timed_times,
    timed,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0

    def read(self) -> int:
        return self.now

    def advance(self, nanos: int) -> None:
        self.now += nanos


class TestRunTimed(unittest.TestCase):
    """Tests for run_timed() and run_timed_times()."""

    def test_single_call(self) -> None:
        clock = FakeClock()
        with patch("calibench.bench.timing.time.perf_counter_ns", clock.read):
            self.assertEqual(run_timed(lambda: clock.advance(42)), 42)

    def test_repeated_calls(self) -> None:
        clock = FakeClock()
        costs = iter([5, 1, 9])
        with patch("calibench.bench.timing.time.perf_counter_ns", clock.read):
            data = run_timed_times(3, lambda: clock.advance(next(costs)))
        self.assertEqual(
            data, TimingData(min_nanos=1, max_nanos=9, elapsed=15, iterations=3)
        )

    def test_zero_iterations(self) -> None:
        data = run_timed_times(0, lambda: None)
        self.assertEqual(data.iterations, 0)
        self.assertEqual(data.min_nanos, 0)
        self.assertTrue(math.isnan(data.mean))


class TestRunTimedFromIterator(unittest.TestCase):
    """Tests for run_timed_from_iterator()."""

    def test_times_each_item(self) -> None:
        clock = FakeClock()
        with patch("calibench.bench.timing.time.perf_counter_ns", clock.read):
            data = run_timed_from_iterator([3, 7, 2], clock.advance)
        self.assertEqual(
            data, TimingData(min_nanos=2, max_nanos=7, elapsed=12, iterations=3)
        )


class TestTimedIterator(unittest.TestCase):
    """Tests for TimedIterator."""

    def test_yields_items_and_reports_once(self) -> None:
        printer = MagicMock()
        wrapped = TimedIterator(["a", "b", "c"], "loop", printer)
        self.assertEqual(list(wrapped), ["a", "b", "c"])
        printer.report_timing.assert_called_once()
        label, data = printer.report_timing.call_args[0]
        self.assertEqual(label, "loop")
        self.assertEqual(data.iterations, 3)
        with self.assertRaises(StopIteration):
            next(wrapped)
        printer.report_timing.assert_called_once()

    def test_times_inner_next(self) -> None:
        clock = FakeClock()

        def slow():
            for cost in (10, 30):
                clock.advance(cost)
                yield cost

        printer = MagicMock()
        with patch("calibench.bench.timing.time.perf_counter_ns", clock.read):
            wrapped = TimedIterator(slow(), "gen", printer)
            for _ in wrapped:
                pass
        self.assertEqual(
            wrapped.timing, TimingData(min_nanos=10, max_nanos=30, elapsed=40, iterations=2)
        )

    def test_partial_iteration_does_not_report(self) -> None:
        printer = MagicMock()
        wrapped = TimedIterator(range(5), "loop", printer)
        next(wrapped)
        printer.report_timing.assert_not_called()
        self.assertEqual(wrapped.timing.iterations, 1)


class TestTimed(unittest.TestCase):
    """Tests for timed()."""

    def test_simple_printer_by_default(self) -> None:
        wrapped = timed(range(3), label="loop")
        self.assertIsInstance(wrapped._printer, SimplePrinter)
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.assertEqual(list(wrapped), [0, 1, 2])
        self.assertIn("loop [3.0 iterations", out.getvalue())

    def test_invalid_label(self) -> None:
        with self.assertLogs("calibench", level="WARNING"):
            wrapped = timed([], label="")
        self.assertEqual(wrapped._label, ANONYMOUS_LABEL)


class TestPersistedTimed(ResultsDirTestCase):
    """Tests for timed(persisted=True)."""

    def test_persists_and_rotates(self) -> None:
        with contextlib.redirect_stdout(io.StringIO()):
            wrapped = timed(range(4), label="loop", persisted=True)
            self.assertIsInstance(wrapped._printer, ComparingPrinter)
            list(wrapped)
            list(timed(range(6), label="loop", persisted=True))
        self.assertEqual(storage.read_timing_data("loop").iterations, 6)
        self.assertEqual(storage.read_timing_data("loop", storage.OLD_RESULTS).iterations, 4)


class TestPrettyPrint(unittest.TestCase):
    """Tests for TimingData.pretty_print()."""

    def test_prints_anonymous(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            TimingData(min_nanos=1, max_nanos=3, elapsed=20, iterations=10).pretty_print()
        self.assertIn("anonymous [10.0 iterations in 20.00ns]:", out.getvalue())


if __name__ == "__main__":
    unittest.main()
