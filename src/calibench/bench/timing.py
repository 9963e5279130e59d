"""Plain timing helpers.

Thin utilities for when a full benchmark is overkill: time one call,
time a fixed number of calls, or time each step of an iterator.  They
produce :class:`~calibench.bench.results.TimingData`, which can be
printed and persisted like a benchmark but carries no samples, so any
comparison with the previous run is on the mean alone.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

from calibench.bench.display import ComparingPrinter, Printer, SimplePrinter
from calibench.bench.labels import ANONYMOUS_LABEL, fallback_to_anonymous_on_invalid_label
from calibench.bench.results import TimingData

T = TypeVar("T")


def run_timed(work: Callable[[], Any]) -> int:
    """Run *work* once and return the elapsed nanoseconds."""
    start = time.perf_counter_ns()
    work()
    return time.perf_counter_ns() - start


class _Accumulator:
    """Running min/max/total over timed steps."""

    def __init__(self) -> None:
        self.iterations = 0
        self.elapsed = 0
        self.min_nanos: int | None = None
        self.max_nanos = 0

    def add(self, nanos: int) -> None:
        self.iterations += 1
        self.elapsed += nanos
        if self.min_nanos is None or nanos < self.min_nanos:
            self.min_nanos = nanos
        if nanos > self.max_nanos:
            self.max_nanos = nanos

    def result(self) -> TimingData:
        return TimingData(
            min_nanos=self.min_nanos if self.min_nanos is not None else 0,
            max_nanos=self.max_nanos,
            elapsed=self.elapsed,
            iterations=self.iterations,
        )


def run_timed_times(iterations: int, work: Callable[[], Any]) -> TimingData:
    """Run *work* *iterations* times, timing each call separately."""
    acc = _Accumulator()
    for _ in range(iterations):
        acc.add(run_timed(work))
    return acc.result()


def run_timed_from_iterator(iterable: Iterable[T], work: Callable[[T], Any]) -> TimingData:
    """Drain *iterable*, timing ``work(item)`` for each item."""
    acc = _Accumulator()
    for item in iterable:
        start = time.perf_counter_ns()
        work(item)
        acc.add(time.perf_counter_ns() - start)
    return acc.result()


class TimedIterator(Generic[T]):
    """Iterator wrapper that times each ``next()`` of the inner iterator.

    When the inner iterator is exhausted the collected timing is handed
    to the printer once.
    """

    def __init__(self, inner: Iterable[T], label: str, printer: Printer) -> None:
        self._inner: Iterator[T] = iter(inner)
        self._label = label
        self._printer = printer
        self._acc = _Accumulator()
        self._reported = False

    def __iter__(self) -> TimedIterator[T]:
        return self

    def __next__(self) -> T:
        start = time.perf_counter_ns()
        try:
            item = next(self._inner)
        except StopIteration:
            if not self._reported:
                self._reported = True
                self._printer.report_timing(self._label, self._acc.result())
            raise
        self._acc.add(time.perf_counter_ns() - start)
        return item

    @property
    def timing(self) -> TimingData:
        """Timing collected so far."""
        return self._acc.result()


def timed(
    iterable: Iterable[T],
    *,
    label: str = ANONYMOUS_LABEL,
    persisted: bool = False,
) -> TimedIterator[T]:
    """Wrap *iterable* so that draining it prints its timing.

    With *persisted*, the timing is compared with and then replaces the
    last timing stored under *label*.
    """
    label = fallback_to_anonymous_on_invalid_label(label)
    printer: Printer = ComparingPrinter() if persisted else SimplePrinter()
    return TimedIterator(iterable, label, printer)
