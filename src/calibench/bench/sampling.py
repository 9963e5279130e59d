"""Sampled measurement.

Executes the scheduled samples and records the elapsed nanoseconds of
each.  Two variants exist:

- :func:`run` times each sample as a single window around the whole
  batch of invocations.
- :func:`run_with_setup` calls ``setup`` before every invocation and
  times only the ``work`` call, summing the per-invocation intervals.
  Setup output is never buffered ahead of time.

Every value passed into or returned from the work goes through
:func:`black_box`.
"""

from __future__ import annotations

import time
from typing import Any, Callable, TypeVar

from calibench.bench.results import SamplingData

T = TypeVar("T")

# Module-level sink written by black_box.  Being reachable from outside
# the module, the stored values count as observable state.
_sink: list[Any] = [None]


def black_box(value: T) -> T:
    """Return *value* unchanged after publishing it to an external sink.

    CPython does not eliminate calls whose result is unused, but other
    runtimes may; storing the value where any code can read it keeps it
    live.
    """
    _sink[0] = value
    return value


def run(schedule: list[int], work: Callable[[], Any]) -> SamplingData:
    """Run *work* ``n`` times for each ``n`` in *schedule*."""
    times: list[int] = []
    for count in schedule:
        start = time.perf_counter_ns()
        for _ in range(count):
            black_box(work())
        times.append(time.perf_counter_ns() - start)
    return SamplingData(samples=list(schedule), times=times)


def run_with_setup(
    schedule: list[int],
    setup: Callable[[], Any],
    work: Callable[[Any], Any],
) -> SamplingData:
    """Like :func:`run`, but feed each invocation a fresh ``setup()`` value.

    Only the ``work`` call is timed.
    """
    times: list[int] = []
    for count in schedule:
        elapsed = 0
        for _ in range(count):
            value = black_box(setup())
            start = time.perf_counter_ns()
            black_box(work(value))
            elapsed += time.perf_counter_ns() - start
        times.append(elapsed)
    return SamplingData(samples=list(schedule), times=times)
