"""Warm-up calibration.

Runs the work in back-to-back batches of 1, 2, 4, 8, ... invocations
until the accumulated elapsed time reaches the warm-up budget.  The
resulting totals give an estimate of the mean cost of one invocation,
which the scheduler uses to size the measured samples.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

log = logging.getLogger("calibench")

_U64_MASK = (1 << 64) - 1

# Lower bound on the per-invocation estimate, in nanoseconds.  Work that
# costs less than the timer resolution would otherwise estimate as zero.
MIN_MEAN_COST_NS = 1.0


@dataclass
class CalibrationResult:
    """Totals accumulated during warm-up."""

    iterations: int
    elapsed: int  # nanoseconds

    @property
    def mean_cost_ns(self) -> float:
        """Estimated nanoseconds per invocation, clamped to 1ns."""
        return max(self.elapsed / self.iterations, MIN_MEAN_COST_NS)


def calibrate(work: Callable[[], Any], warm_up_budget_ns: int) -> CalibrationResult:
    """Warm up *work* for at least *warm_up_budget_ns* nanoseconds.

    At least one batch always runs, so a zero budget still yields one
    iteration.  The batch size doubles as an unsigned 64-bit value and
    wraps on overflow.
    """
    elapsed = 0
    iterations = 0
    batch = 1
    while True:
        start = time.perf_counter_ns()
        for _ in range(batch):
            work()
        elapsed += time.perf_counter_ns() - start
        iterations += batch
        batch = (batch * 2) & _U64_MASK
        if elapsed >= warm_up_budget_ns:
            log.debug("Warm-up ran %d iterations in %dns", iterations, elapsed)
            return CalibrationResult(iterations=iterations, elapsed=elapsed)
