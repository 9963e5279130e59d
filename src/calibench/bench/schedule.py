"""Iteration scheduling.

Sample ``i`` (1-based) runs ``i * d`` iterations, so a schedule of ``n``
samples costs ``d * n * (n + 1) / 2`` iterations in total.  Given the
calibrated mean cost, ``d`` is the smallest step that fills the target
measurement time.

When even ``d = 1`` overshoots the target, the work is too slow for the
requested sample count.  The sample count is then compressed one step at
a time until ``d`` grows past 1 or a single sample is left, so that the
run stays close to the time budget.
"""

from __future__ import annotations

import logging
import math

from calibench.formatting import fmt_time

log = logging.getLogger("calibench")


def _step(target_ns: int, mean_cost_ns: float, total_runs: int) -> int:
    return max(math.ceil(target_ns / mean_cost_ns / total_runs), 1)


def _triangular(n: int) -> int:
    return n * (n + 1) // 2


def calculate_iterations(
    mean_cost_ns: float,
    num_samples: int,
    target_time_ns: int,
) -> list[int]:
    """Compute per-sample iteration counts ``[d, 2d, ..., n*d]``.

    Args:
        mean_cost_ns: Calibrated cost of one invocation (already clamped).
        num_samples: Desired number of samples, at least 1.
        target_time_ns: Target duration of the whole measurement.

    Returns:
        The schedule, possibly with fewer than *num_samples* entries.
    """
    sample_size = num_samples
    total_runs = _triangular(sample_size)
    d = _step(target_time_ns, mean_cost_ns, total_runs)

    if d == 1:
        expected_ns = total_runs * mean_cost_ns
        log.warning(
            "Unable to complete %d samples in %s. You may wish to increase "
            "target time to %s.%s",
            sample_size,
            fmt_time(target_time_ns),
            fmt_time(expected_ns),
            " Will compress sample size" if sample_size > 1 else "",
        )
        while d == 1 and sample_size > 1:
            sample_size -= 1
            total_runs = _triangular(sample_size)
            d = _step(target_time_ns, mean_cost_ns, total_runs)
        if sample_size < num_samples:
            log.warning(
                "Compressed sample size to %d with an expected running time of %s",
                sample_size,
                fmt_time(total_runs * d * mean_cost_ns),
            )

    return [i * d for i in range(1, sample_size + 1)]


def fixed_iterations(max_iterations: int) -> list[int]:
    """Single-sample schedule used when ``max_iterations`` is configured."""
    return [max_iterations]
