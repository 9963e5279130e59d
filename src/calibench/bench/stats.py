"""Statistical functions for benchmark samples.

Provides per-sample summary statistics, Welch's t statistic and a
resampling significance test, all in pure Python.

The significance test pools the two samples, resamples the pool with
replacement into two groups of the original sizes, and records the t
statistic of each resampled pair.  That gives an empirical distribution
of t under the hypothesis that both samples come from one population.
The p-value is read off that distribution by rank:

    hits = #{t_resampled < t_observed}
    p    = 2 * min(hits, total - hits) / total

This is a simplified rank approximation of a two-tailed permutation
p-value, not an analytic one.  It is cheap, needs no t-distribution
CDF, and is only used to decide whether a change is worth highlighting.

References:
    Welch's t-test: Welch, B. L. (1947). "The generalization of
        'Student's' problem when several different population
        variances are involved." Biometrika 34(1-2): 28-35.
    Bootstrap: Efron, B. & Tibshirani, R. J. (1993). "An
        Introduction to the Bootstrap."
"""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass, field
from typing import Sequence

from calibench.bench.results import SamplingData


# ---------------------------------------------------------------------------
# Basic reductions
# ---------------------------------------------------------------------------


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, NaN for an empty sequence."""
    if not values:
        return float("nan")
    return math.fsum(values) / len(values)


def sample_variance(values: Sequence[float], mean_value: float | None = None) -> float:
    """Sample variance with Bessel's correction (divides by ``n - 1``).

    Returns 0.0 for a single value and NaN for an empty sequence.
    """
    n = len(values)
    if n == 0:
        return float("nan")
    if n == 1:
        return 0.0
    m = mean(values) if mean_value is None else mean_value
    return math.fsum((v - m) ** 2 for v in values) / (n - 1)


def upper_median(values: Sequence[float]) -> float:
    """Middle element of the sorted values.

    Even-length input takes the upper of the two middle elements; there
    is no interpolation.
    """
    if not values:
        return float("nan")
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


# ---------------------------------------------------------------------------
# Sampling data summary
# ---------------------------------------------------------------------------


@dataclass
class SamplingDataSimpleAnalysis:
    """Summary of one run, computed over per-sample average costs.

    All values except ``elapsed`` are nanoseconds per iteration.
    ``variance`` is in nanoseconds squared.
    """

    elapsed: int  # total nanoseconds over all samples
    min: float
    max: float
    mean: float
    median: float
    variance: float
    stddev: float
    per_sample_average: list[float] = field(default_factory=list)


def _average(elapsed: int, count: int) -> float:
    if count == 0:
        return float("inf") if elapsed else float("nan")
    return elapsed / count


def summarize(data: SamplingData) -> SamplingDataSimpleAnalysis:
    """Reduce raw samples to summary statistics.

    Each sample contributes ``times[i] / samples[i]``, its average cost
    per iteration.  A sample of zero iterations averages to inf, or NaN
    when it also took no time.  Empty data yields NaN statistics.
    """
    averages = [_average(elapsed, count) for count, elapsed in zip(data.samples, data.times)]
    if not averages:
        nan = float("nan")
        return SamplingDataSimpleAnalysis(
            elapsed=0,
            min=nan,
            max=nan,
            mean=nan,
            median=nan,
            variance=nan,
            stddev=nan,
        )

    avg = mean(averages)
    variance = sample_variance(averages, avg)
    return SamplingDataSimpleAnalysis(
        elapsed=sum(data.times),
        min=min(averages),
        max=max(averages),
        mean=avg,
        median=upper_median(averages),
        variance=variance,
        stddev=math.sqrt(variance),
        per_sample_average=averages,
    )


# ---------------------------------------------------------------------------
# Welch's t statistic
# ---------------------------------------------------------------------------


def t_statistic(sample_a: Sequence[float], sample_b: Sequence[float]) -> float:
    """Welch's t statistic ``(mean_a - mean_b) / sqrt(var_a/n_a + var_b/n_b)``.

    Variances use the ``n - 1`` divisor.  NaN when either sample has
    fewer than 2 values.  With zero standard error the result is 0.0
    for equal means and an infinity signed like the difference otherwise.
    """
    na, nb = len(sample_a), len(sample_b)
    if na < 2 or nb < 2:
        return float("nan")

    mean_a = mean(sample_a)
    mean_b = mean(sample_b)
    var_a = sample_variance(sample_a, mean_a)
    var_b = sample_variance(sample_b, mean_b)

    diff = mean_a - mean_b
    se = math.sqrt(var_a / na + var_b / nb)
    if se == 0:
        if diff == 0:
            return 0.0
        return math.copysign(float("inf"), diff)
    return diff / se


# ---------------------------------------------------------------------------
# Resampling test
# ---------------------------------------------------------------------------


def bootstrap_resample(
    sample_a: Sequence[float],
    sample_b: Sequence[float],
    times: int,
    *,
    seed: int | None = None,
) -> list[float]:
    """Build the resampled null distribution of the t statistic.

    Args:
        sample_a: First sample.
        sample_b: Second sample.
        times: Number of resampled pairs to draw.
        seed: Seed for the generator.  Defaults to the wall clock in
            nanoseconds, so repeated calls differ.

    Returns:
        One t statistic per resampled pair, in draw order.
    """
    rng = random.Random(time.time_ns() if seed is None else seed)
    pooled = list(sample_a) + list(sample_b)
    split = len(sample_a)
    k = len(pooled)

    distribution: list[float] = []
    for _ in range(times):
        resampled = rng.choices(pooled, k=k)
        distribution.append(t_statistic(resampled[:split], resampled[split:]))
    return distribution


def p_value(observed_t: float, distribution: Sequence[float]) -> float:
    """Two-tailed rank p-value of *observed_t* in *distribution*.

    See the module docstring for the approximation used.  NaN for an
    empty distribution.
    """
    total = len(distribution)
    if total == 0:
        return float("nan")
    hits = sum(1 for t in distribution if t < observed_t)
    return 2 * min(hits, total - hits) / total
