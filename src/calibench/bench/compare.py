"""Run-to-run comparison.

Compares a fresh run against the previous run of the same label and
decides whether the mean cost changed.  A change is only reported as
better or worse when it is both large (relative mean change beyond the
noise threshold) and significant (resampled p-value at or below the
significance level).  Anything else is "same", whatever the raw delta.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass

from calibench.bench.results import SamplingData, TimingData
from calibench.bench.stats import (
    SamplingDataSimpleAnalysis,
    bootstrap_resample,
    p_value,
    t_statistic,
)

log = logging.getLogger("calibench")

# Relative mean change, in percent, below which a difference is noise.
NOISE_THRESHOLD_PCT = 1.0

# p-value at or under which a difference is significant.
SIGNIFICANCE_LEVEL = 0.05

# Plain timings have no samples to test, so they use a wider threshold.
TIMING_NOISE_THRESHOLD_PCT = 5.0


class Comparison(enum.Enum):
    """Verdict on the mean cost relative to the previous run."""

    BETTER = "better"
    SAME = "same"
    WORSE = "worse"


def percent_change(new: float, old: float) -> float:
    """Relative change of *new* over *old* in percent."""
    if old == 0:
        if new == 0:
            return 0.0
        return math.copysign(float("inf"), new)
    return (new / old - 1.0) * 100.0


def classify_change(
    mean_change_pct: float,
    p: float,
    *,
    noise_threshold_pct: float = NOISE_THRESHOLD_PCT,
    significance_level: float = SIGNIFICANCE_LEVEL,
) -> Comparison:
    """Apply the large-and-significant rule to a mean change.

    An increase in cost is worse, a decrease better.  NaN inputs are
    never significant.
    """
    if math.isnan(mean_change_pct) or math.isnan(p):
        return Comparison.SAME
    if abs(mean_change_pct) < noise_threshold_pct or p > significance_level:
        return Comparison.SAME
    if mean_change_pct > 0:
        return Comparison.WORSE
    if mean_change_pct < 0:
        return Comparison.BETTER
    return Comparison.SAME


# ---------------------------------------------------------------------------
# Sampled runs
# ---------------------------------------------------------------------------


@dataclass
class SamplingComparison:
    """Comparison of a run with the previous run of the same label."""

    old: SamplingDataSimpleAnalysis
    min_change_pct: float
    mean_change_pct: float
    max_change_pct: float
    t: float
    p: float
    verdict: Comparison

    @property
    def significant(self) -> bool:
        return self.verdict is not Comparison.SAME


def compare_analyses(
    new: SamplingDataSimpleAnalysis,
    old: SamplingDataSimpleAnalysis,
    *,
    num_resamples: int,
    noise_threshold_pct: float = NOISE_THRESHOLD_PCT,
    significance_level: float = SIGNIFICANCE_LEVEL,
    seed: int | None = None,
) -> SamplingComparison:
    """Compare two run summaries.

    The t statistic and resampled p-value need at least two samples on
    each side; with fewer, both are NaN and the verdict is "same".

    Args:
        new: Summary of the current run.
        old: Summary of the previous run.
        num_resamples: Size of the resampled null distribution.
        noise_threshold_pct: Minimum relative mean change, in percent.
        significance_level: Maximum p-value for a significant change.
        seed: Resampling seed, for reproducible tests.
    """
    a = new.per_sample_average
    b = old.per_sample_average
    if len(a) >= 2 and len(b) >= 2:
        t = t_statistic(a, b)
        distribution = bootstrap_resample(a, b, num_resamples, seed=seed)
        p = p_value(t, distribution) if not math.isnan(t) else float("nan")
    else:
        log.debug("Not enough samples for a significance test (%d vs %d)", len(a), len(b))
        t = float("nan")
        p = float("nan")

    mean_change = percent_change(new.mean, old.mean)
    return SamplingComparison(
        old=old,
        min_change_pct=percent_change(new.min, old.min),
        mean_change_pct=mean_change,
        max_change_pct=percent_change(new.max, old.max),
        t=t,
        p=p,
        verdict=classify_change(
            mean_change,
            p,
            noise_threshold_pct=noise_threshold_pct,
            significance_level=significance_level,
        ),
    )


# ---------------------------------------------------------------------------
# Plain timings
# ---------------------------------------------------------------------------


@dataclass
class TimingComparison:
    """Comparison of a plain timing with the previous one."""

    old: TimingData
    min_change_pct: float
    mean_change_pct: float
    max_change_pct: float
    verdict: Comparison


def compare_timings(
    new: TimingData,
    old: TimingData,
    *,
    noise_threshold_pct: float = TIMING_NOISE_THRESHOLD_PCT,
) -> TimingComparison:
    """Compare two plain timings on the mean alone (no significance test)."""
    mean_change = percent_change(new.mean, old.mean)
    if math.isnan(mean_change) or abs(mean_change) < noise_threshold_pct:
        verdict = Comparison.SAME
    elif mean_change > 0:
        verdict = Comparison.WORSE
    else:
        verdict = Comparison.BETTER
    return TimingComparison(
        old=old,
        min_change_pct=percent_change(new.min_nanos, old.min_nanos),
        mean_change_pct=mean_change,
        max_change_pct=percent_change(new.max_nanos, old.max_nanos),
        verdict=verdict,
    )


# ---------------------------------------------------------------------------
# Run report
# ---------------------------------------------------------------------------


@dataclass
class BenchReport:
    """Everything one benchmark invocation produced."""

    label: str
    sampling_data: SamplingData
    analysis: SamplingDataSimpleAnalysis
    total_iterations: int
    comparison: SamplingComparison | None = None
