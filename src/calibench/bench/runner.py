"""Benchmark execution.

Orchestrates one benchmark invocation:
1. Label validation (falls back to the anonymous label)
2. Warm-up calibration, or the fixed ``max_iterations`` schedule
3. Iteration scheduling
4. Sampled measurement
5. Reporting, comparison and persistence through the selected printer

Usage::

    from calibench import bench, bench_with_setup

    bench(lambda: sorted(data), label="sort")
    bench_with_setup(lambda: list(data), lambda v: v.sort(), label="sort in place")

Persistence and comparison are best-effort: problems there are logged
and the measurement is still reported.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from calibench.bench.calibration import calibrate
from calibench.bench.compare import BenchReport
from calibench.bench.config import BenchmarkConfig, check_config
from calibench.bench.display import Printer, printer_for
from calibench.bench.labels import ANONYMOUS_LABEL, fallback_to_anonymous_on_invalid_label
from calibench.bench.results import SamplingData
from calibench.bench.sampling import run, run_with_setup
from calibench.bench.schedule import calculate_iterations, fixed_iterations

log = logging.getLogger("calibench")


def plan_schedule(
    label: str,
    warm_up_work: Callable[[], Any],
    config: BenchmarkConfig,
    printer: Printer,
) -> list[int]:
    """Calibrate *warm_up_work* and compute the sample schedule.

    With ``config.max_iterations`` set, calibration is skipped and the
    schedule is that single count.
    """
    if config.max_iterations is not None:
        log.debug("%s: using fixed schedule of %d iterations", label, config.max_iterations)
        return fixed_iterations(config.max_iterations)

    printer.warming_up(label, config.warm_up_time_ns)
    warm_up = calibrate(warm_up_work, config.warm_up_time_ns)
    mean_cost = warm_up.mean_cost_ns
    schedule = calculate_iterations(mean_cost, config.num_samples, config.measurement_time_ns)
    printer.scheduled(label, mean_cost, sum(schedule))
    return schedule


def _execute(
    label: str,
    config: BenchmarkConfig | None,
    warm_up_work: Callable[[], Any],
    measure: Callable[[list[int]], SamplingData],
) -> BenchReport:
    cfg = config or BenchmarkConfig()
    check_config(cfg)
    label = fallback_to_anonymous_on_invalid_label(label)
    printer = printer_for(cfg)

    schedule = plan_schedule(label, warm_up_work, cfg, printer)
    sampling_data = measure(schedule)
    return printer.report(label, sampling_data, cfg, sampling_data.total_iterations)


def bench(
    work: Callable[[], Any],
    *,
    label: str = ANONYMOUS_LABEL,
    config: BenchmarkConfig | None = None,
) -> BenchReport:
    """Benchmark *work*, a callable taking no arguments.

    Args:
        work: The code under measurement.
        label: Key under which results are persisted and compared.
        config: Benchmark options; defaults to ``BenchmarkConfig()``.

    Returns:
        BenchReport with the raw samples, their summary and, when a
        previous run exists, the comparison with it.

    Raises:
        ValueError: If *config* is invalid.
    """
    return _execute(label, config, work, lambda schedule: run(schedule, work))


def bench_with_setup(
    setup: Callable[[], Any],
    work: Callable[[Any], Any],
    *,
    label: str = ANONYMOUS_LABEL,
    config: BenchmarkConfig | None = None,
) -> BenchReport:
    """Benchmark ``work(setup())`` without timing ``setup``.

    Useful when the work needs fresh input that is expensive to build,
    or that the work consumes.  Warm-up runs setup and work together,
    so a slow setup shortens the warm-up rather than the measurement.
    """

    def warm_up_work() -> None:
        work(setup())

    return _execute(
        label,
        config,
        warm_up_work,
        lambda schedule: run_with_setup(schedule, setup, work),
    )
