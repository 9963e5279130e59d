"""calibench — adaptive micro-benchmarks with run-to-run comparison."""

from __future__ import annotations

__version__ = "0.1.0"

from calibench.bench.compare import BenchReport, Comparison  # noqa: E402
from calibench.bench.config import BenchmarkConfig  # noqa: E402
from calibench.bench.runner import bench, bench_with_setup  # noqa: E402
from calibench.bench.sampling import black_box  # noqa: E402
from calibench.bench.timing import (  # noqa: E402
    TimedIterator,
    run_timed,
    run_timed_from_iterator,
    run_timed_times,
    timed,
)
from calibench.bench.results import SamplingData, TimingData  # noqa: E402

__all__ = [
    "BenchReport",
    "BenchmarkConfig",
    "Comparison",
    "SamplingData",
    "TimedIterator",
    "TimingData",
    "__version__",
    "bench",
    "bench_with_setup",
    "black_box",
    "run_timed",
    "run_timed_from_iterator",
    "run_timed_times",
    "timed",
]
