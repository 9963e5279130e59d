"""Terminal reporting for benchmark results.

Two interchangeable printers share one contract:

- :class:`SimplePrinter` prints the summary of the run.
- :class:`ComparingPrinter` additionally compares with the run last
  persisted under the same label, prints the changes, and persists the
  new run.

The ``format_*`` functions build the lines; the printers only decide
what to print and echo it.
"""

from __future__ import annotations

import math

import click

from calibench.bench import storage
from calibench.bench.compare import (
    BenchReport,
    Comparison,
    SamplingComparison,
    TimingComparison,
    compare_analyses,
    compare_timings,
)
from calibench.bench.config import BenchmarkConfig
from calibench.bench.results import SamplingData, TimingData
from calibench.bench.stats import SamplingDataSimpleAnalysis, summarize
from calibench.formatting import (
    bad,
    emphasis,
    fmt_change,
    fmt_num,
    fmt_p_value,
    fmt_time,
    good,
    label_style,
    muted,
)


# ---------------------------------------------------------------------------
# Line formatting
# ---------------------------------------------------------------------------


def format_warm_up(label: str, warm_up_ns: int) -> str:
    return f"{label_style(label)} warming up for {emphasis(fmt_time(warm_up_ns))}"


def format_schedule(label: str, mean_cost_ns: float, total_iterations: int) -> str:
    return (
        f"{label_style(label)} mean warm up execution time "
        f"{emphasis(fmt_time(mean_cost_ns))} running "
        f"{emphasis(fmt_num(total_iterations))} iterations"
    )


def format_sample_header(
    label: str,
    total_iterations: int,
    total_elapsed: int,
    num_samples: int,
) -> str:
    return (
        f"{label_style(label)} [{fmt_num(total_iterations)} iterations in "
        f"{fmt_time(total_elapsed)} with {fmt_num(num_samples)} samples]:"
    )


def format_timing_header(label: str, data: TimingData) -> str:
    return (
        f"{label_style(label)} [{fmt_num(data.iterations)} iterations in "
        f"{fmt_time(data.elapsed)}]:"
    )


def _min_mean_max_header(kind: str) -> str:
    return f"\t{kind}\t[{muted('min')} {emphasis('mean')} {muted('max')}]:"


def format_analysis(analysis: SamplingDataSimpleAnalysis) -> str:
    """Format the elapsed line of a sampled run.

    Variance has the unit time squared.
    """
    return (
        f"{_min_mean_max_header('elapsed')}\t"
        f"[{muted(fmt_time(analysis.min))} {emphasis(fmt_time(analysis.mean))} "
        f"{muted(fmt_time(analysis.max))}] "
        f"(sample data: med = {fmt_time(analysis.median)}, "
        f"var = {fmt_time(analysis.variance)}², "
        f"stddev = {fmt_time(analysis.stddev)})"
    )


def format_timing(data: TimingData) -> str:
    return (
        f"{_min_mean_max_header('elapsed')}\t"
        f"[{muted(fmt_time(data.min_nanos))} {emphasis(fmt_time(data.mean))} "
        f"{muted(fmt_time(data.max_nanos))}]"
    )


def _styled_mean_change(mean_change_pct: float, verdict: Comparison) -> str:
    text = fmt_change(mean_change_pct)
    if verdict is Comparison.WORSE:
        return bad(text)
    if verdict is Comparison.BETTER:
        return good(text)
    return emphasis(text)


def format_change(
    min_change_pct: float,
    mean_change_pct: float,
    max_change_pct: float,
    verdict: Comparison,
    reliability_comment: str,
) -> str:
    return (
        f"{_min_mean_max_header('change')}\t"
        f"[{muted(fmt_change(min_change_pct))} "
        f"{_styled_mean_change(mean_change_pct, verdict)} "
        f"{muted(fmt_change(max_change_pct))}] ({reliability_comment})"
    )


def format_sampling_comparison(comparison: SamplingComparison) -> str:
    return format_change(
        comparison.min_change_pct,
        comparison.mean_change_pct,
        comparison.max_change_pct,
        comparison.verdict,
        fmt_p_value(comparison.p),
    )


def format_timing_comparison(comparison: TimingComparison) -> str:
    return format_change(
        comparison.min_change_pct,
        comparison.mean_change_pct,
        comparison.max_change_pct,
        comparison.verdict,
        "p=? single sample",
    )


def format_report(report: BenchReport) -> str:
    """Format a complete report: header, analysis and optional change."""
    lines = [
        format_sample_header(
            report.label,
            report.total_iterations,
            report.analysis.elapsed,
            len(report.sampling_data),
        ),
        format_analysis(report.analysis),
    ]
    if report.comparison is not None:
        lines.append(format_sampling_comparison(report.comparison))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Printers
# ---------------------------------------------------------------------------


class Printer:
    """Base reporting strategy.

    Subclasses implement :meth:`report` and :meth:`report_timing`.
    """

    def warming_up(self, label: str, warm_up_ns: int) -> None:
        click.echo(format_warm_up(label, warm_up_ns))

    def scheduled(self, label: str, mean_cost_ns: float, total_iterations: int) -> None:
        click.echo(format_schedule(label, mean_cost_ns, total_iterations))

    def report(
        self,
        label: str,
        data: SamplingData,
        config: BenchmarkConfig,
        total_iterations: int,
    ) -> BenchReport:
        raise NotImplementedError

    def report_timing(self, label: str, data: TimingData) -> TimingComparison | None:
        raise NotImplementedError


class SimplePrinter(Printer):
    """Print results straight to stdout."""

    def report(
        self,
        label: str,
        data: SamplingData,
        config: BenchmarkConfig,
        total_iterations: int,
    ) -> BenchReport:
        report = BenchReport(
            label=label,
            sampling_data=data,
            analysis=summarize(data),
            total_iterations=total_iterations,
        )
        click.echo(format_report(report))
        return report

    def report_timing(self, label: str, data: TimingData) -> TimingComparison | None:
        click.echo(format_timing_header(label, data))
        click.echo(format_timing(data))
        return None


class ComparingPrinter(Printer):
    """Compare with the last persisted run of the label, then persist."""

    def report(
        self,
        label: str,
        data: SamplingData,
        config: BenchmarkConfig,
        total_iterations: int,
    ) -> BenchReport:
        report = BenchReport(
            label=label,
            sampling_data=data,
            analysis=summarize(data),
            total_iterations=total_iterations,
        )
        last = storage.try_read_sampling_data(label)
        if last is not None:
            report.comparison = compare_analyses(
                report.analysis,
                summarize(last),
                num_resamples=config.num_resamples,
            )
        click.echo(format_report(report))
        storage.try_write_sampling_data(label, data)
        return report

    def report_timing(self, label: str, data: TimingData) -> TimingComparison | None:
        last = storage.try_read_timing_data(label)
        click.echo(format_timing_header(label, data))
        click.echo(format_timing(data))
        comparison = None
        if last is not None and not math.isnan(data.mean):
            comparison = compare_timings(data, last)
            click.echo(format_timing_comparison(comparison))
        storage.try_write_timing_data(label, data)
        return comparison


def printer_for(config: BenchmarkConfig) -> Printer:
    """Select the printer matching ``config.dump_results_to_disk``."""
    if config.dump_results_to_disk:
        return ComparingPrinter()
    return SimplePrinter()
