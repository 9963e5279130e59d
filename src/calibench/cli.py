"""Command-line interface for calibench.

Subcommands:
    calibench run           Benchmark a Python callable
    calibench show          Summarize the persisted results of a label
    calibench compare       Compare a label's latest run with the one before
    calibench check-label   Check whether a label can be used as-is
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Callable

import click

from calibench import __version__
from calibench.logging import get_logger, setup_logging

log = get_logger("cli")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """calibench — adaptive micro-benchmarks with run-to-run comparison."""


def _load_callable(target: str, app_dir: str) -> Callable[..., Any]:
    """Import ``module:attribute`` (attribute may be dotted)."""
    if ":" not in target:
        raise click.BadParameter(
            f"Expected 'module:function', got '{target}'", param_hint="TARGET"
        )
    module_name, attr_path = target.split(":", 1)
    if app_dir not in sys.path:
        sys.path.insert(0, app_dir)
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(
            f"Cannot import module '{module_name}': {exc}", param_hint="TARGET"
        ) from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise click.BadParameter(
                f"Module '{module_name}' has no attribute '{attr_path}'", param_hint="TARGET"
            ) from exc
    if not callable(obj):
        raise click.BadParameter(f"'{target}' is not callable", param_hint="TARGET")
    log.debug("Loaded %s from %s", target, app_dir)
    return obj


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.argument("target")
@click.option(
    "--setup",
    "setup_target",
    type=str,
    default=None,
    help="Untimed 'module:function' whose result is passed to TARGET.",
)
@click.option("--label", type=str, default=None, help="Label to persist and compare under.")
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    help="YAML profile with benchmark options.",
)
@click.option("--measurement-time", type=float, default=None, help="Seconds (default: 5).")
@click.option("--warm-up-time", type=float, default=None, help="Seconds (default: 3).")
@click.option("--samples", "num_samples", type=int, default=None, help="Default: 100.")
@click.option("--resamples", "num_resamples", type=int, default=None, help="Default: 10000.")
@click.option(
    "--max-iterations",
    type=int,
    default=None,
    help="Skip calibration and run exactly this many iterations.",
)
@click.option(
    "--save/--no-save",
    "dump_results_to_disk",
    default=None,
    help="Persist and compare with the previous run (default: save).",
)
@click.option(
    "--app-dir",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Directory to import TARGET from.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(  # noqa: PLR0913
    target: str,
    setup_target: str | None,
    label: str | None,
    profile_path: Path | None,
    measurement_time: float | None,
    warm_up_time: float | None,
    num_samples: int | None,
    num_resamples: int | None,
    max_iterations: int | None,
    dump_results_to_disk: bool | None,
    app_dir: str,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark TARGET, a 'module:function' callable.

    \b
    Examples:
        calibench run mymod:parse --label parse
        calibench run mymod:sort_in_place --setup mymod:make_list
        calibench run mymod:parse --profile quick.yaml --no-save
    """
    from calibench.bench.config import config_from_profile, load_profile
    from calibench.bench.runner import bench, bench_with_setup

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    overrides: dict[str, Any] = {
        "measurement_time": measurement_time,
        "warm_up_time": warm_up_time,
        "num_samples": num_samples,
        "num_resamples": num_resamples,
        "max_iterations": max_iterations,
        "dump_results_to_disk": dump_results_to_disk,
    }
    try:
        profile = load_profile(profile_path) if profile_path else {}
        config = config_from_profile(profile, cli_overrides=overrides)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    work = _load_callable(target, app_dir)
    bench_label = label or target.split(":", 1)[1]
    try:
        if setup_target:
            setup = _load_callable(setup_target, app_dir)
            bench_with_setup(setup, work, label=bench_label, config=config)
        else:
            bench(work, label=bench_label, config=config)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904


# ---------------------------------------------------------------------------
# show / compare
# ---------------------------------------------------------------------------


def _require_valid_label(label: str) -> None:
    """Exit with status 1 if *label* cannot name a result directory."""
    from calibench.bench.labels import validate_label

    reason = validate_label(label)
    if reason is not None:
        click.echo(f"Error: {reason}", err=True)
        raise SystemExit(1)


@main.command("show")
@click.argument("label")
@click.option("--old", is_flag=True, help="Show the backup of the run before the latest.")
def show(label: str, old: bool) -> None:
    """Summarize the persisted results of LABEL."""
    from calibench.bench import storage
    from calibench.bench.display import format_analysis, format_sample_header
    from calibench.bench.results import SamplingDataError
    from calibench.bench.stats import summarize

    _require_valid_label(label)
    slot = storage.OLD_SAMPLE if old else storage.CURRENT_SAMPLE
    try:
        data = storage.read_sampling_data(label, slot)
    except (storage.PersistenceError, SamplingDataError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    if data is None:
        click.echo(f"No {slot} stored for '{label}'.", err=True)
        raise SystemExit(1)

    analysis = summarize(data)
    click.echo(format_sample_header(label, data.total_iterations, analysis.elapsed, len(data)))
    click.echo(format_analysis(analysis))


@main.command("compare")
@click.argument("label")
@click.option(
    "--resamples",
    "num_resamples",
    type=int,
    default=10_000,
    show_default=True,
    help="Bootstrap resamples for the p-value.",
)
def compare(label: str, num_resamples: int) -> None:
    """Compare the latest persisted run of LABEL with the one before it."""
    from calibench.bench import storage
    from calibench.bench.compare import compare_analyses
    from calibench.bench.display import (
        format_analysis,
        format_sample_header,
        format_sampling_comparison,
    )
    from calibench.bench.results import SamplingDataError
    from calibench.bench.stats import summarize

    _require_valid_label(label)
    try:
        current = storage.read_sampling_data(label, storage.CURRENT_SAMPLE)
        previous = storage.read_sampling_data(label, storage.OLD_SAMPLE)
    except (storage.PersistenceError, SamplingDataError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    if current is None or previous is None:
        click.echo(f"Need two persisted runs of '{label}' to compare.", err=True)
        raise SystemExit(1)

    analysis = summarize(current)
    comparison = compare_analyses(analysis, summarize(previous), num_resamples=num_resamples)
    click.echo(
        format_sample_header(label, current.total_iterations, analysis.elapsed, len(current))
    )
    click.echo(format_analysis(analysis))
    click.echo(format_sampling_comparison(comparison))


@main.command("check-label")
@click.argument("label")
def check_label(label: str) -> None:
    """Check whether LABEL is usable as a result directory name."""
    from calibench.bench.labels import validate_label

    reason = validate_label(label)
    if reason is not None:
        click.echo(f"Invalid: {reason}")
        raise SystemExit(1)
    click.echo("Valid")
