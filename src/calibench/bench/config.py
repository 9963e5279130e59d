"""Benchmark configuration and profile loading.

Handles:
- The immutable ``BenchmarkConfig`` consumed by the measurement pipeline.
- Validating a configuration before any work is executed.
- Loading configuration from YAML profiles and merging CLI overrides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

log = logging.getLogger("calibench")

_NANOS_PER_SECOND = 1_000_000_000


# ---------------------------------------------------------------------------
# BenchmarkConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchmarkConfig:
    """Options for one benchmark invocation.

    Durations are in seconds.  When ``max_iterations`` is set the warm-up
    and scheduling phases are skipped and the work runs exactly that many
    times as a single sample.
    """

    measurement_time: float = 5.0  # Target wall-clock budget of the timed phase
    warm_up_time: float = 3.0  # Budget of the calibration phase
    num_samples: int = 100  # Desired sample count, may be compressed
    num_resamples: int = 10_000  # Bootstrap iterations for the p-value
    dump_results_to_disk: bool = True  # Persist and compare with the last run
    max_iterations: int | None = None

    @property
    def measurement_time_ns(self) -> int:
        return int(self.measurement_time * _NANOS_PER_SECOND)

    @property
    def warm_up_time_ns(self) -> int:
        return int(self.warm_up_time * _NANOS_PER_SECOND)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchmarkConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.measurement_time < 0:
        errors.append(
            ValidationError(
                field="measurement_time",
                message=(
                    f"Measurement time cannot be negative (got {config.measurement_time})."
                ),
            )
        )

    if config.warm_up_time < 0:
        errors.append(
            ValidationError(
                field="warm_up_time",
                message=f"Warm-up time cannot be negative (got {config.warm_up_time}).",
            )
        )

    if config.num_samples < 1:
        errors.append(
            ValidationError(
                field="num_samples",
                message=f"Need at least 1 sample (got {config.num_samples}).",
            )
        )
    elif config.num_samples < 2 and config.max_iterations is None:
        errors.append(
            ValidationError(
                field="num_samples",
                message=(
                    "A single sample gives no variance; comparisons with "
                    "previous runs will always report no change."
                ),
                severity="warning",
            )
        )

    if config.num_resamples < 0:
        errors.append(
            ValidationError(
                field="num_resamples",
                message=f"Resample count cannot be negative (got {config.num_resamples}).",
            )
        )

    if config.max_iterations is not None and config.max_iterations < 1:
        errors.append(
            ValidationError(
                field="max_iterations",
                message=f"max_iterations must be at least 1 (got {config.max_iterations}).",
            )
        )

    return errors


def check_config(config: BenchmarkConfig) -> None:
    """Log warnings and raise on fatal validation errors.

    Raises:
        ValueError: If the configuration has at least one error.
    """
    errors = validate_config(config)
    fatal = [e for e in errors if e.severity == "error"]
    for w in errors:
        if w.severity == "warning":
            log.warning("Config warning: %s: %s", w.field, w.message)
    if fatal:
        messages = [f"  {e.field}: {e.message}" for e in fatal]
        raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        measurement_time: 2.5
        warm_up_time: 1
        num_samples: 50
        num_resamples: 5000
        dump_results_to_disk: true
        max_iterations: null

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchmarkConfig:
    """Build a BenchmarkConfig from a parsed profile.

    CLI overrides take precedence over profile values; ``None`` in the
    overrides means "not given on the command line".

    Raises:
        ValueError: If the profile names an option BenchmarkConfig does
            not have, or a value has the wrong type.
    """
    known = {f.name for f in fields(BenchmarkConfig)}
    unknown = sorted(set(profile_data) - known)
    if unknown:
        raise ValueError(
            f"Unknown benchmark option(s) in profile: {', '.join(unknown)}. "
            f"Valid options: {', '.join(sorted(known))}"
        )

    values: dict[str, Any] = dict(profile_data)
    for key, value in (cli_overrides or {}).items():
        if key not in known:
            raise ValueError(f"Unknown benchmark option: {key}")
        if value is not None:
            values[key] = value

    for name in ("measurement_time", "warm_up_time"):
        if name in values and not _is_number(values[name]):
            raise ValueError(f"'{name}' must be a number of seconds, got {values[name]!r}")
    for name in ("num_samples", "num_resamples"):
        if name in values and not _is_int(values[name]):
            raise ValueError(f"'{name}' must be an integer, got {values[name]!r}")
    if values.get("max_iterations") is not None and not _is_int(values["max_iterations"]):
        raise ValueError(
            f"'max_iterations' must be an integer or null, got {values['max_iterations']!r}"
        )
    if "dump_results_to_disk" in values and not isinstance(values["dump_results_to_disk"], bool):
        raise ValueError(
            "'dump_results_to_disk' must be true or false, "
            f"got {values['dump_results_to_disk']!r}"
        )

    return BenchmarkConfig(**values)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
