"""On-disk result store.

Layout::

    <results root>/
      <label>/
        current-sample   SamplingData of the latest run
        old-sample       SamplingData of the run before it
        current-results  TimingData of the latest plain timing
        old-results      TimingData of the timing before it

The results root is ``$CALIBENCH_RESULTS_DIR`` when set, otherwise a
``.calibench`` directory next to the nearest enclosing project marker
(``pyproject.toml``, ``setup.py``, ``setup.cfg`` or ``.git``) above the
working directory.

Writing rotates ``current-*`` to ``old-*`` first.  Reads for comparison
only ever look at ``current-*``; ``old-*`` is a backup.  There is no
locking, so two processes writing the same label race on the rotation.

The ``read_*``/``write_*`` functions raise; the ``try_*`` wrappers log a
warning instead, because persistence must never cost the caller a
measurement.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from calibench.bench.results import (
    SamplingData,
    SamplingDataError,
    TimingData,
    deserialize_sampling_data,
    deserialize_timing_data,
    serialize_sampling_data,
    serialize_timing_data,
)

log = logging.getLogger("calibench")

RESULTS_DIR_ENV = "CALIBENCH_RESULTS_DIR"
RESULTS_DIR_NAME = ".calibench"
PROJECT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg", ".git")

CURRENT_SAMPLE = "current-sample"
OLD_SAMPLE = "old-sample"
CURRENT_RESULTS = "current-results"
OLD_RESULTS = "old-results"


class PersistenceError(OSError):
    """Raised when the result store cannot be located, read or written."""


# ---------------------------------------------------------------------------
# Locating directories
# ---------------------------------------------------------------------------


def find_results_root(start: Path | None = None) -> Path:
    """Locate the directory that holds all labels' results.

    Raises:
        PersistenceError: If no root can be found or it is not a directory.
    """
    override = os.environ.get(RESULTS_DIR_ENV)
    if override:
        root = Path(override)
        if not root.exists():
            raise PersistenceError(
                f"Results directory {root} from ${RESULTS_DIR_ENV} does not exist"
            )
    else:
        here = (start or Path.cwd()).resolve()
        for candidate in (here, *here.parents):
            if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
                root = candidate / RESULTS_DIR_NAME
                break
        else:
            raise PersistenceError(
                f"Could not find a project directory above {here} to place output; "
                f"set ${RESULTS_DIR_ENV}"
            )
        try:
            root.mkdir(exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                f"Failed to create results directory {root}, cause {exc}"
            ) from exc

    if not root.is_dir():
        raise PersistenceError(f"Expected results directory {root} is not a directory")
    return root


def label_dir(label: str, *, create: bool = True) -> Path:
    """Return the directory for *label* under the results root."""
    if os.sep in label or (os.altsep and os.altsep in label):
        raise PersistenceError(f"Label {label} contains a path separator")
    path = find_results_root() / label
    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                f"Failed to create output directory {path}, cause {exc}"
            ) from exc
    return path


# ---------------------------------------------------------------------------
# Raw slot I/O
# ---------------------------------------------------------------------------


def read_slot(label: str, name: str) -> bytes | None:
    """Read a slot file, or None if it does not exist yet."""
    path = label_dir(label, create=False) / name
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise PersistenceError(f"Failed to read file at {path}, cause: {exc}") from exc


def write_slot(label: str, payload: bytes, current_name: str, old_name: str) -> Path:
    """Rotate ``current_name`` to ``old_name`` and write *payload* as current.

    A failed rotation is logged and the current file is overwritten.
    """
    directory = label_dir(label)
    current = directory / current_name
    if current.exists():
        old = directory / old_name
        try:
            os.replace(current, old)
        except OSError as exc:
            log.warning(
                "Failed to move old sample from %s to %s, cause %s, will try to overwrite.",
                current,
                old,
                exc,
            )
    try:
        current.write_bytes(payload)
    except OSError as exc:
        raise PersistenceError(
            f"Failed to write benchmark-data to {current}, cause {exc}"
        ) from exc
    log.debug("Wrote %d bytes to %s", len(payload), current)
    return current


# ---------------------------------------------------------------------------
# Sampling data
# ---------------------------------------------------------------------------


def read_sampling_data(label: str, slot: str = CURRENT_SAMPLE) -> SamplingData | None:
    """Load persisted sampling data for *label*.

    Raises:
        PersistenceError: On I/O failure.
        SamplingDataError: If the stored bytes are malformed, or a stored
            sample claims zero iterations.
    """
    payload = read_slot(label, slot)
    if payload is None:
        return None
    data = deserialize_sampling_data(payload)
    if 0 in data.samples:
        raise SamplingDataError(
            f"Found malformed sampling data for {label}, "
            f"sample {data.samples.index(0)} has zero iterations"
        )
    return data


def write_sampling_data(label: str, data: SamplingData) -> Path:
    """Persist *data* as the current sample for *label*."""
    return write_slot(label, serialize_sampling_data(data), CURRENT_SAMPLE, OLD_SAMPLE)


def try_read_sampling_data(label: str) -> SamplingData | None:
    """Best-effort :func:`read_sampling_data`; failures read as no data."""
    try:
        return read_sampling_data(label)
    except (PersistenceError, SamplingDataError) as exc:
        log.warning("Failed to read last sample, cause %s", exc)
        return None


def try_write_sampling_data(label: str, data: SamplingData) -> bool:
    """Best-effort :func:`write_sampling_data`.  Returns True on success."""
    try:
        write_sampling_data(label, data)
    except (PersistenceError, SamplingDataError) as exc:
        log.warning("Failed to write sampling data, cause: %s", exc)
        return False
    return True


# ---------------------------------------------------------------------------
# Timing data
# ---------------------------------------------------------------------------


def read_timing_data(label: str, slot: str = CURRENT_RESULTS) -> TimingData | None:
    """Load persisted timing data for *label*."""
    payload = read_slot(label, slot)
    if payload is None:
        return None
    return deserialize_timing_data(payload)


def write_timing_data(label: str, data: TimingData) -> Path:
    """Persist *data* as the current timing for *label*."""
    return write_slot(label, serialize_timing_data(data), CURRENT_RESULTS, OLD_RESULTS)


def try_read_timing_data(label: str) -> TimingData | None:
    """Best-effort :func:`read_timing_data`; failures read as no data."""
    try:
        return read_timing_data(label)
    except (PersistenceError, SamplingDataError) as exc:
        log.warning("Failed to read last results, cause %s", exc)
        return None


def try_write_timing_data(label: str, data: TimingData) -> bool:
    """Best-effort :func:`write_timing_data`.  Returns True on success."""
    try:
        write_timing_data(label, data)
    except (PersistenceError, SamplingDataError) as exc:
        log.warning("Failed to write timing data, cause %s", exc)
        return False
    return True
