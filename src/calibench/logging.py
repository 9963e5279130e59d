"""Logging setup for calibench.

Library modules log through the ``calibench`` logger and never install
handlers themselves.  Recoverable problems (bad labels, unreadable result
files, compressed sample sizes) are logged as warnings, so they reach
stderr through Python's last-resort handler even when the host program
never configured logging.

The CLI calls :func:`setup_logging`.  Programs that embed benchmarks may
call it too; it only replaces handlers it installed earlier, and leaves
handlers added by the host alone.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

_LOGGER_NAME = "calibench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"

# Marks handlers owned by setup_logging.
_OWNED_ATTR = "_calibench_owned"


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Console level for the -v/-q flags; *verbose* wins over *quiet*."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a console handler, and optionally a DEBUG file handler.

    Args:
        verbose: Show debug messages, such as calibration totals.
        quiet: Only show warnings and errors.
        log_file: Also log everything to this file.
        stream: Console stream, stderr by default.

    Returns:
        The ``calibench`` logger.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED_ATTR, False)]:
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(console_level(verbose=verbose, quiet=quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    _attach(logger, console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        _attach(logger, fh)

    return logger


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _OWNED_ATTR, True)
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger under the calibench namespace, e.g. ``calibench.cli``."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
