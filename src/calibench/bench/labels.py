"""Label validation.

A label names the directory holding a benchmark's persisted results, so
it must be a single, portable path component.  Invalid labels are not
an error: they fall back to the shared anonymous label, which means
different anonymous benchmarks overwrite each other's history.
"""

from __future__ import annotations

import logging
import os

log = logging.getLogger("calibench")

ANONYMOUS_LABEL = "anonymous"

# Not exhaustive, covers the separators and the characters Windows rejects.
ILLEGAL_CHARACTERS = ("/", "\0", ":", "<", ">", '"', "\\", "|", "?", "*")


def validate_label(label: str) -> str | None:
    """Return the reason *label* is unusable, or None if it is valid."""
    if not label:
        return "Label cannot be empty"
    for sep in (os.sep, os.altsep):
        if sep and sep in label:
            return f"Label contains path separator {sep!r}"
    for ch in ILLEGAL_CHARACTERS:
        if ch in label:
            return f"Label contains illegal character {ch!r}"
    for code in range(32):
        if chr(code) in label:
            return f"Label contains illegal ascii-control character number {code}"
    if label.endswith("."):
        return "Label cannot end with dot"
    if label.endswith(" "):
        return "Label cannot end with a space"
    return None


def fallback_to_anonymous_on_invalid_label(label: str) -> str:
    """Return *label*, or the anonymous label with a warning if invalid."""
    reason = validate_label(label)
    if reason is None:
        return label
    log.warning("%s, falling back to '%s'.", reason, ANONYMOUS_LABEL)
    return ANONYMOUS_LABEL
