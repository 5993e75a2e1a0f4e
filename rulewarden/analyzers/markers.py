"""Conflict review markers written into annotated rules."""

import re

MARKER_PREFIX = "rulewarden: conflicts with"

# Whole marker lines, as inserted by the annotator
MARKER_LINE_PATTERN = re.compile(
    rf"^<!-- {re.escape(MARKER_PREFIX)} (?P<counterpart>.+?) \(.*-->[ \t]*(?:\n|\Z)",
    re.MULTILINE,
)


def conflict_marker(counterpart: str, reason: str) -> str:
    """The one-line comment inserted into an annotated rule."""
    return f"<!-- {MARKER_PREFIX} {counterpart} ({reason}) - review manually -->"


def has_conflict_marker(content: str, counterpart: str) -> bool:
    return f"{MARKER_PREFIX} {counterpart} " in content


def marker_counterparts(text: str) -> list[str]:
    """Rule ids named by the markers in ``text``, in order of appearance."""
    return [match.group("counterpart") for match in MARKER_LINE_PATTERN.finditer(text)]


def strip_conflict_markers(text: str) -> str:
    """Remove marker lines so they do not count as rule content."""
    return MARKER_LINE_PATTERN.sub("", text)


def remove_conflict_markers(text: str, counterparts: set[str]) -> str:
    """Remove only the marker lines naming one of ``counterparts``."""
    return MARKER_LINE_PATTERN.sub(
        lambda match: "" if match.group("counterpart") in counterparts else match.group(0),
        text,
    )
