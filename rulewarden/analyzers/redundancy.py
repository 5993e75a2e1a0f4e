"""Redundancy detection between rule bodies.

Two independent measures:
- similarity: substring containment (1.0) or word-level Jaccard
- line overlap: identical non-trivial lines / size of the smaller line set

Similarity alone decides whether a pair is reported; auto-merge also needs
the line overlap to agree, which keeps short, generically-worded rules from
being merged by accident.
"""

import re

from rulewarden.config import AuditConfig
from rulewarden.models.rules import RedundancyFinding

_WHITESPACE = re.compile(r"\s+")


def normalize_body(text: str) -> str:
    """Lower-case, collapse whitespace runs to one space, trim."""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def similarity(body_a: str, body_b: str) -> float:
    """Similarity of two rule bodies in [0, 1].

    Both empty is 1.0, exactly one empty is 0.0. If one normalized body
    contains the other the result is 1.0; otherwise Jaccard over word sets.
    Symmetric.
    """
    norm_a = normalize_body(body_a)
    norm_b = normalize_body(body_b)

    if not norm_a and not norm_b:
        return 1.0
    if not norm_a or not norm_b:
        return 0.0

    if norm_a in norm_b or norm_b in norm_a:
        return 1.0

    words_a = set(norm_a.split(" "))
    words_b = set(norm_b.split(" "))
    return len(words_a & words_b) / len(words_a | words_b)


def significant_lines(body: str, min_length: int = 10) -> set[str]:
    """Trimmed lines longer than ``min_length`` characters."""
    return {line.strip() for line in body.split("\n") if len(line.strip()) > min_length}


def line_overlap(body_a: str, body_b: str, min_length: int = 10) -> tuple[float, int]:
    """Share of identical non-trivial lines.

    Returns:
        Tuple of (overlap ratio over the smaller line set, shared line count).
        The ratio is 0.0 when either body has no non-trivial lines.
    """
    lines_a = significant_lines(body_a, min_length)
    lines_b = significant_lines(body_b, min_length)
    if not lines_a or not lines_b:
        return 0.0, 0

    shared = len(lines_a & lines_b)
    return shared / min(len(lines_a), len(lines_b)), shared


def compare_bodies(
    id_a: str,
    body_a: str,
    id_b: str,
    body_b: str,
    config: AuditConfig | None = None,
) -> RedundancyFinding | None:
    """Build a RedundancyFinding when two bodies are similar enough to report.

    Args:
        id_a: Identifier of the rule earlier in scan order.
        body_a: Its body.
        id_b: Identifier of the later rule.
        body_b: Its body.
        config: Thresholds (defaults to AuditConfig()).

    Returns:
        RedundancyFinding, or None when similarity neither exceeds the
        report threshold nor reaches the merge threshold.
    """
    config = config or AuditConfig()
    ratio = similarity(body_a, body_b)
    if ratio <= config.report_threshold and ratio < config.merge_threshold:
        return None

    overlap, shared = line_overlap(body_a, body_b, config.min_line_length)
    return RedundancyFinding(
        rule_a=id_a,
        rule_b=id_b,
        overlap_ratio=ratio,
        line_overlap=overlap,
        shared_lines=shared,
        near_duplicate=ratio >= config.near_duplicate_threshold,
        auto_mergeable=(
            ratio >= config.merge_threshold and overlap >= config.line_overlap_threshold
        ),
    )
