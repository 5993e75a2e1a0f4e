"""Turn audit findings into a remediation plan.

Policy, in priority order:
1. Merge auto-mergeable redundant pairs into the broader-scoped rule.
2. Split rules whose estimated size exceeds ``max_tokens``.
3. Prune conflict markers naming rules that are gone or removed by this run.
4. Annotate both sides of every remaining conflict.

A document touched by a Merge or Split is left out of every later action in
the same run. Deferred work is picked up by the next run.
"""

import re

from rulewarden.analyzers.loader import RULE_SUFFIX, RuleDocument, ScanResult, estimate_tokens
from rulewarden.analyzers.markers import (
    has_conflict_marker,
    marker_counterparts,
    remove_conflict_markers,
    strip_conflict_markers,
)
from rulewarden.config import AuditConfig
from rulewarden.logging import log_operation, logger
from rulewarden.models.rules import (
    AnnotateAction,
    AuditReport,
    ConflictFinding,
    ManualReview,
    MergeAction,
    PruneAction,
    RedundancyFinding,
    RemediationAction,
    SplitAction,
)

_SECTION_BOUNDARY = re.compile(r"(?=^## )", re.MULTILINE)
_PARAGRAPH_BOUNDARY = re.compile(r"\n\s*\n")


def insert_conflict_marker(content: str, header_block: str, marker: str) -> str:
    """Insert ``marker`` on its own line right after the header block.

    ``header_block`` must be a prefix of ``content`` (or empty, in which case
    the marker goes at the top).
    """
    body = content[len(header_block):]
    return f"{header_block}{marker}\n{body}"


def conflict_reason(finding: ConflictFinding) -> str:
    if finding.kind == "pattern_conflict" and finding.topic:
        return finding.topic
    return f"directive on '{finding.subject}'"


# Merge


def scope_rank(document: RuleDocument) -> tuple[int, int]:
    """Sort key for breadth of activation: always tier first, then glob count."""
    scope = document.scope
    if scope is None:
        return (0, 0)
    return (1 if scope.tier == "always" else 0, len(scope.patterns))


def choose_keep(doc_a: RuleDocument, doc_b: RuleDocument) -> tuple[RuleDocument, RuleDocument]:
    """Pick which rule survives a merge.

    ``doc_a`` must precede ``doc_b`` in scan order; it wins ties.

    Returns:
        (keep, remove) tuple.
    """
    if scope_rank(doc_b) > scope_rank(doc_a):
        return doc_b, doc_a
    return doc_a, doc_b


def merge_bodies(kept_body: str, removed_body: str) -> tuple[str, int]:
    """Line-level union of two bodies.

    Kept lines come first, unchanged. Non-empty lines of the removed body whose
    trimmed text is not already present are appended in their original order.

    Returns:
        Tuple of (merged body, number of lines appended).
    """
    seen = {line.strip() for line in kept_body.split("\n")}
    novel: list[str] = []
    for line in removed_body.split("\n"):
        trimmed = line.strip()
        if trimmed and trimmed not in seen:
            novel.append(line)
            seen.add(trimmed)

    if not novel:
        return kept_body, 0

    base = kept_body.rstrip("\n")
    merged = "\n".join([base, *novel]) if base else "\n".join(novel)
    return merged + "\n", len(novel)


def plan_merge(
    finding: RedundancyFinding,
    doc_a: RuleDocument,
    doc_b: RuleDocument,
) -> MergeAction:
    """Plan folding the narrower rule into the broader one.

    Markers in the kept rule that name the removed rule are dropped, and the
    removed rule's own markers are not carried over.
    """
    keep, remove = choose_keep(doc_a, doc_b)
    kept_body = remove_conflict_markers(keep.body, {remove.id})
    merged_body, added = merge_bodies(kept_body, strip_conflict_markers(remove.body))
    return MergeAction(
        keep=keep.id,
        remove=remove.id,
        overlap_ratio=finding.overlap_ratio,
        line_overlap=finding.line_overlap,
        lines_added=added,
        merged_content=keep.header_block + merged_body,
        original_content=keep.content,
    )


# Split


def _group_sections(sections: list[str], max_tokens: int) -> list[str]:
    """Greedily pack consecutive sections into parts under ``max_tokens``."""
    parts: list[str] = []
    current: list[str] = []
    current_tokens = 0

    for section in sections:
        section_tokens = estimate_tokens(section)
        if current and current_tokens + section_tokens > max_tokens:
            parts.append("".join(current))
            current = [section]
            current_tokens = section_tokens
        else:
            current.append(section)
            current_tokens += section_tokens

    if current:
        parts.append("".join(current))
    return parts


def split_body(body: str, max_tokens: int) -> list[str]:
    """Split a body at level-2 headings, or into two halves by paragraph.

    Returns:
        Part bodies, each ending with a newline. Fewer than two parts means
        the body cannot be split.
    """
    sections = [s for s in _SECTION_BOUNDARY.split(body) if s.strip()]

    if len(sections) > 1:
        parts = _group_sections(sections, max_tokens)
    else:
        paragraphs = [p.strip("\n") for p in _PARAGRAPH_BOUNDARY.split(body) if p.strip()]
        if len(paragraphs) < 2:
            return []
        mid = (len(paragraphs) + 1) // 2
        parts = ["\n\n".join(paragraphs[:mid]), "\n\n".join(paragraphs[mid:])]

    return [part.rstrip("\n") + "\n" for part in parts]


def part_name(doc_id: str, index: int) -> str:
    """``rules.mdc`` -> ``rules-part1.mdc`` (index is 1-based)."""
    stem = doc_id[: -len(RULE_SUFFIX)] if doc_id.endswith(RULE_SUFFIX) else doc_id
    return f"{stem}-part{index}{RULE_SUFFIX}"


def plan_split(document: RuleDocument, max_tokens: int, taken: set[str]) -> SplitAction | None:
    """Plan a split for an oversized document.

    Args:
        document: Candidate rule.
        max_tokens: Size threshold (estimated tokens for the whole file).
        taken: Rule ids already present in the directory or claimed by
            earlier splits; part names must not collide with these.

    Returns:
        SplitAction, or None when the document is small enough, cannot be
        split, or a part name is already taken.
    """
    if document.estimated_tokens <= max_tokens:
        return None

    bodies = split_body(document.body, max_tokens)
    if len(bodies) < 2:
        logger.debug("Cannot split %s: no headings or paragraphs", document.id)
        return None

    names = [part_name(document.id, i) for i in range(1, len(bodies) + 1)]
    collisions = [name for name in names if name in taken]
    if collisions:
        logger.warning("Skipping split of %s: %s already exists", document.id, ", ".join(collisions))
        return None

    return SplitAction(
        source=document.id,
        parts=names,
        estimated_tokens=document.estimated_tokens,
        part_contents=[document.header_block + body for body in bodies],
    )


# Prune


def plan_prunes(
    documents: dict[str, RuleDocument],
    consumed: set[str],
    present: set[str],
) -> list[PruneAction]:
    """One Prune per rule whose markers name a missing or removed counterpart.

    Args:
        documents: Scanned rules by id.
        consumed: Ids rewritten by a Merge or Split in this run; skipped.
        present: Every rule file that will exist after this run, readable
            or not. Markers naming anything else are stale.
    """
    actions: list[PruneAction] = []
    for doc_id, document in documents.items():
        if doc_id in consumed:
            continue
        stale = sorted({c for c in marker_counterparts(document.content) if c not in present})
        if stale:
            actions.append(PruneAction(target=doc_id, stale=stale))
    return actions


# Annotate


def plan_annotations(
    conflicts: list[ConflictFinding],
    documents: dict[str, RuleDocument],
    consumed: set[str],
) -> list[AnnotateAction]:
    """One Annotate per (target, counterpart), for both sides of each conflict.

    Targets already carrying the marker are skipped, as are pairs where either
    side was consumed by a Merge or Split in this run.
    """
    actions: list[AnnotateAction] = []
    planned: set[tuple[str, str]] = set()

    for finding in conflicts:
        if finding.rule_a in consumed or finding.rule_b in consumed:
            continue
        reason = conflict_reason(finding)
        for target, counterpart in ((finding.rule_a, finding.rule_b), (finding.rule_b, finding.rule_a)):
            if (target, counterpart) in planned:
                continue
            planned.add((target, counterpart))
            if has_conflict_marker(documents[target].content, counterpart):
                continue
            actions.append(AnnotateAction(target=target, conflicts_with=counterpart, reason=reason))

    return actions


def plan_remediation(
    scan: ScanResult,
    report: AuditReport,
    config: AuditConfig | None = None,
) -> tuple[list[RemediationAction], list[ManualReview]]:
    """Build the remediation plan for one audited directory.

    Args:
        scan: Documents the report was computed from.
        report: Audit findings.
        config: Thresholds and split settings (defaults to AuditConfig()).

    Returns:
        Tuple of (actions ordered Merge, Split, Prune, Annotate; redundant pairs left
        for manual review).
    """
    config = config or AuditConfig()
    documents = {document.id: document for document in scan.documents}

    with log_operation("plan", {"rules": len(documents)}):
        merges: list[MergeAction] = []
        manual_review: list[ManualReview] = []
        consumed: set[str] = set()

        for finding in report.redundancies:
            if not finding.auto_mergeable:
                manual_review.append(
                    ManualReview(
                        rule_a=finding.rule_a,
                        rule_b=finding.rule_b,
                        overlap_ratio=finding.overlap_ratio,
                        line_overlap=finding.line_overlap,
                    )
                )
                continue
            if finding.rule_a in consumed or finding.rule_b in consumed:
                logger.debug("Deferring merge of %s and %s", finding.rule_a, finding.rule_b)
                continue
            merges.append(plan_merge(finding, documents[finding.rule_a], documents[finding.rule_b]))
            consumed.update((finding.rule_a, finding.rule_b))

        splits: list[SplitAction] = []
        taken = set(documents) | {d.file for d in scan.diagnostics}
        if config.split:
            for document in scan.documents:
                if document.id in consumed:
                    continue
                action = plan_split(document, config.max_tokens, taken)
                if action:
                    splits.append(action)
                    taken.update(action.parts)
                    consumed.add(document.id)

        removed = {m.remove for m in merges} | {s.source for s in splits}
        prunes = plan_prunes(documents, consumed, taken - removed)
        annotations = plan_annotations(report.conflicts, documents, consumed)

        logger.info(
            "  %d merges, %d splits, %d prunes, %d annotations, %d for manual review",
            len(merges),
            len(splits),
            len(prunes),
            len(annotations),
            len(manual_review),
        )

    return [*merges, *splits, *prunes, *annotations], manual_review
