"""Conflict detection between pairs of rule documents.

Two sources of evidence:
- directive conflicts: opposing verbs on the same single-token subject
- pattern conflicts: a curated table of contradictory phrasings by topic

Pairs whose activation scopes never overlap cannot conflict.
"""

from rulewarden.analyzers.loader import RuleDocument
from rulewarden.analyzers.patterns import DEFAULT_PATTERNS, PatternTable
from rulewarden.analyzers.scope import scopes_overlap
from rulewarden.models.rules import ConflictFinding


def detect_directive_conflicts(rule_a: RuleDocument, rule_b: RuleDocument) -> list[ConflictFinding]:
    """Find opposing directive pairs between two rules.

    Every opposing (dA, dB) combination is reported, so repeated directives
    produce repeated findings.
    """
    findings: list[ConflictFinding] = []
    for d_a in rule_a.directives:
        for d_b in rule_b.directives:
            if not d_a.opposes(d_b):
                continue
            findings.append(
                ConflictFinding(
                    rule_a=rule_a.id,
                    rule_b=rule_b.id,
                    kind="directive_conflict",
                    subject=d_a.subject,
                    snippet_a=str(d_a),
                    snippet_b=str(d_b),
                    detail=(
                        f"Conflicting rules: {rule_a.id} says \"{d_a}\" "
                        f"but {rule_b.id} says \"{d_b}\""
                    ),
                )
            )
    return findings


def _pattern_finding(
    rule_a: RuleDocument,
    rule_b: RuleDocument,
    topic: str,
    text_a: str,
    text_b: str,
) -> ConflictFinding:
    return ConflictFinding(
        rule_a=rule_a.id,
        rule_b=rule_b.id,
        kind="pattern_conflict",
        topic=topic,
        snippet_a=text_a,
        snippet_b=text_b,
        detail=(
            f"Semantic conflict in {topic}: {rule_a.id} says \"{text_a}\" "
            f"but {rule_b.id} says \"{text_b}\""
        ),
    )


def detect_pattern_conflicts(
    rule_a: RuleDocument,
    rule_b: RuleDocument,
    patterns: PatternTable = DEFAULT_PATTERNS,
) -> list[ConflictFinding]:
    """Match the contradiction table against two rule bodies.

    Each entry is tried in both assignments (A/B and B/A). At most one finding
    is emitted per topic for the pair.
    """
    findings: list[ConflictFinding] = []
    reported_topics: set[str] = set()

    for entry in patterns:
        if entry.topic in reported_topics:
            continue

        forward = entry.match_pair(rule_a.text, rule_b.text)
        if forward:
            findings.append(_pattern_finding(rule_a, rule_b, entry.topic, *forward))
            reported_topics.add(entry.topic)
            continue

        reverse = entry.match_pair(rule_b.text, rule_a.text)
        if reverse:
            text_b, text_a = reverse
            findings.append(_pattern_finding(rule_a, rule_b, entry.topic, text_a, text_b))
            reported_topics.add(entry.topic)

    return findings


def detect_conflicts(
    rule_a: RuleDocument,
    rule_b: RuleDocument,
    patterns: PatternTable = DEFAULT_PATTERNS,
) -> list[ConflictFinding]:
    """Detect all conflicts between two rules.

    Args:
        rule_a: Rule earlier in scan order.
        rule_b: Rule later in scan order.
        patterns: Contradiction table (defaults to the curated table).

    Returns:
        Directive conflicts followed by pattern conflicts, in detection order.
        Empty when the rules' scopes cannot overlap or either header is
        missing or malformed.
    """
    if not scopes_overlap(rule_a.scope, rule_b.scope):
        return []

    return detect_directive_conflicts(rule_a, rule_b) + detect_pattern_conflicts(
        rule_a, rule_b, patterns
    )
