"""Whole-directory audit: pairwise conflicts, redundancy and glob overlap.

Reads every rule once, then compares each pair in scan order so that
``rule_a`` of any finding always precedes ``rule_b``.
"""

from itertools import combinations
from math import comb
from pathlib import Path

import networkx as nx

from rulewarden.analyzers.conflicts import detect_conflicts
from rulewarden.analyzers.loader import RuleDocument, ScanResult, load_rule_documents
from rulewarden.analyzers.patterns import DEFAULT_PATTERNS, PatternTable
from rulewarden.analyzers.redundancy import compare_bodies
from rulewarden.analyzers.scope import parse_globs
from rulewarden.config import AuditConfig
from rulewarden.logging import log_operation, logger, progress_bar
from rulewarden.models.rules import (
    AuditReport,
    ConflictFinding,
    GlobOverlapNote,
    RedundancyFinding,
)


def find_glob_overlap(rule_a: RuleDocument, rule_b: RuleDocument) -> GlobOverlapNote | None:
    """Flag two always-apply rules that also list the same globs.

    The globs are ignored for always-apply rules, so identical lists usually
    mean one rule was copied from the other.
    """
    if not (rule_a.scope and rule_b.scope):
        return None
    if rule_a.scope.tier != "always" or rule_b.scope.tier != "always":
        return None

    globs_a = parse_globs(rule_a.header.get("globs"))
    globs_b = parse_globs(rule_b.header.get("globs"))
    if not globs_a or sorted(globs_a) != sorted(globs_b):
        return None
    return GlobOverlapNote(rule_a=rule_a.id, rule_b=rule_b.id, shared_globs=sorted(globs_a))


def build_clusters(
    conflicts: list[ConflictFinding],
    redundancies: list[RedundancyFinding],
) -> list[list[str]]:
    """Group rules connected by any conflict or redundancy finding.

    Returns:
        Sorted rule-id groups of two or more, largest first.
    """
    G = nx.Graph()
    for finding in [*conflicts, *redundancies]:
        G.add_edge(finding.rule_a, finding.rule_b)

    clusters = [sorted(component) for component in nx.connected_components(G)]
    clusters.sort(key=lambda group: (-len(group), group))
    return clusters


def audit_scan(
    scan: ScanResult,
    config: AuditConfig | None = None,
    patterns: PatternTable = DEFAULT_PATTERNS,
) -> AuditReport:
    """Audit documents that were already read from disk.

    Args:
        scan: Result of load_rule_documents.
        config: Thresholds (defaults to AuditConfig()).
        patterns: Contradiction table used for pattern conflicts.

    Returns:
        AuditReport with findings in scan order.
    """
    config = config or AuditConfig()
    documents = scan.documents

    conflicts: list[ConflictFinding] = []
    redundancies: list[RedundancyFinding] = []
    glob_overlaps: list[GlobOverlapNote] = []

    pairs = combinations(documents, 2)
    for rule_a, rule_b in progress_bar(
        pairs, desc="Comparing rules", total=comb(len(documents), 2), unit="pairs"
    ):
        conflicts.extend(detect_conflicts(rule_a, rule_b, patterns))

        redundancy = compare_bodies(rule_a.id, rule_a.text, rule_b.id, rule_b.text, config)
        if redundancy:
            redundancies.append(redundancy)

        note = find_glob_overlap(rule_a, rule_b)
        if note:
            glob_overlaps.append(note)

    logger.info(
        "  %d rules, %d conflicts, %d redundant pairs",
        len(documents),
        len(conflicts),
        len(redundancies),
    )

    return AuditReport(
        rules_dir=str(scan.rules_dir),
        documents=[document.to_summary() for document in documents],
        diagnostics=list(scan.diagnostics),
        conflicts=conflicts,
        redundancies=redundancies,
        glob_overlaps=glob_overlaps,
        clusters=build_clusters(conflicts, redundancies),
    )


def audit_rules(
    rules_dir: Path | str,
    config: AuditConfig | None = None,
    patterns: PatternTable = DEFAULT_PATTERNS,
) -> AuditReport:
    """Scan a rules directory and report conflicts and redundancy.

    Args:
        rules_dir: Directory containing ``*.mdc`` rule files.
        config: Thresholds (defaults to AuditConfig()).
        patterns: Contradiction table used for pattern conflicts.

    Returns:
        AuditReport.

    Raises:
        ValueError: If rules_dir is not a directory.
    """
    with log_operation("audit", {"rules_dir": rules_dir}):
        scan = load_rule_documents(Path(rules_dir))
        return audit_scan(scan, config, patterns)
