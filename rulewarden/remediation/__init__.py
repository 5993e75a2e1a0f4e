"""Remediation: plan and apply merges, splits, marker pruning and conflict annotations."""

from pathlib import Path

from rulewarden.analyzers.audit import audit_scan
from rulewarden.analyzers.loader import load_rule_documents
from rulewarden.analyzers.markers import MARKER_PREFIX, conflict_marker
from rulewarden.analyzers.patterns import DEFAULT_PATTERNS, PatternTable
from rulewarden.config import AuditConfig
from rulewarden.logging import log_operation
from rulewarden.models.rules import RemediationReport
from rulewarden.remediation.planner import (
    merge_bodies,
    plan_remediation,
    split_body,
)
from rulewarden.remediation.writer import RemediationError, apply_actions, atomic_write


def run_remediation(
    rules_dir: Path | str,
    dry_run: bool = False,
    config: AuditConfig | None = None,
    patterns: PatternTable = DEFAULT_PATTERNS,
) -> RemediationReport:
    """Audit a rules directory, plan remediation, and apply it.

    Args:
        rules_dir: Directory containing ``*.mdc`` rule files.
        dry_run: If True, report the plan without touching the filesystem.
        config: Thresholds and split settings (defaults to AuditConfig()).
        patterns: Contradiction table used for conflict detection.

    Returns:
        RemediationReport with the audit, per-action outcomes and the pairs
        left for manual review.

    Raises:
        ValueError: If rules_dir is not a directory.
    """
    config = config or AuditConfig()
    with log_operation("fix", {"rules_dir": rules_dir, "dry_run": dry_run}):
        scan = load_rule_documents(Path(rules_dir))
        audit = audit_scan(scan, config, patterns)
        actions, manual_review = plan_remediation(scan, audit, config)
        outcomes = apply_actions(actions, scan.rules_dir, dry_run=dry_run)

    return RemediationReport(
        rules_dir=str(scan.rules_dir),
        dry_run=dry_run,
        outcomes=outcomes,
        manual_review=manual_review,
        audit=audit,
    )


__all__ = [
    "MARKER_PREFIX",
    "RemediationError",
    "apply_actions",
    "atomic_write",
    "conflict_marker",
    "merge_bodies",
    "plan_remediation",
    "run_remediation",
    "split_body",
]
