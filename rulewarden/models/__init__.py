"""Pydantic models for audit findings and remediation actions."""

from rulewarden.models.rules import (
    ActionOutcome,
    ActivationScope,
    AnnotateAction,
    AuditReport,
    ConflictFinding,
    DocumentSummary,
    GlobOverlapNote,
    ManualReview,
    MergeAction,
    PruneAction,
    ReadDiagnostic,
    RedundancyFinding,
    RemediationAction,
    RemediationReport,
    SplitAction,
)

__all__ = [
    "ActionOutcome",
    "ActivationScope",
    "AnnotateAction",
    "AuditReport",
    "ConflictFinding",
    "DocumentSummary",
    "GlobOverlapNote",
    "ManualReview",
    "MergeAction",
    "PruneAction",
    "ReadDiagnostic",
    "RedundancyFinding",
    "RemediationAction",
    "RemediationReport",
    "SplitAction",
]
