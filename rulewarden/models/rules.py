"""Data models for rule audit findings and remediation actions.

Pydantic models are what callers (CLI, MCP tools) serialize; the engine's
internal parse results live in plain dataclasses next to the analyzers.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

ActivationTier = Literal["always", "scoped", "manual"]


class ActivationScope(BaseModel):
    """When a rule is injected into the assistant's context."""

    tier: ActivationTier = Field(description="always, scoped (glob-matched) or manual")
    patterns: list[str] = Field(
        default_factory=list, description="Glob patterns (empty for always and manual tiers)"
    )

    model_config = {"frozen": True}


class ConflictFinding(BaseModel):
    """Two rules with overlapping scopes that give contradictory guidance."""

    rule_a: str = Field(description="Rule earlier in scan order")
    rule_b: str = Field(description="Rule later in scan order")
    kind: Literal["directive_conflict", "pattern_conflict"]
    detail: str = Field(description="Human-readable explanation")
    topic: str | None = Field(default=None, description="Pattern table topic (pattern conflicts)")
    subject: str | None = Field(default=None, description="Directive subject (directive conflicts)")
    snippet_a: str = Field(description="Text matched in rule_a")
    snippet_b: str = Field(description="Text matched in rule_b")
    severity: Literal["error"] = "error"


class RedundancyFinding(BaseModel):
    """Two rules whose bodies overlap enough to be duplicative."""

    rule_a: str
    rule_b: str
    overlap_ratio: float = Field(ge=0.0, le=1.0, description="Body similarity (substring or Jaccard)")
    line_overlap: float = Field(ge=0.0, le=1.0, description="Shared non-trivial lines / smaller line set")
    shared_lines: int = Field(default=0, description="Number of identical non-trivial lines")
    near_duplicate: bool = Field(default=False, description="Similarity at or above the near-duplicate bar")
    auto_mergeable: bool = Field(default=False, description="Both signals clear the auto-merge bar")
    severity: Literal["warning"] = "warning"

    @property
    def overlap_pct(self) -> int:
        """Similarity as a rounded percentage."""
        return round(self.overlap_ratio * 100)


class GlobOverlapNote(BaseModel):
    """Two always-apply rules that list the same glob patterns."""

    rule_a: str
    rule_b: str
    shared_globs: list[str]
    severity: Literal["warning"] = "warning"


class ReadDiagnostic(BaseModel):
    """A rule file that could not be read and was excluded from analysis."""

    file: str
    error: str


class DocumentSummary(BaseModel):
    """Per-document facts surfaced in the audit report."""

    file: str
    scope: ActivationScope | None = Field(
        default=None, description="None when the header is missing or malformed"
    )
    header_error: str | None = None
    has_header: bool = True
    directive_count: int = 0
    unknown_keys: list[str] = Field(default_factory=list)
    estimated_tokens: int = 0


class AuditReport(BaseModel):
    """Everything one scan of a rules directory found."""

    rules_dir: str
    documents: list[DocumentSummary] = Field(default_factory=list)
    diagnostics: list[ReadDiagnostic] = Field(default_factory=list)
    conflicts: list[ConflictFinding] = Field(default_factory=list)
    redundancies: list[RedundancyFinding] = Field(default_factory=list)
    glob_overlaps: list[GlobOverlapNote] = Field(default_factory=list)
    clusters: list[list[str]] = Field(
        default_factory=list, description="Groups of rules linked by conflicts or redundancy"
    )

    def summary(self) -> dict[str, int]:
        """Counts for report headers and exit codes."""
        return {
            "rules_analyzed": len(self.documents),
            "unreadable": len(self.diagnostics),
            "conflicts": len(self.conflicts),
            "redundancies": len(self.redundancies),
            "errors": len(self.conflicts),
            "warnings": len(self.redundancies) + len(self.glob_overlaps),
        }


# Remediation actions. Content the writer needs is carried on the action but
# excluded from serialization.


class MergeAction(BaseModel):
    """Fold ``remove`` into ``keep`` and delete ``remove``."""

    kind: Literal["merge"] = "merge"
    keep: str
    remove: str
    overlap_ratio: float
    line_overlap: float
    lines_added: int = 0
    merged_content: str = Field(default="", exclude=True, repr=False)
    original_content: str = Field(default="", exclude=True, repr=False)

    @property
    def overlap_pct(self) -> int:
        return round(self.overlap_ratio * 100)


class SplitAction(BaseModel):
    """Replace ``source`` with several smaller part files."""

    kind: Literal["split"] = "split"
    source: str
    parts: list[str]
    estimated_tokens: int = 0
    part_contents: list[str] = Field(default_factory=list, exclude=True, repr=False)


class AnnotateAction(BaseModel):
    """Insert a conflict marker into ``target`` naming ``conflicts_with``."""

    kind: Literal["annotate"] = "annotate"
    target: str
    conflicts_with: str
    reason: str


class PruneAction(BaseModel):
    """Drop conflict markers in ``target`` that name rules which no longer exist."""

    kind: Literal["prune"] = "prune"
    target: str
    stale: list[str]


RemediationAction = Annotated[
    MergeAction | SplitAction | PruneAction | AnnotateAction,
    Field(discriminator="kind"),
]


class ActionOutcome(BaseModel):
    """Result of applying (or planning, in dry run) one action."""

    action: RemediationAction
    status: Literal["applied", "planned", "skipped", "failed"]
    error: str | None = None


class ManualReview(BaseModel):
    """A redundant pair that did not clear the auto-merge bar."""

    rule_a: str
    rule_b: str
    overlap_ratio: float
    line_overlap: float
    reason: str = "manual review needed"


class RemediationReport(BaseModel):
    """Plan and outcome of one remediation run."""

    rules_dir: str
    dry_run: bool
    outcomes: list[ActionOutcome] = Field(default_factory=list)
    manual_review: list[ManualReview] = Field(default_factory=list)
    audit: AuditReport = Field(description="Findings the plan was built from")

    @property
    def failed(self) -> list[ActionOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == "failed"]

    def summary(self) -> dict[str, int]:
        counts = {"merged": 0, "split": 0, "pruned": 0, "annotated": 0, "failed": 0, "skipped": 0}
        for outcome in self.outcomes:
            if outcome.status == "failed":
                counts["failed"] += 1
                continue
            if outcome.status == "skipped":
                counts["skipped"] += 1
                continue
            key = {"merge": "merged", "split": "split", "prune": "pruned", "annotate": "annotated"}[
                outcome.action.kind
            ]
            counts[key] += 1
        counts["manual_review"] = len(self.manual_review)
        counts["conflicts"] = len(self.audit.conflicts)
        return counts
