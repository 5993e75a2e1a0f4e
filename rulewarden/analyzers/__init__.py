"""Analyzers for rule conflicts and redundancy."""

from rulewarden.analyzers.audit import audit_rules, audit_scan, build_clusters
from rulewarden.analyzers.conflicts import (
    detect_conflicts,
    detect_directive_conflicts,
    detect_pattern_conflicts,
)
from rulewarden.analyzers.directives import Directive, extract_directives
from rulewarden.analyzers.frontmatter import (
    FrontmatterResult,
    HeaderValue,
    parse_frontmatter,
    split_header,
)
from rulewarden.analyzers.loader import (
    RuleDocument,
    ScanResult,
    build_rule_document,
    estimate_tokens,
    load_rule_documents,
)
from rulewarden.analyzers.patterns import DEFAULT_PATTERNS, ContradictionPattern, PatternTable
from rulewarden.analyzers.redundancy import compare_bodies, line_overlap, similarity
from rulewarden.analyzers.scope import globs_overlap, resolve_scope, scopes_overlap

__all__ = [
    # Audit
    "audit_rules",
    "audit_scan",
    "build_clusters",
    # Header parsing
    "FrontmatterResult",
    "HeaderValue",
    "parse_frontmatter",
    "split_header",
    # Loading
    "RuleDocument",
    "ScanResult",
    "build_rule_document",
    "estimate_tokens",
    "load_rule_documents",
    # Scope
    "globs_overlap",
    "resolve_scope",
    "scopes_overlap",
    # Directives and conflicts
    "Directive",
    "extract_directives",
    "detect_conflicts",
    "detect_directive_conflicts",
    "detect_pattern_conflicts",
    "ContradictionPattern",
    "DEFAULT_PATTERNS",
    "PatternTable",
    # Redundancy
    "compare_bodies",
    "line_overlap",
    "similarity",
]
