"""Activation scope resolution and glob overlap heuristics."""

import re

from rulewarden.analyzers.frontmatter import HeaderValue
from rulewarden.models.rules import ActivationScope

# *.ext with nothing before the wildcard
_SIMPLE_EXT_PATTERN = re.compile(r"^\*\.(\w+)$")
# Any pattern ending in *.ext (e.g. src/**/*.ts)
_TRAILING_EXT_PATTERN = re.compile(r"\*\.(\w+)$")
# Patterns that match every file
_UNIVERSAL_GLOBS = frozenset({"**/*", "**"})


def parse_globs(value: HeaderValue | None) -> list[str]:
    """Normalize a ``globs`` header value to a list of patterns.

    Accepts a YAML list, an inline array string (``["*.ts", "*.tsx"]``), a
    comma-separated string (``"*.ts, *.tsx"``) or a single pattern.
    """
    match value:
        case None | bool():
            return []
        case list():
            return [g.strip() for g in value if g.strip()]
        case str():
            text = value.strip()
            if text.startswith("[") and text.endswith("]"):
                text = text[1:-1]
            items = (item.strip().strip("\"'").strip() for item in text.split(","))
            return [item for item in items if item]


def resolve_scope(header: dict[str, HeaderValue] | None) -> ActivationScope:
    """Derive the activation tier and patterns from parsed header data.

    Args:
        header: Parsed header mapping (None or empty means no metadata).

    Returns:
        ActivationScope: ``always`` when alwaysApply is true, ``scoped`` when
        globs are present, ``manual`` otherwise.
    """
    header = header or {}
    if header.get("alwaysApply") is True:
        return ActivationScope(tier="always", patterns=[])

    patterns = parse_globs(header.get("globs"))
    if patterns:
        return ActivationScope(tier="scoped", patterns=patterns)
    return ActivationScope(tier="manual", patterns=[])


def globs_overlap(patterns_a: list[str], patterns_b: list[str]) -> bool:
    """Check whether two glob lists could plausibly match the same file.

    Heuristic, not a glob-set intersection. An empty list is unconditional
    and a recursive catch-all (``**/*`` or ``**``) overlaps any pattern.
    Symmetric in its arguments.
    """
    if not patterns_a or not patterns_b:
        return True

    for a in patterns_a:
        for b in patterns_b:
            if a == b or a in _UNIVERSAL_GLOBS or b in _UNIVERSAL_GLOBS:
                return True

            simple_a = _SIMPLE_EXT_PATTERN.match(a)
            simple_b = _SIMPLE_EXT_PATTERN.match(b)
            if simple_a and simple_b and simple_a.group(1) == simple_b.group(1):
                return True

            if "**" in a or "**" in b:
                trailing_a = _TRAILING_EXT_PATTERN.search(a)
                trailing_b = _TRAILING_EXT_PATTERN.search(b)
                if trailing_a and trailing_b and trailing_a.group(1) == trailing_b.group(1):
                    return True

    return False


def scopes_overlap(scope_a: ActivationScope | None, scope_b: ActivationScope | None) -> bool:
    """Check whether two rules can ever be active for the same file.

    A missing scope (absent or malformed header) never overlaps. An
    always-tier rule overlaps everything that has a scope. A manual-tier
    rule is only attached on request, so it overlaps nothing else.
    """
    if scope_a is None or scope_b is None:
        return False
    if scope_a.tier == "always" or scope_b.tier == "always":
        return True
    if scope_a.tier == "manual" or scope_b.tier == "manual":
        return False
    return globs_overlap(scope_a.patterns, scope_b.patterns)
