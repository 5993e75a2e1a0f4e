"""Curated table of commonly contradicted style choices.

Each entry pairs two regexes with a topic label. When one rule matches the
first pattern and another rule (with an overlapping scope) matches the second,
the rules contradict each other on that topic.

A second pattern may contain ``\\1``: it is replaced by the token captured by
group 1 of the first pattern, so "always use X" only pairs with "never use X"
for the same X.
"""

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import TypeAlias

BACKREFERENCE = r"\1"


@dataclass(frozen=True)
class ContradictionPattern:
    """One (pattern_a, pattern_b, topic) entry."""

    pattern_a: str
    pattern_b: str
    topic: str
    flags: int = field(default=re.IGNORECASE)

    @cached_property
    def regex_a(self) -> re.Pattern[str]:
        return re.compile(self.pattern_a, self.flags)

    @property
    def uses_backreference(self) -> bool:
        return BACKREFERENCE in self.pattern_b

    @cached_property
    def _static_regex_b(self) -> re.Pattern[str]:
        return re.compile(self.pattern_b, self.flags)

    def regex_b(self, captured: str | None = None) -> re.Pattern[str]:
        """Compile the second pattern, binding ``\\1`` to ``captured``."""
        if self.uses_backreference:
            if captured is None:
                raise ValueError(f"Pattern for {self.topic!r} needs a captured token")
            return re.compile(self.pattern_b.replace(BACKREFERENCE, re.escape(captured)), self.flags)
        return self._static_regex_b

    def match_pair(self, text_a: str, text_b: str) -> tuple[str, str] | None:
        """Return the matched snippets when text_a matches A and text_b matches B."""
        if self.uses_backreference:
            for match_a in self.regex_a.finditer(text_a):
                captured = match_a.group(1) if self.regex_a.groups else match_a.group(0)
                match_b = self.regex_b(captured).search(text_b)
                if match_b:
                    return match_a.group(0), match_b.group(0)
            return None

        match_a = self.regex_a.search(text_a)
        if not match_a:
            return None
        match_b = self.regex_b().search(text_b)
        if not match_b:
            return None
        return match_a.group(0), match_b.group(0)


PatternTable: TypeAlias = tuple[ContradictionPattern, ...]


def _p(pattern_a: str, pattern_b: str, topic: str) -> ContradictionPattern:
    return ContradictionPattern(pattern_a, pattern_b, topic)


DEFAULT_PATTERNS: PatternTable = (
    # Indentation
    _p(r"\buse\s+tabs\b", r"\buse\s+spaces\b", "indentation style"),
    _p(r"\btabs\s+for\s+indentation\b", r"\bspaces\s+for\s+indentation\b", "indentation style"),
    # Semicolons
    _p(r"\bsemicolons?\b.*\brequir", r"\bno\s+semicolons?\b", "semicolons"),
    _p(r"\balways\s+use\s+semicolons?\b", r"\bomit\s+semicolons?\b", "semicolons"),
    _p(r"\bsemicolons?\b.*\bmandatory\b", r"\bsemicolons?\b.*\boptional\b", "semicolons"),
    # Quotes
    _p(r"\bsingle\s+quotes?\b", r"\bdouble\s+quotes?\b", "quote style"),
    # Naming
    _p(r"\buse\s+camelCase\b", r"\buse\s+snake_case\b", "naming convention"),
    _p(r"\buse\s+camelCase\b", r"\buse\s+PascalCase\b", "naming convention"),
    _p(r"\buse\s+snake_case\b", r"\buse\s+PascalCase\b", "naming convention"),
    _p(r"\bcamelCase\b.*\bvariables?\b", r"\bsnake_case\b.*\bvariables?\b", "naming convention"),
    # React components
    _p(r"\buse\s+functional\s+components?\b", r"\buse\s+class\s+components?\b", "React component style"),
    _p(r"\bprefer\s+functional\s+components?\b", r"\bprefer\s+class\s+components?\b", "React component style"),
    _p(r"\bfunction\s+components?\b.*\bonly\b", r"\bclass\s+components?\b.*\bonly\b", "React component style"),
    # Async
    _p(r"\buse\s+async/await\b", r"\buse\s+callbacks?\b", "async pattern"),
    _p(r"\bprefer\s+async/await\b", r"\bprefer\s+promises?\b", "async pattern"),
    _p(r"\bprefer\s+async/await\b", r"\bprefer\s+callbacks?\b", "async pattern"),
    _p(r"\balways\s+use\s+promises?\b", r"\bavoid\s+promises?\b", "async pattern"),
    # TypeScript type definitions
    _p(r"\buse\s+interfaces?\b", r"\buse\s+types?\b", "TypeScript type definition"),
    _p(r"\bprefer\s+interfaces?\b", r"\bprefer\s+type\s+aliases?\b", "TypeScript type definition"),
    _p(r"\binterfaces?\b.*\bonly\b", r"\btypes?\b.*\bonly\b", "TypeScript type definition"),
    # Composition vs inheritance
    _p(r"\bprefer\s+composition\b", r"\bprefer\s+inheritance\b", "code organization pattern"),
    _p(r"\buse\s+composition\b", r"\buse\s+inheritance\b", "code organization pattern"),
    _p(r"\bfavor\s+composition\b", r"\bfavor\s+inheritance\b", "code organization pattern"),
    # File length
    _p(r"\bfiles?\s+under\s+100\s+lines?\b", r"\bfiles?\s+under\s+500\s+lines?\b", "file length limit"),
    _p(r"\bkeep\s+files?\s+under\s+100\b", r"\bkeep\s+files?\s+under\s+200\b", "file length limit"),
    _p(r"\bmax(?:imum)?\s+100\s+lines?\b", r"\bmax(?:imum)?\s+500\s+lines?\b", "file length limit"),
    # Parameter count
    _p(r"\bmax(?:imum)?\s+2\s+parameters?\b", r"\bmax(?:imum)?\s+5\s+parameters?\b", "parameter count limit"),
    _p(r"\bno\s+more\s+than\s+2\s+parameters?\b", r"\bno\s+more\s+than\s+4\s+parameters?\b", "parameter count limit"),
    # Same token, opposite instruction
    _p(r"\balways\s+use\s+(\w+)", r"\bnever\s+use\s+\1\b", "contradictory always/never"),
    _p(r"\bprefer\s+(\w+)", r"\bavoid\s+\1\b", "contradictory prefer/avoid"),
    _p(r"\brequire\s+(\w+)", r"\bforbid\s+\1\b", "contradictory require/forbid"),
    # Comments
    _p(r"\balways\s+add\s+comments?\b", r"\bavoid\s+comments?\b", "code comments"),
    _p(r"\balways\s+add\s+comments?\b", r"\bno\s+comments?\b", "code comments"),
    # Exports
    _p(r"\buse\s+default\s+exports?\b", r"\buse\s+named\s+exports?\b", "export style"),
    _p(r"\bprefer\s+default\s+exports?\b", r"\bprefer\s+named\s+exports?\b", "export style"),
    _p(r"\bexport\s+default\b.*\bonly\b", r"\bnamed\s+exports?\b.*\bonly\b", "export style"),
    # const vs let
    _p(r"\bprefer\s+const\b", r"\bprefer\s+let\b", "variable declaration"),
    _p(r"\balways\s+use\s+const\b", r"\bavoid\s+const\b", "variable declaration"),
    # Function syntax
    _p(r"\buse\s+arrow\s+functions?\b", r"\buse\s+function\s+declarations?\b", "function syntax"),
    _p(r"\bprefer\s+arrow\s+functions?\b", r"\bavoid\s+arrow\s+functions?\b", "function syntax"),
    # Documentation
    _p(r"\bdocument\s+everything\b", r"\bself-documenting\s+code\b", "documentation approach"),
    _p(r"\brequire\s+JSDoc\b", r"\bavoid\s+JSDoc\b", "documentation approach"),
)
