"""Normative directive extraction from rule bodies.

Recognizes "always use X", "never use X", "do not use X", "prefer X" and
"avoid X". The subject is only the single token after the trigger; multi-word
contradictions are left to the pattern table.
"""

import re
import string
from dataclasses import dataclass
from typing import Literal

DirectiveVerb = Literal["require", "forbid", "prefer", "avoid"]

_TRIGGER_VERBS: dict[str, DirectiveVerb] = {
    "always use": "require",
    "never use": "forbid",
    "do not use": "forbid",
    "prefer": "prefer",
    "avoid": "avoid",
}

DIRECTIVE_PATTERN = re.compile(
    r"\b(?P<trigger>always\s+use|never\s+use|do\s+not\s+use|prefer|avoid)\s+(?P<subject>\S+)"
)

# Which verbs each verb contradicts on the same subject
OPPOSING_VERBS: dict[DirectiveVerb, frozenset[DirectiveVerb]] = {
    "require": frozenset({"forbid", "avoid"}),
    "forbid": frozenset({"require", "prefer"}),
    "prefer": frozenset({"forbid"}),
    "avoid": frozenset({"require"}),
}


@dataclass(frozen=True)
class Directive:
    """One normative instruction found in a rule body."""

    verb: DirectiveVerb
    subject: str

    def opposes(self, other: "Directive") -> bool:
        """True when both address the same subject with contradictory verbs."""
        return self.subject == other.subject and other.verb in OPPOSING_VERBS[self.verb]

    def __str__(self) -> str:
        return f"{self.verb} {self.subject}"


def normalize_subject(token: str) -> str:
    """Lower-case a subject token and strip surrounding punctuation."""
    return token.lower().strip().strip(string.punctuation).strip()


def extract_directives(body: str) -> list[Directive]:
    """Extract (verb, subject) directives from a rule body.

    Args:
        body: Rule body with the header removed.

    Returns:
        Directives in order of appearance. Repeats are kept.
    """
    directives: list[Directive] = []
    for match in DIRECTIVE_PATTERN.finditer(body.lower()):
        subject = normalize_subject(match.group("subject"))
        if not subject:
            continue
        trigger = " ".join(match.group("trigger").split())
        directives.append(Directive(verb=_TRIGGER_VERBS[trigger], subject=subject))
    return directives
