"""Reading a rules directory into analyzable documents.

Every scan reads all rule files fresh; nothing is cached between runs.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path

from rulewarden.analyzers.directives import Directive, extract_directives
from rulewarden.analyzers.frontmatter import (
    FrontmatterResult,
    HeaderValue,
    normalize_newlines,
    parse_frontmatter,
    split_header,
    unknown_keys,
)
from rulewarden.analyzers.markers import strip_conflict_markers
from rulewarden.analyzers.scope import resolve_scope
from rulewarden.logging import logger
from rulewarden.models.rules import ActivationScope, DocumentSummary, ReadDiagnostic

RULE_SUFFIX = ".mdc"


def estimate_tokens(text: str) -> int:
    """Estimate token count (rough approximation: ~4 chars per token)."""
    return math.ceil(len(text) / 4)


@dataclass
class RuleDocument:
    """One rule file, parsed.

    ``scope`` is None when the header is missing or malformed; such documents
    are skipped by conflict detection but still compared for redundancy.
    """

    id: str  # Path relative to the rules directory
    path: Path
    content: str  # Newline-normalized file text
    header_block: str  # Raw header including delimiters ("" when absent)
    body: str
    frontmatter: FrontmatterResult
    scope: ActivationScope | None = None
    directives: list[Directive] = field(default_factory=list)

    @property
    def header(self) -> dict[str, HeaderValue]:
        return self.frontmatter.data or {}

    @property
    def text(self) -> str:
        """Body without conflict review markers; what the analyzers compare."""
        return strip_conflict_markers(self.body)

    @property
    def analyzable(self) -> bool:
        """True when scope and directives were derived."""
        return self.scope is not None

    @property
    def estimated_tokens(self) -> int:
        return estimate_tokens(self.content)

    def to_summary(self) -> DocumentSummary:
        return DocumentSummary(
            file=self.id,
            scope=self.scope,
            header_error=self.frontmatter.error,
            has_header=self.frontmatter.found,
            directive_count=len(self.directives),
            unknown_keys=unknown_keys(self.frontmatter.data),
            estimated_tokens=self.estimated_tokens,
        )


def build_rule_document(doc_id: str, path: Path, content: str) -> RuleDocument:
    """Parse raw file text into a RuleDocument.

    Args:
        doc_id: Stable identifier (relative path).
        path: Absolute path on disk.
        content: Raw file text.

    Returns:
        RuleDocument with scope/directives filled in when the header is usable.
    """
    normalized = normalize_newlines(content)
    frontmatter = parse_frontmatter(normalized)
    header_block, body = split_header(normalized)

    document = RuleDocument(
        id=doc_id,
        path=path,
        content=normalized,
        header_block=header_block,
        body=body,
        frontmatter=frontmatter,
    )

    if frontmatter.usable:
        document.scope = resolve_scope(frontmatter.data)
        document.directives = extract_directives(document.text)
    elif frontmatter.error:
        logger.debug("Header parse error in %s: %s", doc_id, frontmatter.error)

    return document


@dataclass
class ScanResult:
    """Documents read from a rules directory plus files that could not be read."""

    rules_dir: Path
    documents: list[RuleDocument] = field(default_factory=list)
    diagnostics: list[ReadDiagnostic] = field(default_factory=list)

    def get(self, doc_id: str) -> RuleDocument | None:
        for document in self.documents:
            if document.id == doc_id:
                return document
        return None


def load_rule_documents(rules_dir: Path) -> ScanResult:
    """Read every ``*.mdc`` file directly inside ``rules_dir``.

    Files are processed in sorted name order, which defines scan order for
    deterministic findings. Unreadable files become diagnostics instead of
    aborting the scan.

    Args:
        rules_dir: Directory holding rule files.

    Returns:
        ScanResult with parsed documents and read diagnostics.

    Raises:
        ValueError: If rules_dir is not a directory.
    """
    rules_dir = Path(rules_dir)
    if not rules_dir.is_dir():
        raise ValueError(f"rules directory not found: {rules_dir}")

    result = ScanResult(rules_dir=rules_dir)

    for filepath in sorted(rules_dir.glob(f"*{RULE_SUFFIX}")):
        if not filepath.is_file():
            continue
        doc_id = filepath.relative_to(rules_dir).as_posix()
        try:
            content = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s: %s", doc_id, e)
            result.diagnostics.append(ReadDiagnostic(file=doc_id, error=f"Cannot read file: {e}"))
            continue

        result.documents.append(build_rule_document(doc_id, filepath, content))

    return result
