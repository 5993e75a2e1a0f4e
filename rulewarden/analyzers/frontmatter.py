"""Frontmatter parsing for .mdc rule documents.

This is deliberately NOT a YAML parser. It understands exactly the subset rule
headers use:

- flat scalar lines ``key: value`` (``true``/``false`` become booleans, values
  wrapped in matching double or single quotes are unwrapped)
- list-opening lines ``key:`` followed by indented ``- item`` lines (one level)

Anything else inside the header is either skipped (blank lines, comments,
lines without a colon) or reported as an indentation error.
"""

import re
from dataclasses import dataclass
from typing import TypeAlias

# Header values are a closed union; consumers match on bool / str / list.
HeaderValue: TypeAlias = bool | str | list[str]

# Opening delimiter, optional key/value lines, closing delimiter on its own line
HEADER_PATTERN = re.compile(r"\A---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)

LIST_ITEM_PATTERN = re.compile(r"^\s+-\s+")
INDENTED_LINE_PATTERN = re.compile(r"^\s+\S")

KNOWN_KEYS = ("description", "globs", "alwaysApply")

INDENTATION_ERROR = "Invalid YAML indentation"


@dataclass
class FrontmatterResult:
    """Outcome of parsing a document header.

    ``found`` is True whenever a delimited header block exists, even if its
    contents failed to parse (then ``data`` is None and ``error`` is set).
    """

    found: bool
    data: dict[str, HeaderValue] | None = None
    error: str | None = None

    @property
    def usable(self) -> bool:
        """True when the header parsed cleanly."""
        return self.found and self.data is not None and self.error is None


def normalize_newlines(content: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return content.replace("\r\n", "\n").replace("\r", "\n")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _coerce_scalar(raw: str) -> HeaderValue:
    if raw == "true":
        return True
    if raw == "false":
        return False
    return _unquote(raw)


def parse_frontmatter(content: str) -> FrontmatterResult:
    """Parse the metadata header at the top of a rule document.

    Args:
        content: Raw document text (any line endings).

    Returns:
        FrontmatterResult. A malformed indentation (an indented non-list line
        whose previous line does not end with ``:``) yields ``error`` rather
        than a partial mapping.
    """
    match = HEADER_PATTERN.match(normalize_newlines(content))
    if not match:
        return FrontmatterResult(found=False)

    data: dict[str, HeaderValue] = {}
    header_text = match.group(1)
    lines = header_text.split("\n") if header_text is not None else []

    current_key: str | None = None
    current_list: list[str] | None = None

    for i, line in enumerate(lines):
        if LIST_ITEM_PATTERN.match(line):
            if current_key is not None and current_list is not None:
                current_list.append(_unquote(LIST_ITEM_PATTERN.sub("", line, count=1).strip()))
            continue

        # Any non-item line closes a pending list
        if current_key is not None and current_list is not None:
            data[current_key] = current_list
            current_key = None
            current_list = None

        if INDENTED_LINE_PATTERN.match(line) and i > 0:
            if not lines[i - 1].rstrip().endswith(":"):
                return FrontmatterResult(found=True, data=None, error=INDENTATION_ERROR)

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        colon_idx = line.find(":")
        if colon_idx == -1:
            continue

        key = line[:colon_idx].strip()
        raw_value = line[colon_idx + 1 :].strip()

        if raw_value == "":
            current_key = key
            current_list = []
        else:
            data[key] = _coerce_scalar(raw_value)

    if current_key is not None and current_list is not None:
        data[current_key] = current_list

    return FrontmatterResult(found=True, data=data, error=None)


def split_header(content: str) -> tuple[str, str]:
    """Split a document into its raw header block and body.

    The header block keeps its delimiters and trailing newline so it can be
    written back verbatim. Documents without a header return ``("", content)``.

    Args:
        content: Document text (newlines are normalized first).

    Returns:
        Tuple of (header_block, body).
    """
    normalized = normalize_newlines(content)
    match = HEADER_PATTERN.match(normalized)
    if not match:
        return "", normalized
    header = match.group(0)
    if not header.endswith("\n"):
        header += "\n"
    return header, normalized[match.end() :]


def unknown_keys(data: dict[str, HeaderValue] | None) -> list[str]:
    """Return header keys outside the recognized set, in header order."""
    if not data:
        return []
    return [key for key in data if key not in KNOWN_KEYS]
