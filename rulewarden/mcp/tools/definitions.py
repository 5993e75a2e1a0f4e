"""MCP Tool schema definitions.

Contains all Tool objects that define the MCP interface for rulewarden.
Each Tool specifies its name, description, and JSON schema for inputs.
"""

from mcp.types import Tool

_REPO_PATH = {
    "type": "string",
    "description": "Absolute path to the repository whose rules are checked",
}

_CUSTOM_RULES_PATH = {
    "type": "string",
    "description": (
        "Custom path to the rules directory (default: .cursor/rules). "
        "Can be absolute or relative to repo_path."
    ),
}

AUDIT_RULES_TOOL = Tool(
    name="audit_rules",
    description=(
        "Audit .mdc rule files for contradictory and duplicated guidance. "
        "Only rules whose activation scopes (alwaysApply / globs) overlap are checked for conflicts. "
        "Reports directive conflicts (e.g. 'always use X' vs 'never use X'), "
        "topic conflicts (tabs vs spaces, single vs double quotes, ...), "
        "redundant rule pairs with similarity scores, header errors and unreadable files. "
        "Read-only."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "repo_path": _REPO_PATH,
            "custom_rules_path": _CUSTOM_RULES_PATH,
        },
        "required": ["repo_path"],
    },
)

FIX_RULES_TOOL = Tool(
    name="fix_rules",
    description=(
        "Plan or apply remediation for .mdc rule files: merge near-duplicate rules into the "
        "broader-scoped one, split rules over the token budget at ## headings, and insert a "
        "review marker into both sides of every conflict. Markers naming rules that no longer "
        "exist are removed. "
        "Dry run by default; pass dry_run=false to write changes."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "repo_path": _REPO_PATH,
            "custom_rules_path": _CUSTOM_RULES_PATH,
            "dry_run": {
                "type": "boolean",
                "default": True,
                "description": "Only report the plan without changing files (default: true)",
            },
            "max_tokens": {
                "type": "integer",
                "minimum": 1,
                "description": "Split rules estimated above this many tokens (default: 1500)",
            },
            "split": {
                "type": "boolean",
                "default": True,
                "description": "Split oversized rules (default: true)",
            },
        },
        "required": ["repo_path"],
    },
)

ALL_TOOLS = [
    AUDIT_RULES_TOOL,
    FIX_RULES_TOOL,
]

__all__ = [
    "AUDIT_RULES_TOOL",
    "FIX_RULES_TOOL",
    "ALL_TOOLS",
]
