"""Rules audit handler.

Handler for audit_rules tool:
- Resolves the rules directory (custom path or .cursor/rules)
- Runs the pairwise conflict and redundancy scan
- Returns the audit report with summary counts
"""

import asyncio
import json
from pathlib import Path
from typing import Any

from rulewarden.analyzers import audit_rules
from rulewarden.config import AuditConfig


def _repo_path(arguments: dict[str, Any]) -> Path:
    repo_path_str = arguments.get("repo_path")
    if not repo_path_str:
        raise ValueError("repo_path is required")

    repo_path = Path(repo_path_str)
    if not repo_path.is_dir():
        raise ValueError(f"repo_path is not a directory: {repo_path}")
    return repo_path


def _discover_rules_path(repo_path: Path, custom_path: str | None) -> Path | None:
    """Resolve the rules directory, relative paths against repo_path."""
    if custom_path:
        path = Path(custom_path)
        if not path.is_absolute():
            path = repo_path / path
    else:
        path = repo_path / ".cursor" / "rules"
    return path if path.is_dir() else None


def _no_rules_response(repo_path: Path, custom_path: str | None) -> str:
    searched = custom_path or str(repo_path / ".cursor" / "rules")
    return json.dumps(
        {
            "error": "No rules found",
            "searched": searched,
            "recommendation": "Create rules in .cursor/rules/ or pass custom_rules_path",
        },
        indent=2,
    )


async def handle_audit_rules(arguments: dict[str, Any]) -> str:
    """Handle audit_rules tool call.

    Args:
        arguments: Tool arguments with repo_path and optional custom_rules_path.

    Returns:
        JSON string with the audit report.

    Raises:
        ValueError: If repo_path is not provided or is not a directory.
    """
    repo_path = _repo_path(arguments)
    custom_path = arguments.get("custom_rules_path")

    rules_dir = _discover_rules_path(repo_path, custom_path)
    if rules_dir is None:
        return _no_rules_response(repo_path, custom_path)

    config = AuditConfig.from_env()
    report = await asyncio.to_thread(audit_rules, rules_dir, config)

    result = report.model_dump(mode="json")
    result["summary"] = report.summary()
    return json.dumps(result, indent=2)
