"""Rules remediation handler (fix_rules tool)."""

import asyncio
import json
from typing import Any

from rulewarden.config import AuditConfig
from rulewarden.mcp.tools.handlers.rules_audit import (
    _discover_rules_path,
    _no_rules_response,
    _repo_path,
)
from rulewarden.remediation import run_remediation


async def handle_fix_rules(arguments: dict[str, Any]) -> str:
    """Handle fix_rules tool call.

    Plans merges, splits and conflict annotations; writes them only when
    dry_run is explicitly false.

    Args:
        arguments: Tool arguments with repo_path and optional custom_rules_path,
                   dry_run, max_tokens, split.

    Returns:
        JSON string with the remediation report.

    Raises:
        ValueError: If repo_path is not provided or is not a directory.
    """
    repo_path = _repo_path(arguments)
    custom_path = arguments.get("custom_rules_path")

    rules_dir = _discover_rules_path(repo_path, custom_path)
    if rules_dir is None:
        return _no_rules_response(repo_path, custom_path)

    dry_run = arguments.get("dry_run", True)
    config = AuditConfig.from_env(
        max_tokens=arguments.get("max_tokens"),
        split=arguments.get("split"),
    )

    report = await asyncio.to_thread(run_remediation, rules_dir, dry_run, config)

    result = report.model_dump(mode="json")
    result["summary"] = report.summary()
    return json.dumps(result, indent=2)
