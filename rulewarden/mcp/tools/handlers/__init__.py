"""MCP tool handlers.

Each handler processes tool calls and returns JSON responses.
- rules_audit: audit_rules
- remediation: fix_rules
"""

from rulewarden.mcp.tools.handlers.remediation import handle_fix_rules
from rulewarden.mcp.tools.handlers.rules_audit import handle_audit_rules

__all__ = [
    "handle_audit_rules",
    "handle_fix_rules",
]
