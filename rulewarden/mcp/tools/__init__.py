"""MCP tools registration.

Provides tool definitions, handlers, and registration functions for
the rulewarden MCP server.
"""

from mcp.server import Server

from rulewarden.mcp.tools.definitions import ALL_TOOLS, AUDIT_RULES_TOOL, FIX_RULES_TOOL
from rulewarden.mcp.tools.dispatch import dispatch_tool, inject_timing, register_rule_tools


def register_tools(server: Server) -> None:
    """Register all MCP tools with the server.

    Args:
        server: The MCP server instance.
    """
    register_rule_tools(server)


__all__ = [
    # Registration
    "register_tools",
    "register_rule_tools",
    # Dispatch
    "dispatch_tool",
    "inject_timing",
    # Tool definitions
    "ALL_TOOLS",
    "AUDIT_RULES_TOOL",
    "FIX_RULES_TOOL",
]
