"""MCP server for rulewarden."""
