"""MCP server implementation for rulewarden.

Exposes rule auditing and remediation via the Model Context Protocol.

Every tool call rescans the rules directory, so results always reflect the
files as they are on disk.
"""

import asyncio

from mcp.server import Server
from mcp.server.stdio import stdio_server

from rulewarden import __version__
from rulewarden.logging import logger
from rulewarden.mcp.tools import register_tools

# Server configuration
SERVER_NAME = "rulewarden"
SERVER_VERSION = __version__


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured MCP Server instance with all tools registered.
    """
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    register_tools(server)

    return server


async def run_server_async() -> None:
    """Run the MCP server with stdio transport."""
    server = create_server()
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        logger.info("MCP server shutdown complete")


def run_server() -> None:
    """Run the MCP server (blocking)."""
    asyncio.run(run_server_async())
