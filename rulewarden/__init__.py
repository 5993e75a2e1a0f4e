"""rulewarden - conflict, redundancy and remediation engine for AI assistant rules."""

# Load .env so RULEWARDEN_* thresholds are set for any entry point
# (CLI, pytest, MCP server) that imports rulewarden.
from dotenv import load_dotenv

load_dotenv()

# Keep in sync with pyproject.toml [project] version.
__version__ = "0.1.0"


def run_server() -> None:
    """Run the rulewarden MCP server (blocking).

    Uses stdio transport for communication with Cursor/Claude Desktop.
    """
    from rulewarden.mcp.server import run_server as _run_server
    _run_server()
