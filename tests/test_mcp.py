"""Tests for the MCP server, tool definitions and handlers."""

import json
from pathlib import Path

import pytest

from rulewarden.analyzers.markers import MARKER_PREFIX
from rulewarden.mcp.server import SERVER_NAME, SERVER_VERSION, create_server
from rulewarden.mcp.tools import ALL_TOOLS, AUDIT_RULES_TOOL, FIX_RULES_TOOL, dispatch_tool, inject_timing
from rulewarden.mcp.tools.handlers import handle_audit_rules, handle_fix_rules


class TestMCPServer:
    """Tests for MCP server creation and configuration."""

    def test_create_server_returns_server_instance(self) -> None:
        """Server creation returns a valid Server instance."""
        server = create_server()
        assert server is not None
        assert server.name == SERVER_NAME

    def test_server_name_is_rulewarden(self) -> None:
        """Server name is 'rulewarden'."""
        assert SERVER_NAME == "rulewarden"

    def test_server_version_matches_package(self) -> None:
        """Server version matches package version."""
        from rulewarden import __version__

        assert SERVER_VERSION == __version__


class TestToolDefinitions:
    """Tests for MCP tool definitions."""

    def test_audit_rules_tool_has_required_fields(self) -> None:
        """audit_rules tool has name, description, and schema."""
        assert AUDIT_RULES_TOOL.name == "audit_rules"
        assert AUDIT_RULES_TOOL.description is not None
        assert AUDIT_RULES_TOOL.inputSchema["required"] == ["repo_path"]
        assert "custom_rules_path" in AUDIT_RULES_TOOL.inputSchema["properties"]

    def test_fix_rules_tool_defaults_to_dry_run(self) -> None:
        """fix_rules advertises dry_run with a default of true."""
        properties = FIX_RULES_TOOL.inputSchema["properties"]
        assert FIX_RULES_TOOL.name == "fix_rules"
        assert properties["dry_run"]["default"] is True
        assert {"max_tokens", "split"} <= set(properties)

    def test_all_tools_registered(self) -> None:
        """ALL_TOOLS lists every tool once."""
        assert [tool.name for tool in ALL_TOOLS] == ["audit_rules", "fix_rules"]


class TestAuditRulesMCP:
    """Tests for the audit_rules handler."""

    @pytest.mark.asyncio
    async def test_requires_repo_path(self) -> None:
        """Missing repo_path raises ValueError."""
        with pytest.raises(ValueError, match="repo_path is required"):
            await handle_audit_rules({})

    @pytest.mark.asyncio
    async def test_repo_path_must_exist(self, temp_dir: Path) -> None:
        """A repo_path that is not a directory raises ValueError."""
        with pytest.raises(ValueError, match="not a directory"):
            await handle_audit_rules({"repo_path": str(temp_dir / "missing")})

    @pytest.mark.asyncio
    async def test_no_rules_found(self, temp_dir: Path) -> None:
        """Repos without a rules directory get an error payload."""
        result = await handle_audit_rules({"repo_path": str(temp_dir)})
        data = json.loads(result)

        assert data["error"] == "No rules found"
        assert "searched" in data
        assert "recommendation" in data

    @pytest.mark.asyncio
    async def test_audits_default_rules_dir(self, temp_dir: Path, sample_rules_dir: Path) -> None:
        """Rules in .cursor/rules are audited and summarized."""
        result = await handle_audit_rules({"repo_path": str(temp_dir)})
        data = json.loads(result)

        assert data["summary"]["rules_analyzed"] == 3
        assert data["summary"]["conflicts"] == 1
        assert data["summary"]["redundancies"] == 1
        conflict = data["conflicts"][0]
        assert (conflict["rule_a"], conflict["rule_b"]) == ("200-style-a.mdc", "300-style-b.mdc")
        assert conflict["topic"] == "indentation style"

    @pytest.mark.asyncio
    async def test_custom_relative_rules_path(self, temp_dir: Path) -> None:
        """custom_rules_path is resolved against repo_path."""
        custom = temp_dir / "docs" / "rules"
        custom.mkdir(parents=True)
        (custom / "only.mdc").write_text("---\nalwaysApply: true\n---\nKeep it short.\n")

        result = await handle_audit_rules(
            {"repo_path": str(temp_dir), "custom_rules_path": "docs/rules"}
        )
        data = json.loads(result)

        assert data["summary"]["rules_analyzed"] == 1
        assert data["documents"][0]["file"] == "only.mdc"


class TestFixRulesMCP:
    """Tests for the fix_rules handler."""

    @pytest.mark.asyncio
    async def test_dry_run_by_default(self, temp_dir: Path, sample_rules_dir: Path) -> None:
        """Without dry_run the plan is returned and nothing is written."""
        before = (sample_rules_dir / "200-style-a.mdc").read_text()

        result = await handle_fix_rules({"repo_path": str(temp_dir)})
        data = json.loads(result)

        assert data["dry_run"] is True
        assert [o["status"] for o in data["outcomes"]] == ["planned", "planned"]
        assert data["summary"]["conflicts"] == 1
        assert data["summary"]["manual_review"] == 1
        assert (sample_rules_dir / "200-style-a.mdc").read_text() == before

    @pytest.mark.asyncio
    async def test_applies_when_dry_run_false(self, temp_dir: Path, sample_rules_dir: Path) -> None:
        """dry_run=false writes the conflict markers."""
        result = await handle_fix_rules({"repo_path": str(temp_dir), "dry_run": False})
        data = json.loads(result)

        assert data["summary"]["annotated"] == 2
        assert MARKER_PREFIX in (sample_rules_dir / "300-style-b.mdc").read_text()

    @pytest.mark.asyncio
    async def test_no_rules_found(self, temp_dir: Path) -> None:
        """fix_rules reports missing rules like audit_rules."""
        data = json.loads(await handle_fix_rules({"repo_path": str(temp_dir)}))

        assert data["error"] == "No rules found"


class TestDispatch:
    """Tests for tool dispatch and timing injection."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self) -> None:
        """Unknown tool names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown tool"):
            await dispatch_tool("validate_everything", {})

    @pytest.mark.asyncio
    async def test_dispatch_adds_timing(self, temp_dir: Path, sample_rules_dir: Path) -> None:
        """Dispatched responses carry a timing field."""
        result = await dispatch_tool("audit_rules", {"repo_path": str(temp_dir)})
        data = json.loads(result)

        assert "total_ms" in data["timing"]
        assert data["summary"]["conflicts"] == 1

    def test_inject_timing_leaves_non_json_alone(self) -> None:
        """Non-JSON responses pass through unchanged."""
        assert inject_timing("plain text", 12.3) == "plain text"

    def test_inject_timing_rounds(self) -> None:
        """Timing is rounded to one decimal."""
        data = json.loads(inject_timing('{"ok": true}', 12.345))

        assert data["timing"] == {"total_ms": 12.3}
