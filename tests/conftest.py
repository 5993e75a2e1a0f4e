"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def rules_dir(temp_dir: Path) -> Path:
    """Create an empty .cursor/rules directory inside temp_dir."""
    path = temp_dir / ".cursor" / "rules"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_rule(rules_dir: Path) -> Callable[..., Path]:
    """Write a rule file with an optional header.

    Usage: write_rule("name.mdc", "body text", alwaysApply=True, globs=["*.ts"])
    Pass header=False to write the body alone.
    """

    def _write(name: str, body: str, header: bool = True, **fields: object) -> Path:
        lines: list[str] = []
        if header:
            lines.append("---")
            for key, value in fields.items():
                if isinstance(value, bool):
                    lines.append(f"{key}: {str(value).lower()}")
                elif isinstance(value, list):
                    lines.append(f"{key}:")
                    lines.extend(f'  - "{item}"' for item in value)
                else:
                    lines.append(f"{key}: {value}")
            lines.append("---")
        path = rules_dir / name
        path.write_text("\n".join(lines) + ("\n" if lines else "") + body)
        return path

    return _write


@pytest.fixture
def sample_rules_dir(write_rule: Callable[..., Path], rules_dir: Path) -> Path:
    """Rules directory with one conflict and one redundant pair."""
    write_rule(
        "100-python.mdc",
        "# Python\n\n- Use snake_case for functions\n- Use PascalCase for classes\n",
        description="Python coding conventions",
        globs=["**/*.py"],
    )
    write_rule(
        "200-style-a.mdc",
        "# Style\n\nUse tabs for indentation.\n",
        description="Indentation",
        alwaysApply=True,
    )
    write_rule(
        "300-style-b.mdc",
        "# Style\n\nUse spaces for indentation.\n",
        description="Indentation (legacy)",
        alwaysApply=True,
    )
    return rules_dir
