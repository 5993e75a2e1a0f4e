"""CLI interface for rulewarden.

Provides commands for auditing and fixing a rules directory and for running
the MCP server.
"""

import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

# Load .env before importing other rulewarden modules
# This ensures env vars are set before module-level code reads them
load_dotenv()

from rulewarden import __version__  # noqa: E402
from rulewarden.config import AuditConfig  # noqa: E402
from rulewarden.models.rules import AuditReport, RemediationReport  # noqa: E402

DEFAULT_RULES_SUBDIR = Path(".cursor") / "rules"

_RULE = "=" * 60
_SUBRULE = "-" * 60


def _resolve_rules_dir(repo_path: str, rules_dir: str | None) -> Path:
    if rules_dir:
        path = Path(rules_dir)
        return path if path.is_absolute() else Path(repo_path) / path
    return Path(repo_path) / DEFAULT_RULES_SUBDIR


def _load_config(**overrides: object) -> AuditConfig:
    try:
        return AuditConfig.from_env(**overrides)
    except ValueError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)


def print_audit(report: AuditReport) -> None:
    """Print a human-readable audit report."""
    summary = report.summary()

    click.echo("\n" + _RULE)
    click.echo("RULE AUDIT REPORT")
    click.echo(_RULE)
    click.echo(f"\nRules directory: {report.rules_dir}")
    click.echo(f"Rules analyzed: {summary['rules_analyzed']}")
    click.echo(f"Conflicts: {summary['conflicts']}  Redundant pairs: {summary['redundancies']}")

    if report.diagnostics:
        click.echo("\n" + _SUBRULE)
        click.echo("UNREADABLE FILES")
        click.echo(_SUBRULE)
        for diagnostic in report.diagnostics:
            click.echo(f"\n✗ {diagnostic.file}: {diagnostic.error}")

    header_errors = [d for d in report.documents if d.header_error]
    if header_errors:
        click.echo("\n" + _SUBRULE)
        click.echo("HEADER ERRORS (excluded from conflict checks)")
        click.echo(_SUBRULE)
        for document in header_errors:
            click.echo(f"\n⚠ {document.file}: {document.header_error}")

    if report.conflicts:
        click.echo("\n" + _SUBRULE)
        click.echo("ERRORS (Conflicts)")
        click.echo(_SUBRULE)
        for conflict in report.conflicts:
            click.echo(f"\n✗ {conflict.detail}")

    warnings = bool(report.redundancies or report.glob_overlaps)
    if warnings:
        click.echo("\n" + _SUBRULE)
        click.echo("WARNINGS (Redundancy)")
        click.echo(_SUBRULE)
        for finding in report.redundancies:
            tag = " near-duplicate" if finding.near_duplicate else ""
            click.echo(f"\n⚠ {finding.rule_a} and {finding.rule_b}: {finding.overlap_pct}% similar{tag}")
            click.echo(
                f"  Shared lines: {finding.shared_lines} "
                f"({round(finding.line_overlap * 100)}% line overlap)"
            )
        for note in report.glob_overlaps:
            click.echo(
                f"\n⚠ {note.rule_a} and {note.rule_b} both alwaysApply with globs: "
                f"{', '.join(note.shared_globs)}"
            )

    unknown = [d for d in report.documents if d.unknown_keys]
    if unknown:
        click.echo("\nUnknown header keys:")
        for document in unknown:
            click.echo(f"  {document.file}: {', '.join(document.unknown_keys)}")

    if report.clusters:
        click.echo("\nRelated rule groups:")
        for cluster in report.clusters:
            click.echo(f"  - {', '.join(cluster)}")

    if not (report.conflicts or warnings):
        click.echo("\n✓ No conflicts or redundancy detected!")
    click.echo(_RULE)


def print_remediation(report: RemediationReport) -> None:
    """Print the actions of a remediation run."""
    mode = "DRY RUN" if report.dry_run else "APPLIED"

    click.echo("\n" + _RULE)
    click.echo(f"RULE REMEDIATION ({mode})")
    click.echo(_RULE)

    if not report.outcomes:
        click.echo("\n✓ Nothing to fix.")

    for outcome in report.outcomes:
        action = outcome.action
        match action.kind:
            case "merge":
                text = f"merge {action.remove} into {action.keep} ({action.overlap_pct}% overlap)"
            case "split":
                text = f"split {action.source} ({action.estimated_tokens} tokens) into {', '.join(action.parts)}"
            case "prune":
                text = f"prune {action.target}: drop markers for {', '.join(action.stale)}"
            case _:
                text = f"annotate {action.target}: conflicts with {action.conflicts_with} ({action.reason})"
        symbol = {"applied": "✓", "planned": "•", "skipped": "-", "failed": "✗"}[outcome.status]
        click.echo(f"{symbol} [{outcome.status}] {text}")
        if outcome.error:
            click.echo(f"    {outcome.error}")

    if report.manual_review:
        click.echo("\nManual review needed:")
        for item in report.manual_review:
            click.echo(
                f"  {item.rule_a} and {item.rule_b}: "
                f"{round(item.overlap_ratio * 100)}% similar, "
                f"{round(item.line_overlap * 100)}% line overlap"
            )

    counts = report.summary()
    click.echo(
        f"\nMerged: {counts['merged']}  Split: {counts['split']}  "
        f"Pruned: {counts['pruned']}  Annotated: {counts['annotated']}  Failed: {counts['failed']}"
    )
    click.echo(_RULE)


@click.group()
@click.version_option(version=__version__, prog_name="rulewarden")
def cli() -> None:
    """rulewarden - find conflicting and redundant AI assistant rules."""
    pass


@cli.command()
@click.argument("repo_path", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("--rules-dir", help="Rules directory (default: REPO_PATH/.cursor/rules)")
@click.option("--json", "as_json", is_flag=True, help="Output the report as JSON")
def audit(repo_path: str, rules_dir: str | None, as_json: bool) -> None:
    """Report conflicting and redundant rules.

    REPO_PATH: Path to the repository whose rules are audited.

    Exits with status 1 when conflicts are found.
    """
    from rulewarden.analyzers import audit_rules

    config = _load_config()
    target = _resolve_rules_dir(repo_path, rules_dir)
    try:
        report = audit_rules(target, config)
    except ValueError as e:
        click.echo(f"Audit failed: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json") | {"summary": report.summary()}, indent=2))
    else:
        print_audit(report)

    if report.conflicts:
        sys.exit(1)


@cli.command()
@click.argument("repo_path", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("--rules-dir", help="Rules directory (default: REPO_PATH/.cursor/rules)")
@click.option("--dry-run", is_flag=True, help="Show the plan without changing any file")
@click.option("--max-tokens", type=int, help="Split rules estimated above this many tokens (default: 1500)")
@click.option("--no-split", is_flag=True, help="Do not split oversized rules")
@click.option("--json", "as_json", is_flag=True, help="Output the report as JSON")
def fix(
    repo_path: str,
    rules_dir: str | None,
    dry_run: bool,
    max_tokens: int | None,
    no_split: bool,
    as_json: bool,
) -> None:
    """Merge duplicates, split oversized rules and annotate conflicts.

    REPO_PATH: Path to the repository whose rules are fixed.

    Exits with status 1 when any action failed.
    """
    from rulewarden.remediation import run_remediation

    config = _load_config(max_tokens=max_tokens, split=False if no_split else None)
    target = _resolve_rules_dir(repo_path, rules_dir)
    try:
        report = run_remediation(target, dry_run=dry_run, config=config)
    except ValueError as e:
        click.echo(f"Fix failed: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json") | {"summary": report.summary()}, indent=2))
    else:
        if report.audit.conflicts:
            click.echo(f"{len(report.audit.conflicts)} conflict(s) found:", err=True)
            for conflict in report.audit.conflicts:
                click.echo(f"  ✗ {conflict.detail}", err=True)
        print_remediation(report)

    if report.failed:
        sys.exit(1)


@cli.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio"]),
    default="stdio",
    help="Transport protocol (default: stdio)",
)
def serve(transport: str) -> None:
    """Start the MCP server.

    Exposes the audit_rules and fix_rules tools over stdio.
    """
    # Import here to keep CLI startup fast
    from rulewarden import run_server

    run_server()


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
