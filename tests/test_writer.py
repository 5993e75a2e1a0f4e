"""Tests for applying remediation plans to disk."""

import os
from pathlib import Path

from rulewarden.analyzers.markers import MARKER_PREFIX, conflict_marker
from rulewarden.config import AuditConfig
from rulewarden.models.rules import AnnotateAction, PruneAction
from rulewarden.remediation import apply_actions, atomic_write, run_remediation

FULL_BODY = (
    "Use 2-space indentation.\n"
    "No semicolons allowed.\n"
    "Prefer const declarations.\n"
    "Avoid var declarations.\n"
)
SHORT_BODY = (
    "Use 2-space indentation.\n"
    "No semicolons allowed.\n"
    "Prefer const declarations.\n"
    "Keep imports sorted.\n"
)
BIG_BODY = "## One\n" + "alpha " * 40 + "\n## Two\n" + "beta " * 40 + "\n"


def snapshot(rules_dir: Path) -> dict[str, str]:
    """Map every file in the directory (temp files included) to its text."""
    return {path.name: path.read_text() for path in sorted(rules_dir.iterdir())}


def fail_unlink_for(monkeypatch, name: str) -> None:
    """Make Path.unlink raise for one file name only."""
    original_unlink = Path.unlink

    def fake_unlink(self, missing_ok=False):
        if self.name == name:
            raise PermissionError(f"cannot delete {name}")
        return original_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", fake_unlink)


class TestAtomicWrite:
    """Tests for atomic_write."""

    def test_replaces_content(self, temp_dir: Path) -> None:
        """The target holds the new content and no temp file remains."""
        target = temp_dir / "rule.mdc"
        target.write_text("old\n")

        atomic_write(target, "new\n")

        assert target.read_text() == "new\n"
        assert [p.name for p in temp_dir.iterdir()] == ["rule.mdc"]


class TestApplyMerge:
    """Tests for merge application."""

    def test_merge_folds_and_deletes(self, rules_dir: Path, write_rule) -> None:
        """The kept rule gains the new line and the other rule is deleted."""
        write_rule("a-full.mdc", FULL_BODY, alwaysApply=True)
        write_rule("b-short.mdc", SHORT_BODY, alwaysApply=True)

        report = run_remediation(rules_dir)

        assert report.summary()["merged"] == 1
        assert [o.status for o in report.outcomes] == ["applied"]
        assert not (rules_dir / "b-short.mdc").exists()
        assert (rules_dir / "a-full.mdc").read_text() == (
            "---\nalwaysApply: true\n---\n" + FULL_BODY + "Keep imports sorted.\n"
        )

    def test_rerun_is_noop(self, rules_dir: Path, write_rule) -> None:
        """A second run plans nothing and duplicates no lines."""
        write_rule("a-full.mdc", FULL_BODY, alwaysApply=True)
        write_rule("b-short.mdc", SHORT_BODY, alwaysApply=True)
        run_remediation(rules_dir)
        after_first = snapshot(rules_dir)

        report = run_remediation(rules_dir)

        assert report.outcomes == []
        assert snapshot(rules_dir) == after_first
        content = (rules_dir / "a-full.mdc").read_text()
        assert content.count("Use 2-space indentation.") == 1

    def test_delete_failure_restores_kept_rule(self, rules_dir: Path, write_rule, monkeypatch) -> None:
        """If the removed rule cannot be deleted, the kept rule is restored."""
        write_rule("a-full.mdc", FULL_BODY, alwaysApply=True)
        write_rule("b-short.mdc", SHORT_BODY, alwaysApply=True)
        before = snapshot(rules_dir)
        fail_unlink_for(monkeypatch, "b-short.mdc")

        report = run_remediation(rules_dir)

        assert [o.status for o in report.outcomes] == ["failed"]
        assert "could not delete b-short.mdc" in report.outcomes[0].error
        assert snapshot(rules_dir) == before

    def test_write_failure_keeps_both_rules(self, rules_dir: Path, write_rule, monkeypatch) -> None:
        """If the kept rule cannot be rewritten, nothing is deleted."""
        write_rule("a-full.mdc", FULL_BODY, alwaysApply=True)
        write_rule("b-short.mdc", SHORT_BODY, alwaysApply=True)
        before = snapshot(rules_dir)

        def fake_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fake_replace)

        report = run_remediation(rules_dir)

        assert report.failed[0].error.startswith("could not write a-full.mdc")
        assert snapshot(rules_dir) == before


class TestApplySplit:
    """Tests for split application."""

    def test_split_creates_parts(self, rules_dir: Path, write_rule) -> None:
        """Parts are written with the original header and the source is removed."""
        write_rule("big.mdc", BIG_BODY, alwaysApply=True)

        report = run_remediation(rules_dir, config=AuditConfig(max_tokens=80))

        assert report.summary()["split"] == 1
        assert sorted(snapshot(rules_dir)) == ["big-part1.mdc", "big-part2.mdc"]
        part1 = (rules_dir / "big-part1.mdc").read_text()
        part2 = (rules_dir / "big-part2.mdc").read_text()
        assert part1.startswith("---\nalwaysApply: true\n---\n## One\n")
        assert part2.startswith("---\nalwaysApply: true\n---\n## Two\n")

        rerun = run_remediation(rules_dir, config=AuditConfig(max_tokens=80))
        assert rerun.outcomes == []

    def test_split_failure_rolls_back(self, rules_dir: Path, write_rule, monkeypatch) -> None:
        """If the source cannot be deleted, created parts are removed again."""
        write_rule("big.mdc", BIG_BODY, alwaysApply=True)
        before = snapshot(rules_dir)
        fail_unlink_for(monkeypatch, "big.mdc")

        report = run_remediation(rules_dir, config=AuditConfig(max_tokens=80))

        assert [o.status for o in report.outcomes] == ["failed"]
        assert snapshot(rules_dir) == before


class TestApplyAnnotation:
    """Tests for conflict annotation."""

    def test_marker_inserted_after_header(self, sample_rules_dir: Path) -> None:
        """Both sides get a marker line right below their header."""
        report = run_remediation(sample_rules_dir)

        assert report.summary()["annotated"] == 2
        lines_a = (sample_rules_dir / "200-style-a.mdc").read_text().split("\n")
        lines_b = (sample_rules_dir / "300-style-b.mdc").read_text().split("\n")
        assert lines_a[3] == "---"
        assert lines_a[4] == conflict_marker("300-style-b.mdc", "indentation style")
        assert lines_b[4] == conflict_marker("200-style-a.mdc", "indentation style")
        assert lines_a[5] == "# Style"

    def test_annotation_is_idempotent(self, sample_rules_dir: Path) -> None:
        """Re-running after annotation plans no further annotations."""
        run_remediation(sample_rules_dir)
        after_first = snapshot(sample_rules_dir)

        report = run_remediation(sample_rules_dir)

        assert report.outcomes == []
        assert len(report.audit.conflicts) == 1
        assert len(report.manual_review) == 1
        assert snapshot(sample_rules_dir) == after_first
        assert after_first["200-style-a.mdc"].count(MARKER_PREFIX) == 1

    def test_same_action_twice_skips(self, sample_rules_dir: Path) -> None:
        """Applying an annotation whose marker exists reports skipped."""
        action = AnnotateAction(
            target="200-style-a.mdc", conflicts_with="300-style-b.mdc", reason="indentation style"
        )

        first = apply_actions([action], sample_rules_dir)
        second = apply_actions([action], sample_rules_dir)

        assert first[0].status == "applied"
        assert second[0].status == "skipped"
        assert (sample_rules_dir / "200-style-a.mdc").read_text().count(MARKER_PREFIX) == 1


class TestApplyPrune:
    """Tests for stale marker pruning."""

    def test_removes_only_stale_markers(self, rules_dir: Path, write_rule) -> None:
        """Markers naming the stale rules go; others stay."""
        stale = conflict_marker("gone.mdc", "indentation style")
        live = conflict_marker("b.mdc", "quote style")
        write_rule("a.mdc", f"{stale}\n{live}\nUse tabs for indentation.\n", alwaysApply=True)

        outcomes = apply_actions([PruneAction(target="a.mdc", stale=["gone.mdc"])], rules_dir)

        assert outcomes[0].status == "applied"
        assert (rules_dir / "a.mdc").read_text() == (
            f"---\nalwaysApply: true\n---\n{live}\nUse tabs for indentation.\n"
        )

    def test_nothing_to_remove_skips(self, rules_dir: Path, write_rule) -> None:
        """A target without the stale markers is left alone."""
        write_rule("a.mdc", "Use tabs for indentation.\n", alwaysApply=True)
        before = snapshot(rules_dir)

        outcomes = apply_actions([PruneAction(target="a.mdc", stale=["gone.mdc"])], rules_dir)

        assert outcomes[0].status == "skipped"
        assert snapshot(rules_dir) == before

    def test_merge_leaves_no_dangling_markers(self, rules_dir: Path, write_rule) -> None:
        """After a merge no file names the deleted rule."""
        write_rule("a-full.mdc", FULL_BODY, alwaysApply=True)
        write_rule("b-short.mdc", SHORT_BODY, alwaysApply=True)
        marker = conflict_marker("b-short.mdc", "indentation style")
        write_rule("c.mdc", f"{marker}\nWrite tests before fixing bugs.\n", globs=["*.md"])

        report = run_remediation(rules_dir)

        assert report.summary()["merged"] == 1
        assert report.summary()["pruned"] == 1
        files = snapshot(rules_dir)
        assert sorted(files) == ["a-full.mdc", "c.mdc"]
        assert all("b-short.mdc" not in text for text in files.values())


class TestApplyActions:
    """Tests for apply_actions and run_remediation behavior."""

    def test_dry_run_writes_nothing(self, sample_rules_dir: Path) -> None:
        """Dry run returns the plan and leaves every file untouched."""
        before = snapshot(sample_rules_dir)

        report = run_remediation(sample_rules_dir, dry_run=True)

        assert report.dry_run
        assert [o.status for o in report.outcomes] == ["planned", "planned"]
        assert len(report.audit.conflicts) == 1
        assert snapshot(sample_rules_dir) == before

    def test_failure_does_not_stop_later_actions(self, sample_rules_dir: Path) -> None:
        """A failing action is reported and the next one still runs."""
        actions = [
            AnnotateAction(target="ghost.mdc", conflicts_with="200-style-a.mdc", reason="x"),
            AnnotateAction(
                target="200-style-a.mdc", conflicts_with="300-style-b.mdc", reason="indentation style"
            ),
        ]

        outcomes = apply_actions(actions, sample_rules_dir)

        assert [o.status for o in outcomes] == ["failed", "applied"]
        assert "could not read ghost.mdc" in outcomes[0].error

    def test_report_serializes_without_contents(self, rules_dir: Path, write_rule) -> None:
        """File contents carried on actions stay out of the JSON report."""
        write_rule("a-full.mdc", FULL_BODY, alwaysApply=True)
        write_rule("b-short.mdc", SHORT_BODY, alwaysApply=True)

        report = run_remediation(rules_dir, dry_run=True)
        data = report.model_dump(mode="json")

        action = data["outcomes"][0]["action"]
        assert action["kind"] == "merge"
        assert action["keep"] == "a-full.mdc"
        assert "merged_content" not in action
