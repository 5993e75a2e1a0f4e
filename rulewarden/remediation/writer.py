"""Apply remediation actions to a rules directory.

Every write lands in a temporary sibling file first and is moved into place
with ``os.replace``. Paired steps (merge: rewrite + delete, split: create
parts + delete source) are rolled back when a later step fails, so a failed
action leaves the directory as it was.
"""

import os
import shutil
import tempfile
from pathlib import Path

from rulewarden.analyzers.frontmatter import normalize_newlines, split_header
from rulewarden.analyzers.markers import (
    conflict_marker,
    has_conflict_marker,
    remove_conflict_markers,
)
from rulewarden.logging import log_operation, logger
from rulewarden.models.rules import (
    ActionOutcome,
    AnnotateAction,
    MergeAction,
    PruneAction,
    RemediationAction,
    SplitAction,
)
from rulewarden.remediation.planner import insert_conflict_marker


class RemediationError(Exception):
    """A remediation action could not be completed."""


def _temp_sibling(path: Path) -> Path:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    os.close(fd)
    return Path(tmp_name)


def _write_temp(path: Path, content: str) -> Path:
    """Write ``content`` to a new temporary file next to ``path``."""
    tmp = _temp_sibling(path)
    try:
        tmp.write_text(content, encoding="utf-8", newline="")
        if path.exists():
            shutil.copymode(path, tmp)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


def atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` in one rename."""
    tmp = _write_temp(path, content)
    try:
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def apply_merge(action: MergeAction, rules_dir: Path) -> None:
    """Rewrite the kept rule, then delete the removed one.

    Raises:
        RemediationError: If either step fails. The kept rule is restored
            when the delete fails.
    """
    keep_path = rules_dir / action.keep
    remove_path = rules_dir / action.remove

    try:
        atomic_write(keep_path, action.merged_content)
    except OSError as e:
        raise RemediationError(f"could not write {action.keep}: {e}") from e

    try:
        remove_path.unlink()
    except OSError as e:
        try:
            atomic_write(keep_path, action.original_content)
        except OSError as restore_error:
            raise RemediationError(
                f"could not delete {action.remove}: {e}; "
                f"restoring {action.keep} also failed: {restore_error}"
            ) from e
        raise RemediationError(f"could not delete {action.remove}: {e}") from e


def apply_split(action: SplitAction, rules_dir: Path) -> None:
    """Create every part file, then delete the source.

    Raises:
        RemediationError: If any step fails. Parts already created are removed
            and the source is left untouched.
    """
    source_path = rules_dir / action.source
    part_paths = [rules_dir / name for name in action.parts]

    existing = [path.name for path in part_paths if path.exists()]
    if existing:
        raise RemediationError(f"part file already exists: {', '.join(existing)}")

    temps: list[Path] = []
    created: list[Path] = []
    try:
        for path, content in zip(part_paths, action.part_contents, strict=True):
            temps.append(_write_temp(path, content))
        for tmp, path in zip(temps, part_paths, strict=True):
            os.replace(tmp, path)
            created.append(path)
        source_path.unlink()
    except OSError as e:
        for path in [*created, *temps]:
            try:
                path.unlink(missing_ok=True)
            except OSError as cleanup_error:
                logger.warning("Could not clean up %s: %s", path, cleanup_error)
        raise RemediationError(f"could not split {action.source}: {e}") from e


def apply_prune(action: PruneAction, rules_dir: Path) -> bool:
    """Remove the stale markers from the target's current content.

    Returns:
        False when none of the stale markers remain (nothing written).
    """
    path = rules_dir / action.target
    try:
        content = normalize_newlines(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise RemediationError(f"could not read {action.target}: {e}") from e

    updated = remove_conflict_markers(content, set(action.stale))
    if updated == content:
        return False
    try:
        atomic_write(path, updated)
    except OSError as e:
        raise RemediationError(f"could not write {action.target}: {e}") from e
    return True


def apply_annotation(action: AnnotateAction, rules_dir: Path) -> bool:
    """Insert the conflict marker into the target's current content.

    Returns:
        False when the marker was already present (nothing written).

    Raises:
        RemediationError: If the target cannot be read or written.
    """
    path = rules_dir / action.target
    try:
        content = normalize_newlines(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise RemediationError(f"could not read {action.target}: {e}") from e

    if has_conflict_marker(content, action.conflicts_with):
        return False

    header_block, _ = split_header(content)
    updated = insert_conflict_marker(
        content, header_block, conflict_marker(action.conflicts_with, action.reason)
    )
    try:
        atomic_write(path, updated)
    except OSError as e:
        raise RemediationError(f"could not write {action.target}: {e}") from e
    return True


def _apply_one(action: RemediationAction, rules_dir: Path) -> ActionOutcome:
    try:
        match action:
            case MergeAction():
                apply_merge(action, rules_dir)
                logger.info("  merged %s into %s", action.remove, action.keep)
            case SplitAction():
                apply_split(action, rules_dir)
                logger.info("  split %s into %s", action.source, ", ".join(action.parts))
            case PruneAction():
                if not apply_prune(action, rules_dir):
                    return ActionOutcome(action=action, status="skipped")
                logger.info("  pruned stale markers from %s (%s)", action.target, ", ".join(action.stale))
            case AnnotateAction():
                if not apply_annotation(action, rules_dir):
                    logger.debug("  %s already annotated for %s", action.target, action.conflicts_with)
                    return ActionOutcome(action=action, status="skipped")
                logger.info("  annotated %s (conflicts with %s)", action.target, action.conflicts_with)
    except RemediationError as e:
        logger.warning("  %s action failed: %s", action.kind, e)
        return ActionOutcome(action=action, status="failed", error=str(e))

    return ActionOutcome(action=action, status="applied")


def apply_actions(
    actions: list[RemediationAction],
    rules_dir: Path,
    dry_run: bool = False,
) -> list[ActionOutcome]:
    """Apply a remediation plan.

    Actions run in the given order; a failed action does not stop the
    independent ones after it.

    Args:
        actions: Plan from plan_remediation.
        rules_dir: Directory the plan was computed for.
        dry_run: If True, write nothing and mark every action ``planned``.

    Returns:
        One ActionOutcome per action, in order.
    """
    if dry_run:
        return [ActionOutcome(action=action, status="planned") for action in actions]

    rules_dir = Path(rules_dir)
    with log_operation("apply", {"actions": len(actions)}):
        return [_apply_one(action, rules_dir) for action in actions]
