"""Logging configuration for rulewarden.

Logs to stderr so CLI JSON output and the MCP stdio protocol keep stdout.
Provides tqdm progress bars for long scans when attached to a terminal.
"""

import logging
import os
import sys
import time
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from typing import Any, TypeVar

from tqdm import tqdm

# - RULEWARDEN_DISABLE_PROGRESS=1 explicitly disables
# - Non-TTY stderr also disables (MCP mode, CI)
_DISABLE_PROGRESS = (
    os.getenv("RULEWARDEN_DISABLE_PROGRESS", "").lower() in ("1", "true", "yes")
    or not sys.stderr.isatty()
)

logger = logging.getLogger("rulewarden")
logger.setLevel(logging.INFO)

# Only add handler if not already configured
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        "[rulewarden] %(asctime)s %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class TimingContext:
    """Context object that captures elapsed time from an operation.

    Attributes:
        elapsed: Elapsed time in seconds (set after context exits).
        elapsed_ms: Elapsed time in milliseconds (set after context exits).
    """

    def __init__(self) -> None:
        self.elapsed: float = 0.0
        self.elapsed_ms: float = 0.0
        self._start: float = 0.0

    def start(self) -> None:
        """Start the timer."""
        self._start = time.perf_counter()

    def stop(self) -> None:
        """Stop the timer and record elapsed time."""
        self.elapsed = time.perf_counter() - self._start
        self.elapsed_ms = self.elapsed * 1000


@contextmanager
def log_operation(
    operation: str,
    details: dict[str, Any] | None = None,
) -> Generator[TimingContext, None, None]:
    """Context manager for logging operation start/end with timing.

    Args:
        operation: Name of the operation.
        details: Optional details dict to include in start message.

    Yields:
        TimingContext object with elapsed time after context exits.

    Example:
        with log_operation("audit", {"rules_dir": "/repo/.cursor/rules"}) as timing:
            report = audit_rules(rules_dir)
        print(f"Took {timing.elapsed_ms:.1f}ms")
    """
    details_str = ""
    if details:
        details_str = " " + " ".join(f"{k}={v}" for k, v in details.items())

    logger.info("▶ Starting %s%s", operation, details_str)

    ctx = TimingContext()
    ctx.start()

    try:
        yield ctx
    except Exception as e:
        ctx.stop()
        logger.error("✗ %s failed after %.2fs: %s", operation, ctx.elapsed, e)
        raise
    else:
        ctx.stop()
        logger.info("✓ Completed %s in %.2fs", operation, ctx.elapsed)


T = TypeVar("T")


def progress_bar(
    iterable: Iterable[T],
    desc: str | None = None,
    total: int | None = None,
    unit: str = "it",
    disable: bool = False,
) -> Iterable[T]:
    """Wrap an iterable with a progress bar on stderr.

    Plain iteration is returned when stderr is not a TTY (MCP mode, CI)
    or when progress output is disabled.

    Args:
        iterable: The iterable to wrap.
        desc: Description shown before the progress bar.
        total: Total number of items (required for generators).
        unit: Unit name for the items (e.g., "files", "pairs").
        disable: If True, disable progress bar entirely.

    Returns:
        Wrapped iterable that shows progress.
    """
    if disable or _DISABLE_PROGRESS:
        if not disable and total and total > 1000:
            logger.info("  %s: processing %d %s...", desc or "Progress", total, unit)
        return iterable

    return tqdm(
        iterable,
        desc=f"  {desc}" if desc else None,
        total=total,
        unit=unit,
        file=sys.stderr,
        ncols=80,
        leave=False,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]",
    )
