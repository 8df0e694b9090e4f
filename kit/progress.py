"""Checkbox counting and the completion marker for TASKS.md."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Tuple

from .errors import IOFailure
from .models import TaskProgress

logger = logging.getLogger("kit.progress")

COMPLETION_MARKER = "<!-- REFLECTION_COMPLETE -->"

_INCOMPLETE = re.compile(r"^\s*-\s*\[\s*\]")
_COMPLETE = re.compile(r"^\s*-\s*\[[xX]\]")


def count(content: str) -> TaskProgress:
    """Count markdown checkbox lines.

    Only ``-`` bullets are recognised; ``* [ ]`` and ``1. [ ]`` are not tasks.
    """
    progress = TaskProgress()
    for line in content.splitlines():
        if _COMPLETE.match(line):
            progress.total += 1
            progress.complete += 1
        elif _INCOMPLETE.match(line):
            progress.total += 1
    return progress


def has_completion_marker(content: str) -> bool:
    return COMPLETION_MARKER in content


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(path, e) from e


def read_progress(path: Path | str) -> Tuple[TaskProgress, bool]:
    """Return checkbox counts and marker presence for a tasks file."""
    content = _read(Path(path))
    return count(content), has_completion_marker(content)


def append_completion_marker(path: Path | str) -> bool:
    """Append the completion marker unless already present.

    Returns True when the file was changed.
    """
    path = Path(path)
    content = _read(path)
    if has_completion_marker(content):
        return False

    addition = "" if content.endswith("\n") else "\n"
    addition += f"\n{COMPLETION_MARKER}\n"
    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(addition)
    except OSError as e:
        raise IOFailure(path, e) from e
    logger.info(f"Appended completion marker to {path}")
    return True
