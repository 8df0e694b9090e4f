"""Thin wrapper around the ``git`` command line."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from .errors import GitError

logger = logging.getLogger("kit.git")


def _run(directory: Path | str, args: List[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(directory),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise GitError(f"failed to run git: {e}") from e


def _output(result: subprocess.CompletedProcess) -> str:
    return (result.stdout + result.stderr).strip()


def is_repo(directory: Path | str) -> bool:
    try:
        return _run(directory, ["rev-parse", "--git-dir"]).returncode == 0
    except GitError:
        return False


def current_branch(directory: Path | str) -> str:
    result = _run(directory, ["rev-parse", "--abbrev-ref", "HEAD"])
    if result.returncode != 0:
        raise GitError(f"failed to get current branch: {_output(result)}")
    return result.stdout.strip()


def branch_exists(directory: Path | str, name: str) -> bool:
    try:
        result = _run(directory, ["show-ref", "--verify", "--quiet", f"refs/heads/{name}"])
    except GitError:
        return False
    return result.returncode == 0


def create_branch(directory: Path | str, name: str, base: Optional[str] = None) -> None:
    """Create ``name`` from ``base`` (or the current HEAD) and check it out."""
    if branch_exists(directory, name):
        raise GitError(f"branch '{name}' already exists")

    args = ["checkout", "-b", name]
    if base:
        args.append(base)
    result = _run(directory, args)
    if result.returncode != 0:
        raise GitError(f"failed to create branch: {_output(result)}")
    logger.info(f"Created branch {name}")


def checkout_branch(directory: Path | str, name: str) -> None:
    result = _run(directory, ["checkout", name])
    if result.returncode != 0:
        raise GitError(f"failed to checkout branch: {_output(result)}")


def ensure_branch(directory: Path | str, name: str, base: Optional[str] = None) -> bool:
    """Check out ``name``, creating it first if needed. Returns True when created."""
    if branch_exists(directory, name):
        checkout_branch(directory, name)
        return False
    create_branch(directory, name, base)
    return True


def has_uncommitted_changes(directory: Path | str) -> bool:
    try:
        result = _run(directory, ["status", "--porcelain"])
    except GitError:
        return False
    if result.returncode != 0:
        return False
    return bool(result.stdout.strip())
