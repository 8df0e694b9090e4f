"""Shared fixtures for kit tests."""

import logging
from pathlib import Path

import pytest

from kit.config import Config
from kit.registry import FeatureRegistry
from kit.workspace import Workspace


def _write_tasks(feature_dir: Path, done: int, open_: int, marker: bool = False) -> Path:
    """Write a TASKS.md with the given number of checked and unchecked boxes."""
    lines = ["# TASKS", "", "## TASKS", ""]
    lines += [f"- [x] T{i:03d}: finished" for i in range(1, done + 1)]
    lines += [f"- [ ] T{i:03d}: pending" for i in range(done + 1, done + open_ + 1)]
    lines += ["", "## DEPENDENCIES", "", "none", "", "## NOTES", "", "none", ""]
    if marker:
        lines += ["<!-- REFLECTION_COMPLETE -->", ""]
    path = feature_dir / "TASKS.md"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


@pytest.fixture
def specs_dir(tmp_path):
    """An empty specs directory."""
    path = tmp_path / "docs" / "specs"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def registry(specs_dir):
    return FeatureRegistry(specs_dir)


@pytest.fixture
def no_branch_config():
    """Default configuration with git branching turned off."""
    config = Config()
    config.branching.enabled = False
    return config


@pytest.fixture
def workspace(tmp_path, no_branch_config):
    """An initialized kit project in a temporary directory."""
    ws = Workspace(tmp_path, config=no_branch_config)
    ws.init_project()
    return ws


@pytest.fixture
def write_tasks():
    """Factory writing a TASKS.md with ``done`` checked and ``open_`` unchecked boxes."""
    return _write_tasks


@pytest.fixture(autouse=True)
def reset_kit_logger():
    """Undo setup_logging so caplog sees ``kit.*`` records in later tests."""
    yield
    logger = logging.getLogger("kit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
