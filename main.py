"""MCP server exposing the kit feature workflow as tools."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.resources import TextResource

from kit import WorkflowManager
from kit.config import find_project_root
from kit.errors import ConfigError
from kit.kit_logging import setup_logging

mcp = FastMCP("kit")

ROOT_ENV = "KIT_PROJECT_ROOT"


def _resolve_root(root: Optional[str], *, allow_uninitialized: bool = False) -> Path:
    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise ValueError(f"Provided root '{root}' does not exist.")
        return resolved

    env_root = os.getenv(ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.exists():
            raise ValueError(
                f"Environment variable {ROOT_ENV} points to '{env_root}', which does not exist."
            )
        return env_path

    try:
        return find_project_root()
    except ConfigError:
        if allow_uninitialized:
            return Path.cwd().resolve()
        raise ValueError(
            "Unable to determine project root automatically. Provide the 'root' argument when calling the tool, "
            f"set the {ROOT_ENV} environment variable, or run init_project first."
        )


def _workflow(root: Optional[str], *, allow_uninitialized: bool = False) -> WorkflowManager:
    return WorkflowManager(_resolve_root(root, allow_uninitialized=allow_uninitialized))


@mcp.tool()
def init_project(root: Optional[str] = None) -> Dict[str, Any]:
    """STEP 1: Initialize kit in the project: .kit.yaml, docs/specs/, CONSTITUTION.md and agent pointer files.
    Safe to run again; existing files are kept and missing constitution sections are appended."""
    return _workflow(root, allow_uninitialized=True).init_project()


@mcp.tool()
def create_spec(feature: str, branch: bool = True, root: Optional[str] = None) -> Dict[str, Any]:
    """STEP 2: Create (or reuse) a numbered feature directory and scaffold SPEC.md.
    `feature` is a kebab-case slug of at most five words, or an existing directory name."""
    return _workflow(root).create_spec(feature, branch=branch)


@mcp.tool()
def create_plan(feature: Optional[str] = None, force: bool = False, root: Optional[str] = None) -> Dict[str, Any]:
    """STEP 3: Scaffold PLAN.md. Requires SPEC.md unless force is set."""
    return _workflow(root).create_plan(feature, force=force)


@mcp.tool()
def create_tasks(feature: Optional[str] = None, force: bool = False, root: Optional[str] = None) -> Dict[str, Any]:
    """STEP 4: Scaffold TASKS.md. Requires PLAN.md unless force is set.
    Tasks are tracked as markdown checkboxes: '- [ ]' open, '- [x]' done."""
    return _workflow(root).create_tasks(feature, force=force)


@mcp.tool()
def create_analysis(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Scaffold the optional ANALYSIS.md scratchpad for a feature."""
    return _workflow(root).create_analysis(feature)


@mcp.tool()
def scaffold_feature(feature: str, branch: bool = False, root: Optional[str] = None) -> Dict[str, Any]:
    """Create a feature with SPEC.md, PLAN.md, TASKS.md and ANALYSIS.md in one step."""
    return _workflow(root).scaffold_feature(feature, branch=branch)


@mcp.tool()
def list_features(root: Optional[str] = None) -> Dict[str, Any]:
    """Enumerate numbered features with their current phase."""
    return _workflow(root).list_features()


def _text_resource(text: str) -> TextResource:
    return TextResource(uri="kit://features", name="features", text=text, mime_type="text/plain")


@mcp.resource("kit://features")
def resource_features():
    """Resource view exposing feature phases for discovery."""

    try:
        workflow = _workflow(None)
    except ValueError:
        return _text_resource(
            f"No project root detected. Launch tools with a 'root' argument or set {ROOT_ENV}."
        )

    result = workflow.project_status()
    if "error" in result:
        return _text_resource(result["error"])
    if not result["features"]:
        return _text_resource("No features have been created yet.")

    lines = ["Kit Features"]
    for row in result["features"]:
        lines.append("")
        lines.append(f"- {row['id']}: {row['name']}")
        lines.append(f"  Phase: {row['phase']}")
        lines.append(f"  Tasks: {row['progress']}")

    return _text_resource("\n".join(lines))


@mcp.tool()
def feature_status(feature: Optional[str] = None, root: Optional[str] = None) -> Dict[str, Any]:
    """Phase, document presence, task progress and next action for a feature (latest by default)."""
    return _workflow(root).feature_status(feature)


@mcp.tool()
def check_feature(feature: Optional[str] = None, all_features: bool = False, root: Optional[str] = None) -> Dict[str, Any]:
    """Validate required sections and report unresolved TODO placeholders."""
    workflow = _workflow(root)
    if all_features:
        return workflow.check_all()
    return workflow.check_feature(feature)


@mcp.tool()
def complete_feature(feature: Optional[str] = None, force: bool = False, root: Optional[str] = None) -> Dict[str, Any]:
    """STEP 6 (FINAL): Mark a feature complete once every task checkbox is checked.
    Appends the completion marker to TASKS.md; force skips the open-task check."""
    return _workflow(root).complete_feature(feature, force=force)


@mcp.tool()
def update_rollup(root: Optional[str] = None) -> Dict[str, Any]:
    """Regenerate docs/PROJECT_PROGRESS_SUMMARY.md from every feature's documents."""
    return _workflow(root).rollup()


@mcp.tool()
def get_workflow_guide() -> Dict[str, Any]:
    """Get guidance on the recommended kit feature development workflow."""
    return WorkflowManager(Path.cwd()).get_workflow_guide()


if __name__ == "__main__":
    setup_logging(os.getenv("KIT_LOG_LEVEL", "WARNING"))
    mcp.run(transport="stdio")
