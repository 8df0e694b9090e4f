"""Workflow management for kit.

This module wraps the workspace with dictionary responses that carry
next-step guidance, so that the CLI and the MCP server present the same
workflow. Expected failures (``KitError``) come back as ``error`` payloads;
anything else is logged with context and re-raised.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import Config
from .errors import (
    AlreadyExists,
    ConfigError,
    InvalidSlug,
    KitError,
    NotFound,
    PrerequisiteMissing,
    TasksIncomplete,
)
from .kit_logging import ObservabilityHooks, log_error_with_context
from .models import WORKFLOW_STEPS, Phase
from .workspace import Workspace

logger = logging.getLogger("kit.workflow")

# Which tool to call next once a feature reaches a phase.
NEXT_STEP_BY_PHASE: Dict[Phase, str] = {
    Phase.SPEC: "create_plan",
    Phase.PLAN: "create_tasks",
    Phase.TASKS: "create_tasks",
    Phase.IMPLEMENT: "feature_status",
    Phase.REFLECT: "complete_feature",
    Phase.COMPLETE: "list_features",
}


def _suggestion_for(error: KitError) -> str:
    if isinstance(error, InvalidSlug):
        return "Use lowercase kebab-case with at most five words, for example 'user-auth'"
    if isinstance(error, AlreadyExists):
        return f"Refer to the existing feature by its slug '{error.slug}' instead of creating it again"
    if isinstance(error, NotFound):
        return f"Run 'kit spec {error.ref}' to create it, or list_features to see what exists"
    if isinstance(error, PrerequisiteMissing):
        return f"Run '{error.command}' first, or pass force=True to scaffold out of order"
    if isinstance(error, TasksIncomplete):
        return f"Check off the remaining tasks in {error.path}, or pass force=True"
    if isinstance(error, ConfigError):
        return "Run 'kit init' in the project root to create .kit.yaml"
    return "Check the message above and run 'kit status' for the current state"


class WorkflowManager:
    """Manages the complete kit workflow for feature development."""

    def __init__(self, root: Path | str, config: Optional[Config] = None):
        """Initialize workflow manager with workspace root."""
        self.hooks = ObservabilityHooks()
        self.workspace = Workspace(root, config=config, hooks=self.hooks)

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        self.hooks.register_hook(event_type, callback)

    def _goal(self) -> int:
        return self.workspace.config.goal_percentage

    def _failure(self, error: Exception, operation: str, next_step: str, **context: Any) -> Dict[str, Any]:
        """Turn an expected error into a response; re-raise anything else."""
        if not isinstance(error, KitError):
            log_error_with_context(error, {"operation": operation, "root": str(self.workspace.root), **context})
            raise error
        logger.info(f"{operation} failed: {error}")
        return {
            "error": str(error),
            "error_type": type(error).__name__,
            "suggestion": _suggestion_for(error),
            "next_suggested_step": next_step,
            "message": f"Error: {error}",
        }

    # ------------------------------------------------------------------
    # Project setup
    # ------------------------------------------------------------------

    def init_project(self) -> Dict[str, Any]:
        try:
            result = self.workspace.init_project()
        except Exception as e:
            return self._failure(e, "init_project", "init_project")

        result.update({
            "message": f"Kit project initialized at {result['root']} (constitution {result['constitution']})",
            "next_suggested_step": "create_spec",
            "workflow_tip": f"Next: edit {result['constitution_path']}, then create your first feature with create_spec",
        })
        return result

    # ------------------------------------------------------------------
    # Document scaffolding
    # ------------------------------------------------------------------

    def create_spec(self, feature: str, branch: bool = True) -> Dict[str, Any]:
        """Create or reuse a feature and scaffold SPEC.md."""
        try:
            result = self.workspace.scaffold_spec(feature, branch=branch)
        except Exception as e:
            return self._failure(e, "create_spec", "create_spec", feature=feature)

        info = result["feature"]
        verb = "Created" if result["created_feature"] else "Using existing"
        result.update({
            "message": f"{verb} feature {info['dir_name']}",
            "spec_path": str(Path(info["path"]) / "SPEC.md"),
            "next_suggested_step": "create_plan",
            "workflow_tip": (
                f"Ask clarifying questions until understanding reaches {self._goal()}%, "
                f"then fill in SPEC.md and run create_plan for '{info['slug']}'"
            ),
        })
        return result

    def create_plan(self, feature: str, force: bool = False) -> Dict[str, Any]:
        try:
            result = self.workspace.scaffold_plan(feature, force=force)
        except Exception as e:
            return self._failure(e, "create_plan", "create_spec", feature=feature)

        info = result["feature"]
        result.update({
            "message": f"PLAN.md ready for {info['dir_name']}",
            "plan_path": str(Path(info["path"]) / "PLAN.md"),
            "next_suggested_step": "create_tasks",
            "workflow_tip": f"Next: describe the approach in PLAN.md, then run create_tasks for '{info['slug']}'",
        })
        return result

    def create_tasks(self, feature: str, force: bool = False) -> Dict[str, Any]:
        try:
            result = self.workspace.scaffold_tasks(feature, force=force)
        except Exception as e:
            return self._failure(e, "create_tasks", "create_plan", feature=feature)

        info = result["feature"]
        result.update({
            "message": f"TASKS.md ready for {info['dir_name']}",
            "tasks_path": str(Path(info["path"]) / "TASKS.md"),
            "next_suggested_step": "feature_status",
            "workflow_tip": "Next: list tasks as '- [ ]' checkboxes and check them off as you implement",
        })
        return result

    def create_analysis(self, feature: str) -> Dict[str, Any]:
        try:
            result = self.workspace.scaffold_analysis(feature)
        except Exception as e:
            return self._failure(e, "create_analysis", "create_spec", feature=feature)

        info = result["feature"]
        result.update({
            "message": f"ANALYSIS.md ready for {info['dir_name']}",
            "analysis_path": str(Path(info["path"]) / "ANALYSIS.md"),
            "next_suggested_step": NEXT_STEP_BY_PHASE[Phase(info["phase"])],
            "workflow_tip": (
                "Record open questions and assumptions in ANALYSIS.md until understanding "
                f"reaches {self._goal()}%, then continue planning"
            ),
        })
        return result

    def scaffold_feature(self, feature: str, branch: bool = False) -> Dict[str, Any]:
        try:
            result = self.workspace.scaffold_all(feature, branch=branch)
        except Exception as e:
            return self._failure(e, "scaffold_feature", "create_spec", feature=feature)

        info = result["feature"]
        result.update({
            "message": f"Scaffolded {len(result['created_files'])} document(s) for {info['dir_name']}",
            "next_suggested_step": "check_feature",
            "workflow_tip": "Fill in every section, then run check_feature to find what is still missing",
        })
        return result

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check_feature(self, feature: str) -> Dict[str, Any]:
        try:
            report = self.workspace.check_feature(feature)
        except Exception as e:
            return self._failure(e, "check_feature", "list_features", feature=feature)

        result = report.to_dict()
        if report.passed and not report.warnings:
            result["message"] = f"All checks passed for {report.feature}"
        elif report.passed:
            result["message"] = f"{report.feature} passed with {len(report.warnings)} warning(s)"
        else:
            result["message"] = f"{report.feature} failed validation with {len(report.errors)} error(s)"
        result["next_suggested_step"] = "feature_status" if report.passed else "check_feature"
        return result

    def check_all(self) -> Dict[str, Any]:
        try:
            reports = self.workspace.check_all()
        except Exception as e:
            return self._failure(e, "check_all", "list_features")

        failed = [report.feature for report in reports if not report.passed]
        if not reports:
            message = "No features found. Run 'kit spec <feature>' to create one."
        elif failed:
            message = f"{len(failed)} feature(s) have validation errors"
        else:
            message = f"All {len(reports)} feature(s) passed validation"
        return {
            "reports": [report.to_dict() for report in reports],
            "passed": not failed,
            "failed_features": failed,
            "message": message,
        }

    # ------------------------------------------------------------------
    # Status and completion
    # ------------------------------------------------------------------

    def list_features(self) -> Dict[str, Any]:
        try:
            features = self.workspace.list_features()
        except Exception as e:
            return self._failure(e, "list_features", "init_project")

        return {
            "features": [feature.to_dict() for feature in features],
            "count": len(features),
            "message": f"Found {len(features)} features" if features else "No features yet. Use create_spec to create your first feature.",
        }

    def feature_status(self, feature: Optional[str] = None) -> Dict[str, Any]:
        """Status of one feature; the highest numbered feature when none is given."""
        try:
            status = self.workspace.feature_status(feature)
        except Exception as e:
            return self._failure(e, "feature_status", "list_features", feature=feature)

        result = status.to_dict()
        result.update({
            "message": f"{status.id}-{status.name} is in phase '{status.phase.value}'",
            "next_suggested_step": NEXT_STEP_BY_PHASE[status.phase],
            "workflow_tip": status.next_action,
        })
        return result

    def project_status(self) -> Dict[str, Any]:
        try:
            rows = self.workspace.progress_rows()
        except Exception as e:
            return self._failure(e, "project_status", "init_project")

        return {
            "features": [
                {"id": row[0], "name": row[1], "phase": row[2], "progress": row[3]}
                for row in rows
            ],
            "count": len(rows),
            "message": f"{len(rows)} feature(s) tracked",
        }

    def complete_feature(self, feature: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
        try:
            result = self.workspace.complete_feature(feature, force=force)
        except Exception as e:
            return self._failure(e, "complete_feature", "feature_status", feature=feature)

        info = result["feature"]
        if result["already_complete"]:
            message = f"Feature '{info['slug']}' is already marked complete"
        else:
            message = f"Feature '{info['slug']}' marked complete"
        result.update({
            "message": message,
            "next_suggested_step": "create_spec",
            "workflow_tip": "Start the next feature with create_spec",
        })
        return result

    def rollup(self) -> Dict[str, Any]:
        try:
            path = self.workspace.refresh_rollup()
        except Exception as e:
            return self._failure(e, "rollup", "init_project")

        return {
            "rollup_path": str(path),
            "message": f"Updated {path}",
        }

    # ------------------------------------------------------------------
    # Workflow guidance
    # ------------------------------------------------------------------

    def get_workflow_guide(self) -> Dict[str, Any]:
        """Get comprehensive workflow guidance."""
        return {
            "workflow_overview": "Feature development workflow in recommended order",
            "steps": [step.to_dict() for step in WORKFLOW_STEPS],
            "tips": [
                "Each document builds on the previous one: SPEC.md, then PLAN.md, then TASKS.md",
                "Phase is read from the files on disk, so editing TASKS.md is how progress is recorded",
                "Run check_feature to find missing sections and TODO placeholders",
                "Only complete a feature when every checkbox in TASKS.md is checked",
            ],
        }
