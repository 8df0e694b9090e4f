"""Workspace management for the kit workflow.

This module owns the project layout (``.kit.yaml``, the constitution, the
specs directory) and scaffolds and validates the per-feature documents.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config as kit_config
from . import document, git, progress, rollup
from .config import Config
from .document import DocType
from .errors import GitError, IOFailure, KitError, PrerequisiteMissing, TasksIncomplete
from .kit_logging import (
    ObservabilityHooks,
    log_document_event,
    log_feature_event,
    log_operation,
    log_performance,
)
from .models import CheckReport, Feature, FeatureStatus, Phase
from .phase import ANALYSIS_FILE, PLAN_FILE, SPEC_FILE, TASKS_FILE, determine_phase_from_tasks
from .registry import FeatureRegistry
from .status import get_feature_status, progress_table
from .templates import agent_pointer, template_for

logger = logging.getLogger("kit.workspace")

# (filename, document type, command that creates it, missing file is an error)
CHECKED_DOCUMENTS = (
    (SPEC_FILE, DocType.SPEC, "kit spec", True),
    (PLAN_FILE, DocType.PLAN, "kit plan", False),
    (TASKS_FILE, DocType.TASKS, "kit tasks", False),
)


class Workspace:
    """Manage kit documents within a repository."""

    def __init__(
        self,
        root: Path | str,
        config: Optional[Config] = None,
        hooks: Optional[ObservabilityHooks] = None,
    ):
        self.root = Path(root).resolve()
        self.config = config if config is not None else kit_config.load_or_default(self.root)
        self.hooks = hooks if hooks is not None else ObservabilityHooks()
        self.registry = FeatureRegistry(self.specs_dir, self.config.feature_naming)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def specs_dir(self) -> Path:
        return self.config.specs_path(self.root)

    @property
    def constitution_path(self) -> Path:
        return self.config.constitution_abs_path(self.root)

    @property
    def progress_summary_path(self) -> Path:
        return self.config.progress_summary_path(self.root)

    @property
    def is_initialized(self) -> bool:
        return kit_config.exists(self.root)

    # ------------------------------------------------------------------
    # Project initialization
    # ------------------------------------------------------------------

    @log_performance("init_project")
    def init_project(self) -> Dict[str, Any]:
        """Create or merge the project scaffolding. Safe to run repeatedly."""
        with log_operation("init_project", root=str(self.root)):
            created_config = False
            if self.is_initialized:
                self.config = kit_config.load(self.root)
                self.registry = FeatureRegistry(self.specs_dir, self.config.feature_naming)
            else:
                kit_config.save(self.root, self.config)
                created_config = True

            try:
                (self.root / "docs").mkdir(parents=True, exist_ok=True)
                self.specs_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise IOFailure(self.specs_dir, e) from e

            constitution_existed = document.exists(self.constitution_path)
            merged_sections = document.merge_document(
                self.constitution_path,
                template_for(DocType.CONSTITUTION),
                DocType.CONSTITUTION,
            )
            if not constitution_existed:
                constitution_state = "created"
            elif merged_sections:
                constitution_state = "merged"
            else:
                constitution_state = "unchanged"

            agents_created: List[str] = []
            agents_skipped: List[str] = []
            for agent_file in self.config.agents:
                agent_name = agent_file[:-3] if agent_file.endswith(".md") else agent_file
                content = agent_pointer(agent_name, self.config.constitution_path, self.config.specs_dir)
                if document.write_if_missing(self.root / agent_file, content):
                    agents_created.append(agent_file)
                else:
                    agents_skipped.append(agent_file)

        self.hooks.log_workflow_event(
            "project_initialized",
            root=str(self.root),
            created_config=created_config,
            constitution=constitution_state,
        )
        return {
            "root": str(self.root),
            "config_path": str(kit_config.config_path(self.root)),
            "created_config": created_config,
            "specs_dir": str(self.specs_dir),
            "constitution_path": str(self.constitution_path),
            "constitution": constitution_state,
            "merged_sections": merged_sections,
            "agents_created": agents_created,
            "agents_skipped": agents_skipped,
        }

    # ------------------------------------------------------------------
    # Feature helpers
    # ------------------------------------------------------------------

    def list_features(self) -> List[Feature]:
        return self.registry.list_features()

    def resolve(self, ref: Optional[str] = None) -> Feature:
        """Resolve a feature reference, defaulting to the highest numbered feature."""
        if ref:
            return self.registry.resolve(ref)
        active = self.registry.find_active_feature()
        if active is None:
            raise KitError("no features found. Run 'kit spec <feature>' to create one")
        return active

    def refresh_rollup(self) -> Path:
        return rollup.generate(self.root, self.config)

    def _refresh_rollup_quietly(self) -> Optional[str]:
        """Regenerate the progress summary; a failure is logged, not raised."""
        try:
            return str(self.refresh_rollup())
        except KitError as e:
            logger.warning(f"Could not update {self.progress_summary_path.name}: {e}")
            return None

    def _write_document(self, feature: Feature, filename: str, doc_type: DocType, created: List[str]) -> None:
        if document.write_if_missing(feature.path / filename, template_for(doc_type)):
            created.append(filename)
            log_document_event(self.hooks, "scaffolded", doc_type.value, feature.dir_name)

    def _ensure_branch(self, feature: Feature) -> Optional[Dict[str, Any]]:
        branching = self.config.branching
        if not branching.enabled or not git.is_repo(self.root):
            return None

        name = branching.branch_name(
            f"{feature.number:0{self.config.feature_naming.numeric_width}d}", feature.slug
        )
        dirty = git.has_uncommitted_changes(self.root)
        if dirty:
            logger.warning(f"Working tree has uncommitted changes; they will follow the switch to {name}")
        try:
            created = git.ensure_branch(self.root, name, branching.base_branch)
        except GitError as e:
            logger.warning(f"Could not create branch {name}: {e}")
            return {"name": name, "created": False, "uncommitted_changes": dirty, "error": str(e)}
        return {"name": name, "created": created, "uncommitted_changes": dirty}

    def _feature_result(self, feature: Feature, created_files: List[str], **extra: Any) -> Dict[str, Any]:
        refreshed = self.registry.resolve(feature.dir_name)
        return {
            "feature": refreshed.to_dict(),
            "created_files": created_files,
            "rollup_path": self._refresh_rollup_quietly(),
            **extra,
        }

    # ------------------------------------------------------------------
    # Document scaffolding
    # ------------------------------------------------------------------

    @log_performance("scaffold_spec")
    def scaffold_spec(self, ref: str, branch: bool = True) -> Dict[str, Any]:
        """Create (or reuse) a feature and its SPEC.md."""
        with log_operation("scaffold_spec", ref=ref):
            feature, created_feature = self.registry.ensure_exists(ref)
            if created_feature:
                log_feature_event(self.hooks, "created", feature.dir_name, slug=feature.slug)

            created_files: List[str] = []
            self._write_document(feature, SPEC_FILE, DocType.SPEC, created_files)
            branch_info = self._ensure_branch(feature) if branch else None

        return self._feature_result(
            feature,
            created_files,
            created_feature=created_feature,
            branch=branch_info,
        )

    @log_performance("scaffold_plan")
    def scaffold_plan(self, ref: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
        """Create PLAN.md once SPEC.md exists (or unconditionally when forced)."""
        with log_operation("scaffold_plan", ref=ref, force=force):
            feature = self.resolve(ref)
            created_files: List[str] = []
            if not document.exists(feature.path / SPEC_FILE):
                if not (force or self.config.allow_out_of_order):
                    raise PrerequisiteMissing(SPEC_FILE, f"kit spec {feature.slug}")
                self._write_document(feature, SPEC_FILE, DocType.SPEC, created_files)
            self._write_document(feature, PLAN_FILE, DocType.PLAN, created_files)

        return self._feature_result(feature, created_files)

    @log_performance("scaffold_tasks")
    def scaffold_tasks(self, ref: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
        """Create TASKS.md once PLAN.md exists (or unconditionally when forced)."""
        with log_operation("scaffold_tasks", ref=ref, force=force):
            feature = self.resolve(ref)
            created_files: List[str] = []
            if not document.exists(feature.path / PLAN_FILE):
                if not (force or self.config.allow_out_of_order):
                    raise PrerequisiteMissing(PLAN_FILE, f"kit plan {feature.slug}")
                self._write_document(feature, SPEC_FILE, DocType.SPEC, created_files)
                self._write_document(feature, PLAN_FILE, DocType.PLAN, created_files)
            self._write_document(feature, TASKS_FILE, DocType.TASKS, created_files)

        return self._feature_result(feature, created_files)

    def scaffold_analysis(self, ref: str) -> Dict[str, Any]:
        feature = self.resolve(ref)
        created_files: List[str] = []
        self._write_document(feature, ANALYSIS_FILE, DocType.ANALYSIS, created_files)
        return self._feature_result(feature, created_files)

    @log_performance("scaffold_all")
    def scaffold_all(self, ref: str, branch: bool = False) -> Dict[str, Any]:
        """Create a feature with every pipeline document in one step."""
        with log_operation("scaffold_all", ref=ref):
            feature, created_feature = self.registry.ensure_exists(ref)
            if created_feature:
                log_feature_event(self.hooks, "created", feature.dir_name, slug=feature.slug)

            created_files: List[str] = []
            for filename, doc_type in (
                (SPEC_FILE, DocType.SPEC),
                (PLAN_FILE, DocType.PLAN),
                (TASKS_FILE, DocType.TASKS),
                (ANALYSIS_FILE, DocType.ANALYSIS),
            ):
                self._write_document(feature, filename, doc_type, created_files)
            branch_info = self._ensure_branch(feature) if branch else None

        return self._feature_result(
            feature,
            created_files,
            created_feature=created_feature,
            branch=branch_info,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check_feature(self, ref: Optional[str] = None) -> CheckReport:
        """Validate a feature's documents for required sections and placeholders."""
        feature = self.resolve(ref)
        report = CheckReport(feature=feature.dir_name)

        for filename, doc_type, command, required in CHECKED_DOCUMENTS:
            path = feature.path / filename
            if not document.exists(path):
                message = f"{filename} not found. Run '{command} {feature.slug}' to create it"
                (report.errors if required else report.warnings).append(message)
                continue

            try:
                doc = document.parse_file(path, doc_type)
            except IOFailure as e:
                report.errors.append(f"Failed to parse {filename}: {e}")
                continue

            report.errors.extend(str(error) for error in doc.validate())
            if doc.has_unresolved_placeholders():
                report.warnings.append(f"{filename} has unresolved TODO placeholders")

        logger.info(
            f"Checked {feature.dir_name}: {len(report.errors)} error(s), {len(report.warnings)} warning(s)"
        )
        return report

    def check_all(self) -> List[CheckReport]:
        return [self.check_feature(feature.dir_name) for feature in self.list_features()]

    # ------------------------------------------------------------------
    # Status and completion
    # ------------------------------------------------------------------

    def feature_status(self, ref: Optional[str] = None) -> FeatureStatus:
        return get_feature_status(self.resolve(ref))

    def progress_rows(self) -> List[tuple]:
        return progress_table(self.list_features())

    @log_performance("complete_feature")
    def complete_feature(self, ref: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
        """Append the completion marker to TASKS.md once every task is checked."""
        feature = self.resolve(ref)
        tasks_path = feature.path / TASKS_FILE

        with log_operation("complete_feature", feature=feature.dir_name, force=force):
            if not document.exists(tasks_path):
                raise KitError(
                    f"TASKS.md not found at {tasks_path}. Run 'kit tasks {feature.slug}' first"
                )

            if determine_phase_from_tasks(tasks_path) == Phase.COMPLETE:
                logger.info(f"Feature '{feature.slug}' is already marked complete")
                return {
                    "feature": feature.to_dict(),
                    "already_complete": True,
                    "marker_added": False,
                    "rollup_path": None,
                }

            counts, _ = progress.read_progress(tasks_path)
            if not force and counts.has_tasks and counts.incomplete > 0:
                raise TasksIncomplete(counts.incomplete, counts.total, tasks_path)

            marker_added = progress.append_completion_marker(tasks_path)

        log_feature_event(
            self.hooks,
            "completed",
            feature.dir_name,
            total_tasks=counts.total,
            completed_tasks=counts.complete,
            forced=force,
        )
        result = self._feature_result(feature, [])
        result.update({"already_complete": False, "marker_added": marker_added})
        return result
