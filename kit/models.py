"""Data models for the kit feature workflow.

This module contains the core data structures used throughout kit,
representing features, their pipeline phase, task progress, and status
reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class Phase(str, Enum):
    """Pipeline phase of a feature, inferred from the documents on disk."""

    SPEC = "spec"
    PLAN = "plan"
    TASKS = "tasks"
    IMPLEMENT = "implement"
    REFLECT = "reflect"
    COMPLETE = "complete"

    @property
    def order(self) -> int:
        return _PHASE_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Phase):
            return NotImplemented
        return self.order < other.order

    def __str__(self) -> str:
        return self.value


_PHASE_ORDER = [
    Phase.SPEC,
    Phase.PLAN,
    Phase.TASKS,
    Phase.IMPLEMENT,
    Phase.REFLECT,
    Phase.COMPLETE,
]


def format_feature_id(number: int) -> str:
    """Format a feature number as the four digit id used in reports."""
    return f"{number:04d}"


@dataclass(slots=True)
class Feature:
    """A numbered feature directory under the specs root."""

    number: int
    slug: str
    dir_name: str
    path: Path
    created_at: Optional[datetime] = None
    phase: Phase = Phase.SPEC

    @property
    def feature_id(self) -> str:
        return format_feature_id(self.number)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.feature_id,
            "number": self.number,
            "slug": self.slug,
            "dir_name": self.dir_name,
            "path": str(self.path),
            "created_at": self.created_at.isoformat(timespec="seconds") if self.created_at else None,
            "phase": self.phase.value,
        }


@dataclass(slots=True)
class TaskProgress:
    """Checkbox counts for a TASKS.md document."""

    total: int = 0
    complete: int = 0

    @property
    def incomplete(self) -> int:
        return self.total - self.complete

    @property
    def has_tasks(self) -> bool:
        return self.total > 0

    @property
    def all_complete(self) -> bool:
        return self.has_tasks and self.complete == self.total

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary representation."""
        return {
            "total": self.total,
            "complete": self.complete,
            "incomplete": self.incomplete,
        }


@dataclass(slots=True)
class FileStatus:
    """Existence of one feature document."""

    exists: bool
    path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {"exists": self.exists, "path": str(self.path)}


@dataclass(slots=True)
class FeatureStatus:
    """Complete status information for a single feature."""

    id: str
    name: str
    path: Path
    phase: Phase
    files: Dict[str, FileStatus] = field(default_factory=dict)
    summary: str = ""
    progress: Optional[TaskProgress] = None
    next_action: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": str(self.path),
            "phase": self.phase.value,
            "files": {key: value.to_dict() for key, value in self.files.items()},
            "next_action": self.next_action,
        }
        if self.summary:
            data["summary"] = self.summary
        if self.progress is not None:
            data["progress"] = self.progress.to_dict()
        return data


@dataclass(slots=True)
class CheckReport:
    """Result of validating one feature's documents."""

    feature: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feature": self.feature,
            "passed": self.passed,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
        }


@dataclass(slots=True)
class WorkflowStep:
    """Represents a single step in the kit workflow."""

    step_number: int
    name: str
    command: str
    description: str
    phase: Optional[Phase] = None
    prerequisites: List[str] = field(default_factory=list)
    expected_output: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "step_number": self.step_number,
            "name": self.name,
            "command": self.command,
            "description": self.description,
            "phase": self.phase.value if self.phase else None,
            "prerequisites": list(self.prerequisites),
            "expected_output": self.expected_output,
        }

    def can_execute(self, completed_steps: List[str]) -> bool:
        """Check if this step can be executed based on prerequisites."""
        return all(prereq in completed_steps for prereq in self.prerequisites)


# Workflow step definitions
WORKFLOW_STEPS = [
    WorkflowStep(
        step_number=1,
        name="Project Initialization",
        command="kit init",
        description="Create .kit.yaml, the specs directory and CONSTITUTION.md",
        expected_output="docs/CONSTITUTION.md with required sections",
    ),
    WorkflowStep(
        step_number=2,
        name="Specification",
        command="kit spec <feature>",
        description="Create the numbered feature directory and SPEC.md",
        phase=Phase.SPEC,
        prerequisites=["Project Initialization"],
        expected_output="docs/specs/NNNN-<slug>/SPEC.md",
    ),
    WorkflowStep(
        step_number=3,
        name="Implementation Planning",
        command="kit plan <feature>",
        description="Create PLAN.md once the specification is written",
        phase=Phase.PLAN,
        prerequisites=["Specification"],
        expected_output="docs/specs/NNNN-<slug>/PLAN.md",
    ),
    WorkflowStep(
        step_number=4,
        name="Task Breakdown",
        command="kit tasks <feature>",
        description="Create TASKS.md with markdown checkboxes",
        phase=Phase.TASKS,
        prerequisites=["Implementation Planning"],
        expected_output="docs/specs/NNNN-<slug>/TASKS.md",
    ),
    WorkflowStep(
        step_number=5,
        name="Implementation",
        command="edit TASKS.md",
        description="Work through tasks, changing '- [ ]' to '- [x]' as each is done",
        phase=Phase.IMPLEMENT,
        prerequisites=["Task Breakdown"],
        expected_output="Every checkbox in TASKS.md checked",
    ),
    WorkflowStep(
        step_number=6,
        name="Reflection",
        command="kit complete <feature>",
        description="Review the change set and append the completion marker",
        phase=Phase.REFLECT,
        prerequisites=["Implementation"],
        expected_output="<!-- REFLECTION_COMPLETE --> at the end of TASKS.md",
    ),
]
