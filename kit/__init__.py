"""Kit: spec-driven feature workflow.

Features live in numbered directories holding SPEC.md, PLAN.md and
TASKS.md; a feature's phase is read from those files.
"""

__version__ = "0.1.0"

from .errors import (
    AlreadyExists,
    ConfigError,
    GitError,
    InvalidSlug,
    IOFailure,
    KitError,
    NotFound,
    PrerequisiteMissing,
    TasksIncomplete,
)
from .models import Feature, FeatureStatus, Phase, TaskProgress
from .registry import FeatureRegistry
from .workflow import WorkflowManager
from .workspace import Workspace

__all__ = [
    "AlreadyExists",
    "ConfigError",
    "Feature",
    "FeatureRegistry",
    "FeatureStatus",
    "GitError",
    "InvalidSlug",
    "IOFailure",
    "KitError",
    "NotFound",
    "Phase",
    "PrerequisiteMissing",
    "TaskProgress",
    "TasksIncomplete",
    "WorkflowManager",
    "Workspace",
]
