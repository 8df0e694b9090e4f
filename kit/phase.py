"""Infer a feature's pipeline phase from the documents on disk.

Phase is never stored. Every call looks at which of SPEC.md, PLAN.md and
TASKS.md exist and, once TASKS.md exists, at its checkboxes and the
completion marker.
"""

from __future__ import annotations

import logging
from pathlib import Path

from . import progress
from .errors import IOFailure
from .models import Phase

logger = logging.getLogger("kit.phase")

SPEC_FILE = "SPEC.md"
PLAN_FILE = "PLAN.md"
TASKS_FILE = "TASKS.md"
ANALYSIS_FILE = "ANALYSIS.md"


def determine_phase_from_tasks(tasks_path: Path | str) -> Phase:
    """Phase implied by a TASKS.md that exists.

    An unreadable file or one without checkboxes means tasks still have to
    be written.
    """
    try:
        counts, has_marker = progress.read_progress(tasks_path)
    except IOFailure as e:
        logger.warning(f"Could not read {tasks_path}: {e}")
        return Phase.TASKS

    if not counts.has_tasks:
        return Phase.TASKS
    if counts.complete < counts.total:
        return Phase.IMPLEMENT
    if has_marker:
        return Phase.COMPLETE
    return Phase.REFLECT


def determine_phase(feature_path: Path | str) -> Phase:
    """Phase of the feature whose directory is ``feature_path``. Never raises."""
    feature_path = Path(feature_path)
    tasks_path = feature_path / TASKS_FILE
    if tasks_path.is_file():
        return determine_phase_from_tasks(tasks_path)
    if (feature_path / PLAN_FILE).is_file():
        return Phase.PLAN
    return Phase.SPEC
