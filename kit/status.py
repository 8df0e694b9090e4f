"""Per-feature status reports and next-step guidance.

Status is best-effort: a document that cannot be read is reported as
missing or empty rather than failing the whole report.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from . import progress
from .errors import IOFailure
from .models import Feature, FeatureStatus, FileStatus, Phase, format_feature_id
from .phase import PLAN_FILE, SPEC_FILE, TASKS_FILE

logger = logging.getLogger("kit.status")


def extract_spec_summary(spec_path: Path | str) -> str:
    """Text of the ``## SUMMARY`` section of SPEC.md with comments removed.

    Returns an empty string when the section is absent or still holds the
    template placeholder.
    """
    try:
        content = Path(spec_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read {spec_path}: {e}")
        return ""

    in_summary = False
    lines: List[str] = []
    for raw in content.splitlines():
        line = raw.strip()
        if line.startswith("## SUMMARY"):
            in_summary = True
            continue
        if in_summary and line.startswith("## "):
            break
        if not in_summary or not line:
            continue
        if line.startswith("<!--"):
            continue
        if "-->" in line:
            # trailing text after an inline comment
            line = line[line.index("-->") + 3:].strip()
            if not line:
                continue
        lines.append(line)

    summary = " ".join(lines)
    if "todo" in summary.lower():
        return ""
    return summary


def get_feature_status(feature: Feature) -> FeatureStatus:
    spec_path = feature.path / SPEC_FILE
    plan_path = feature.path / PLAN_FILE
    tasks_path = feature.path / TASKS_FILE

    status = FeatureStatus(
        id=format_feature_id(feature.number),
        name=feature.slug,
        path=feature.path,
        phase=feature.phase,
        files={
            "spec": FileStatus(spec_path.is_file(), spec_path),
            "plan": FileStatus(plan_path.is_file(), plan_path),
            "tasks": FileStatus(tasks_path.is_file(), tasks_path),
        },
    )

    if status.files["spec"].exists:
        status.summary = extract_spec_summary(spec_path)

    if status.files["tasks"].exists:
        try:
            counts, _ = progress.read_progress(tasks_path)
        except IOFailure as e:
            logger.debug(f"Ignoring unreadable tasks file: {e}")
        else:
            if counts.has_tasks:
                status.progress = counts

    status.next_action = next_action(status)
    return status


def next_action(status: FeatureStatus) -> str:
    """The single next thing to do for a feature, naming the command to run."""
    if not status.files["spec"].exists:
        return f"Create specification: run `kit spec {status.name}`"
    if not status.files["plan"].exists:
        return f"Create implementation plan: run `kit plan {status.name}`"
    if not status.files["tasks"].exists:
        return f"Create task list: run `kit tasks {status.name}`"

    tasks_path = status.files["tasks"].path
    if status.progress is not None and status.progress.has_tasks:
        remaining = status.progress.incomplete
        if remaining > 0:
            return f"Complete {remaining} remaining task(s) in {tasks_path}"
        if status.phase == Phase.COMPLETE:
            return "Feature complete"
        return f"All tasks complete. Reflect on the change set, then run `kit complete {status.name}`"

    return f"Define tasks with markdown checkboxes in {tasks_path}"


def progress_table(features: Iterable[Feature]) -> List[Tuple[str, str, str, str]]:
    """Rows of ``(id, slug, phase, complete/total)`` for a cross-feature view."""
    rows: List[Tuple[str, str, str, str]] = []
    for feature in features:
        tasks_path = feature.path / TASKS_FILE
        counts = "-"
        if tasks_path.is_file():
            try:
                task_progress, _ = progress.read_progress(tasks_path)
            except IOFailure:
                task_progress = None
            if task_progress is not None and task_progress.has_tasks:
                counts = f"{task_progress.complete}/{task_progress.total}"
        rows.append((format_feature_id(feature.number), feature.slug, feature.phase.value, counts))
    return rows
