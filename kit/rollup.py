"""Generate docs/PROJECT_PROGRESS_SUMMARY.md from every feature's documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from . import document
from .config import Config
from .document import DocType
from .errors import IOFailure
from .models import Feature, Phase, format_feature_id
from .phase import PLAN_FILE, SPEC_FILE
from .registry import FeatureRegistry
from .templates import feature_summary

logger = logging.getLogger("kit.rollup")

TABLE_SUMMARY_LIMIT = 60


@dataclass(slots=True)
class FeatureRollup:
    id: str
    name: str
    path: str
    phase: Phase
    created: Optional[datetime]
    summary: str = "(no description)"
    intent: str = "(see SPEC.md)"
    approach: str = "(see PLAN.md)"
    open_items: str = "none"


def _parse_optional(path: Path, doc_type: DocType) -> Optional[document.Document]:
    if not path.is_file():
        return None
    try:
        return document.parse_file(path, doc_type)
    except IOFailure as e:
        logger.debug(f"Skipping unreadable {path}: {e}")
        return None


def summarize_feature(feature: Feature, specs_dir: str) -> FeatureRollup:
    """Collect a feature's rollup fields; missing documents keep the defaults."""
    rollup = FeatureRollup(
        id=format_feature_id(feature.number),
        name=feature.slug,
        path=f"{specs_dir.rstrip('/')}/{feature.dir_name}",
        phase=feature.phase,
        created=feature.created_at,
    )

    spec = _parse_optional(feature.path / SPEC_FILE, DocType.SPEC)
    if spec is not None:
        problem = document.first_paragraph(spec.get_section("PROBLEM"))
        if problem:
            rollup.summary = problem
            rollup.intent = problem
        open_items = document.first_paragraph(spec.get_section("OPEN-QUESTIONS"))
        if open_items:
            rollup.open_items = open_items

    plan = _parse_optional(feature.path / PLAN_FILE, DocType.PLAN)
    if plan is not None:
        approach = document.first_paragraph(plan.get_section("APPROACH"))
        if approach:
            rollup.approach = approach

    return rollup


def _table_summary(text: str) -> str:
    if len(text) > TABLE_SUMMARY_LIMIT:
        return text[: TABLE_SUMMARY_LIMIT - 3] + "..."
    return text


def render(rollups: List[FeatureRollup], config: Config, now: Optional[datetime] = None) -> str:
    now = now or datetime.now().astimezone()
    parts: List[str] = [
        "# PROJECT PROGRESS SUMMARY\n\n",
        "## FEATURE PROGRESS TABLE\n\n",
        "| ID | FEATURE | PATH | PHASE | CREATED | SUMMARY |\n",
        "| -- | ------- | ---- | ----- | ------- | ------- |\n",
    ]
    for item in rollups:
        created = item.created.strftime("%Y-%m-%d") if item.created else "-"
        parts.append(
            f"| {item.id} | {item.name} | `{item.path}` | {item.phase.value} | {created} | {_table_summary(item.summary)} |\n"
        )
    parts.append("\n")

    parts.append("## PROJECT INTENT\n\n")
    parts.append("<!-- TODO: describe the overall project purpose -->\n\n")

    parts.append("## GLOBAL CONSTRAINTS\n\n")
    parts.append(f"See `{config.constitution_path}` for project-wide constraints and principles.\n\n")

    parts.append("## FEATURE SUMMARIES\n\n")
    for item in rollups:
        parts.append(
            feature_summary(
                item.name,
                item.phase.value,
                item.intent,
                item.approach,
                item.open_items,
                item.path,
            )
            + "\n"
        )

    parts.append("## LAST UPDATED\n\n")
    parts.append(now.strftime("%Y-%m-%d %H:%M:%S %Z").rstrip() + "\n")
    return "".join(parts)


def generate(
    project_root: Path | str,
    config: Config,
    now: Optional[Callable[[], datetime]] = None,
) -> Path:
    """Rewrite the progress summary and return its path."""
    registry = FeatureRegistry(config.specs_path(project_root), config.feature_naming)
    rollups = [summarize_feature(feature, config.specs_dir) for feature in registry.list_features()]
    content = render(rollups, config, now() if now else None)
    path = document.write(config.progress_summary_path(project_root), content)
    logger.info(f"Updated {path} with {len(rollups)} feature(s)")
    return path
