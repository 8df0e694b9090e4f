"""Markdown document parsing and validation.

Documents are split into sections at level-2 headers (``## NAME``). Each
document type has a fixed list of required sections; validation reports
every missing one instead of stopping at the first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from .errors import IOFailure

logger = logging.getLogger("kit.document")

SECTION_HEADER = re.compile(r"^##\s+(.+)$", re.MULTILINE)
PLACEHOLDER = re.compile(r"<!--\s*TODO:.*?-->", re.DOTALL)
TRACE_LINK = re.compile(r"\[(?:SPEC|PLAN)-\d+\]")

SUMMARY_LIMIT = 120


class DocType(str, Enum):
    CONSTITUTION = "constitution"
    SPEC = "spec"
    PLAN = "plan"
    TASKS = "tasks"
    ANALYSIS = "analysis"
    PROJECT_PROGRESS_SUMMARY = "project_progress_summary"

    @property
    def filename(self) -> str:
        return DOC_FILENAMES[self]

    def __str__(self) -> str:
        return self.value


DOC_FILENAMES: Dict[DocType, str] = {
    DocType.CONSTITUTION: "CONSTITUTION.md",
    DocType.SPEC: "SPEC.md",
    DocType.PLAN: "PLAN.md",
    DocType.TASKS: "TASKS.md",
    DocType.ANALYSIS: "ANALYSIS.md",
    DocType.PROJECT_PROGRESS_SUMMARY: "PROJECT_PROGRESS_SUMMARY.md",
}

REQUIRED_SECTIONS: Dict[DocType, List[str]] = {
    DocType.CONSTITUTION: ["PRINCIPLES", "CONSTRAINTS", "NON-GOALS", "DEFINITIONS"],
    DocType.SPEC: [
        "PROBLEM",
        "GOALS",
        "NON-GOALS",
        "USERS",
        "REQUIREMENTS",
        "ACCEPTANCE",
        "EDGE-CASES",
        "OPEN-QUESTIONS",
    ],
    DocType.PLAN: ["SUMMARY", "APPROACH", "COMPONENTS", "DATA", "INTERFACES", "RISKS", "TESTING"],
    DocType.TASKS: ["TASKS", "DEPENDENCIES", "NOTES"],
    DocType.ANALYSIS: ["UNDERSTANDING", "QUESTIONS", "RESEARCH", "CLARIFICATIONS", "ASSUMPTIONS", "RISKS"],
    DocType.PROJECT_PROGRESS_SUMMARY: [
        "FEATURE PROGRESS TABLE",
        "PROJECT INTENT",
        "GLOBAL CONSTRAINTS",
        "FEATURE SUMMARIES",
        "LAST UPDATED",
    ],
}


def required_sections(doc_type: DocType) -> List[str]:
    return list(REQUIRED_SECTIONS.get(doc_type, []))


@dataclass(slots=True)
class Section:
    name: str
    content: str
    line: int


@dataclass(slots=True)
class ValidationError:
    """A required section that is absent from a document."""

    document: str
    section: str
    message: str
    fix: str

    def __str__(self) -> str:
        return f"{self.document}: {self.message}"


@dataclass(slots=True)
class Document:
    """A parsed markdown document."""

    content: str
    path: str = ""
    doc_type: Optional[DocType] = None
    sections: List[Section] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Section lookup
    # ------------------------------------------------------------------

    def get_section(self, name: str) -> Optional[Section]:
        """Return the first section whose name matches, ignoring case."""
        wanted = name.casefold()
        for section in self.sections:
            if section.name.casefold() == wanted:
                return section
        return None

    def has_section(self, name: str) -> bool:
        return self.get_section(name) is not None

    def section_names(self) -> List[str]:
        return [section.name for section in self.sections]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, required: Optional[List[str]] = None) -> List[ValidationError]:
        """Return one error per required section missing from the document.

        ``required`` defaults to the list registered for the document type.
        """
        if required is None:
            required = required_sections(self.doc_type) if self.doc_type else []

        errors: List[ValidationError] = []
        for name in required:
            if self.has_section(name):
                continue
            errors.append(
                ValidationError(
                    document=self.path,
                    section=name,
                    message=f"missing required section '{name}'",
                    fix=f"Add a '## {name}' section to {self.path}",
                )
            )
        return errors

    def unresolved_placeholders(self) -> List[str]:
        return PLACEHOLDER.findall(self.content)

    def has_unresolved_placeholders(self) -> bool:
        return PLACEHOLDER.search(self.content) is not None

    def links(self) -> List[str]:
        """Traceability links such as ``[SPEC-01]`` in document order."""
        return TRACE_LINK.findall(self.content)


def parse(content: str, path: str | Path = "", doc_type: Optional[DocType] = None) -> Document:
    """Split ``content`` into sections at level-2 headers.

    A section's body runs from the end of its header line up to the next
    level-2 header or the end of the document, with surrounding whitespace
    stripped. Text before the first header belongs to no section.
    """
    matches = list(SECTION_HEADER.finditer(content))
    sections: List[Section] = []
    for index, match in enumerate(matches):
        body_end = matches[index + 1].start() if index + 1 < len(matches) else len(content)
        sections.append(
            Section(
                name=match.group(1).strip(),
                content=content[match.end():body_end].strip(),
                line=content.count("\n", 0, match.start()) + 1,
            )
        )
    return Document(content=content, path=str(path), doc_type=doc_type, sections=sections)


def parse_file(path: Path | str, doc_type: Optional[DocType] = None) -> Document:
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(path, e) from e
    return parse(content, path, doc_type)


# ----------------------------------------------------------------------
# File helpers
# ----------------------------------------------------------------------


def exists(path: Path | str) -> bool:
    return Path(path).is_file()


def write(path: Path | str, content: str) -> Path:
    """Write ``content`` to ``path``, creating parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise IOFailure(path, e) from e
    logger.debug(f"Wrote {path}")
    return path


def write_if_missing(path: Path | str, content: str) -> bool:
    """Write ``content`` only when ``path`` does not exist yet. Returns True if written."""
    if exists(path):
        return False
    write(path, content)
    return True


def merge_document(path: Path | str, template: str, doc_type: DocType) -> List[str]:
    """Append the template sections that an existing document lacks.

    Existing content is never rewritten. If the file is absent, the whole
    template is written. Returns the names of the sections added.
    """
    path = Path(path)
    template_doc = parse(template, doc_type=doc_type)
    if not exists(path):
        write(path, template)
        return [section.name for section in template_doc.sections]

    existing = parse_file(path, doc_type)
    missing = [section for section in template_doc.sections if not existing.has_section(section.name)]
    if not missing:
        return []

    merged = existing.content.rstrip("\n")
    for section in missing:
        merged += f"\n\n## {section.name}\n\n{section.content}"
    write(path, merged + "\n")
    logger.info(f"Merged {len(missing)} missing section(s) into {path}")
    return [section.name for section in missing]


def first_paragraph(section: Optional[Section], limit: int = SUMMARY_LIMIT) -> str:
    """First paragraph of a section body with HTML comment lines skipped."""
    if section is None:
        return ""
    lines: List[str] = []
    for raw in section.content.splitlines():
        line = raw.strip()
        if line.startswith("<!--"):
            continue
        if not line:
            if lines:
                break
            continue
        lines.append(line)
    text = " ".join(lines)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text
