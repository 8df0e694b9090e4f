"""Markdown templates for kit documents."""

from __future__ import annotations

import textwrap
from typing import Dict

from .document import DocType

CONSTITUTION = """\
# CONSTITUTION

## PRINCIPLES

<!-- TODO: define core principles that guide all decisions -->

## CONSTRAINTS

<!-- TODO: define invariant rules that must never be violated -->

## CHANGE CLASSIFICATION

<!-- all work falls into one of two tracks; classify before acting -->

### Spec-Driven (Formal)

<!-- use when: new features, kit spec, substantial architectural or behavioral changes -->
<!-- workflow: SPEC.md -> PLAN.md -> TASKS.md -> implement -> reflect -->

### Ad Hoc (Lightweight)

<!-- use when: bug fixes, refactors, dependency updates, config changes, small refinements -->
<!-- workflow: understand -> implement -> verify -->
<!-- do NOT create SPEC.md / PLAN.md / TASKS.md for ad hoc work -->

## NON-GOALS

<!-- TODO: define what this project explicitly will not do -->

## DEFINITIONS

<!-- TODO: define key terms used throughout the project -->
"""

SPEC = """\
# SPEC

## SUMMARY

<!-- TODO: 1-2 sentence business summary of this feature -->

## PROBLEM

<!-- TODO: describe the problem being solved -->

## GOALS

<!-- TODO: list what this feature must achieve -->

## NON-GOALS

<!-- TODO: list what this feature will not do -->

## USERS

<!-- TODO: identify who will use this feature -->

## REQUIREMENTS

<!-- TODO: list functional requirements -->

## ACCEPTANCE

<!-- TODO: define acceptance criteria -->

## EDGE-CASES

<!-- TODO: document edge cases and how they should be handled -->

## OPEN-QUESTIONS

<!-- TODO: list unresolved questions -->
"""

PLAN = """\
# PLAN

## SUMMARY

<!-- TODO: brief overview of the implementation approach -->

## APPROACH

<!-- TODO: explain the strategy, not code -->

## COMPONENTS

<!-- TODO: list major components and their responsibilities -->

## DATA

<!-- TODO: describe data structures and storage -->

## INTERFACES

<!-- TODO: define APIs, contracts, and integration points -->

## RISKS

<!-- TODO: identify risks and mitigation strategies -->

## TESTING

<!-- TODO: describe testing strategy -->
"""

# Progress is tracked with markdown checkboxes: "- [ ]" open, "- [x]" done.
TASKS = """\
# TASKS

## PROGRESS TABLE

| ID | TASK | STATUS | OWNER | DEPENDENCIES |
| -- | ---- | ------ | ----- | ------------ |
| T001 | <!-- task description --> | todo | <!-- owner --> | <!-- deps --> |

## TASKS

Use markdown checkboxes to track completion:

- [ ] T001: <!-- task description -->

## TASK DETAILS

For each task, provide:

### T001
- **GOAL**: <!-- one sentence outcome -->
- **SCOPE**: <!-- tight bullets, no fluff -->
- **ACCEPTANCE**: <!-- concrete checks -->
- **NOTES**: <!-- only if necessary -->

## DEPENDENCIES

<!-- TODO: document task dependencies and ordering -->

## NOTES

<!-- TODO: additional context or implementation notes -->
"""

ANALYSIS = """\
# ANALYSIS

## UNDERSTANDING

**Current Understanding: 0%**

<!-- understanding percentage tracked at top and bottom -->

## QUESTIONS

<!-- TODO: open questions for the user/team -->

## RESEARCH

<!-- technical investigation notes: library comparisons, benchmarks, compatibility findings -->

## CLARIFICATIONS

<!-- resolved questions with answers -->

## ASSUMPTIONS

<!-- documented assumptions made during analysis -->

## RISKS

<!-- identified risks or concerns -->

---

**Understanding: 0%**
"""

PROJECT_PROGRESS_SUMMARY = """\
# PROJECT PROGRESS SUMMARY

## FEATURE PROGRESS TABLE

| ID | FEATURE | PATH | PHASE | CREATED | SUMMARY |
| -- | ------- | ---- | ----- | ------- | ------- |

## PROJECT INTENT

<!-- TODO: describe the overall project purpose -->

## GLOBAL CONSTRAINTS

<!-- TODO: summarize key constraints from CONSTITUTION.md -->

## FEATURE SUMMARIES

<!-- feature summaries will be generated here -->

## LAST UPDATED

<!-- timestamp updated by kit rollup -->
"""

_TEMPLATES: Dict[DocType, str] = {
    DocType.CONSTITUTION: CONSTITUTION,
    DocType.SPEC: SPEC,
    DocType.PLAN: PLAN,
    DocType.TASKS: TASKS,
    DocType.ANALYSIS: ANALYSIS,
    DocType.PROJECT_PROGRESS_SUMMARY: PROJECT_PROGRESS_SUMMARY,
}


def template_for(doc_type: DocType) -> str:
    """Return the starting content for a document type."""
    return _TEMPLATES[DocType(doc_type)]


def agent_pointer(agent_name: str, constitution_path: str = "docs/CONSTITUTION.md", specs_dir: str = "docs/specs") -> str:
    """Short pointer file (e.g. CLAUDE.md) that sends coding agents to the kit documents."""
    template = f"""\
        # {agent_name}

        ## Source of truth

        - Primary authority for repository workflow, constraints, and change policy: `{constitution_path}`
        - Feature specs live under: `{specs_dir}/<feature>/`
          - `SPEC.md` (requirements)
          - `PLAN.md` (implementation plan)
          - `TASKS.md` (executable task list)
          - `ANALYSIS.md` (optional, analysis scratchpad)

        ## Workflow contract (classification-first)

        - Classify every request before acting:
          - **Spec-driven**: full pipeline for `kit spec`, new features, or substantial changes
          - **Ad hoc**: lightweight flow for small fixes, reviews, refinements, and mechanical changes
        - If ad hoc work touches an existing feature in `{specs_dir}/<feature>/`, update its documents when behavior, requirements, or approach changes

        ## Multi-feature rule

        - Never mix features in one `{specs_dir}/<feature>/` directory.
        - If work spans features, update each feature's docs separately.
        """
    return textwrap.dedent(template)


def feature_summary(name: str, phase: str, intent: str, approach: str, open_items: str, path: str) -> str:
    """One feature's entry under FEATURE SUMMARIES in the progress summary."""
    return (
        f"### {name}\n"
        "\n"
        f"- **STATUS**: {phase}\n"
        f"- **INTENT**: {intent}\n"
        f"- **APPROACH**: {approach}\n"
        f"- **OPEN ITEMS**: {open_items}\n"
        f"- **POINTERS**: `{path}/SPEC.md`, `{path}/PLAN.md`, `{path}/TASKS.md`\n"
    )
