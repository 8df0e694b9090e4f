"""Command line interface for kit."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from . import config as kit_config
from .errors import KitError
from .kit_logging import setup_logging
from .workflow import WorkflowManager


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _report_error(result: Dict[str, Any]) -> int:
    print(f"error: {result['error']}", file=sys.stderr)
    if result.get("suggestion"):
        print(f"hint: {result['suggestion']}", file=sys.stderr)
    return 1


def _print_created(result: Dict[str, Any]) -> None:
    for filename in result.get("created_files", []):
        print(f"  created {filename}")
    if result.get("rollup_path"):
        print(f"  updated {result['rollup_path']}")


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def cmd_init(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.init_project()
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    for agent_file in result["agents_created"]:
        print(f"  created {agent_file}")
    if result["constitution"] == "merged":
        for section in result["merged_sections"]:
            print(f"  added section {section} to {result['constitution_path']}")
    print("\nNext steps:")
    print(f"  1. Edit {result['constitution_path']} to define project constraints")
    print("  2. Run 'kit spec <feature-name>' to create your first feature")
    return 0


def cmd_spec(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.create_spec(args.feature, branch=not args.no_branch)
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    _print_created(result)
    branch = result.get("branch")
    if branch:
        if branch.get("error"):
            print(f"  warning: could not create branch {branch['name']}: {branch['error']}")
        elif branch["created"]:
            print(f"  created and switched to branch {branch['name']}")
        else:
            print(f"  switched to existing branch {branch['name']}")
        if branch.get("uncommitted_changes"):
            print("  warning: working tree has uncommitted changes")
    print(f"\n{result['workflow_tip']}")
    return 0


def cmd_plan(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.create_plan(args.feature, force=args.force)
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    _print_created(result)
    return 0


def cmd_tasks(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.create_tasks(args.feature, force=args.force)
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    _print_created(result)
    return 0


def cmd_analysis(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.create_analysis(args.feature)
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    _print_created(result)
    return 0


def cmd_scaffold(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.scaffold_feature(args.feature, branch=args.create_branch)
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    _print_created(result)
    return 0


def cmd_status(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.feature_status(args.feature)
    if "error" in result:
        return _report_error(result)
    if args.json:
        _print_json(result)
        return 0

    print(f"Feature: {result['id']}-{result['name']}")
    if result.get("summary"):
        print(f"Summary: {result['summary']}")
    print(f"Phase:   {result['phase']}")
    print("Files:")
    for key, info in result["files"].items():
        mark = "x" if info["exists"] else " "
        print(f"  [{mark}] {key.upper()}.md")
    if result.get("progress"):
        counts = result["progress"]
        print(f"Tasks:   {counts['complete']}/{counts['total']} complete")
    print(f"\nNext: {result['next_action']}")
    return 0


def cmd_list(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.project_status()
    if "error" in result:
        return _report_error(result)
    if args.json:
        _print_json(result["features"])
        return 0
    if not result["features"]:
        print("No features found. Run 'kit spec <feature>' to create one.")
        return 0

    print(f"{'ID':<6}{'FEATURE':<32}{'PHASE':<12}TASKS")
    for row in result["features"]:
        print(f"{row['id']:<6}{row['name']:<32}{row['phase']:<12}{row['progress']}")
    return 0


def _print_report(report: Dict[str, Any]) -> None:
    print(f"Checking feature: {report['feature']}")
    if not report["errors"] and not report["warnings"]:
        print("  all checks passed")
    for warning in report["warnings"]:
        print(f"  warning: {warning}")
    for error in report["errors"]:
        print(f"  error: {error}")


def cmd_check(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    if args.all:
        result = workflow.check_all()
        if "error" in result:
            return _report_error(result)
        for report in result["reports"]:
            _print_report(report)
            print()
        print(result["message"])
        return 0 if result["passed"] else 1

    result = workflow.check_feature(args.feature)
    if "error" in result:
        return _report_error(result)
    _print_report(result)
    return 0 if result["passed"] else 1


def cmd_complete(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.complete_feature(args.feature, force=args.force)
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    if result.get("rollup_path"):
        print(f"  updated {result['rollup_path']}")
    return 0


def cmd_rollup(workflow: WorkflowManager, args: argparse.Namespace) -> int:
    result = workflow.rollup()
    if "error" in result:
        return _report_error(result)
    print(result["message"])
    return 0


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kit",
        description="Spec-driven feature workflow: SPEC.md, PLAN.md and TASKS.md per feature.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--root", help="project root (default: nearest directory containing .kit.yaml)")
    parser.add_argument("--log-level", default="WARNING", help="console log level (default: WARNING)")
    parser.add_argument("--log-file", type=Path, help="also write JSON logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="initialize a kit project in the current directory")
    init_parser.set_defaults(handler=cmd_init)

    spec_parser = subparsers.add_parser("spec", help="create a feature and its SPEC.md")
    spec_parser.add_argument("feature", help="feature slug or directory name")
    spec_parser.add_argument("--no-branch", action="store_true", help="skip git branch creation")
    spec_parser.set_defaults(handler=cmd_spec)

    plan_parser = subparsers.add_parser("plan", help="create PLAN.md for a feature")
    plan_parser.add_argument("feature", nargs="?", help="feature reference (default: latest feature)")
    plan_parser.add_argument("--force", action="store_true", help="create missing SPEC.md instead of failing")
    plan_parser.set_defaults(handler=cmd_plan)

    tasks_parser = subparsers.add_parser("tasks", help="create TASKS.md for a feature")
    tasks_parser.add_argument("feature", nargs="?", help="feature reference (default: latest feature)")
    tasks_parser.add_argument("--force", action="store_true", help="create missing SPEC.md and PLAN.md instead of failing")
    tasks_parser.set_defaults(handler=cmd_tasks)

    analysis_parser = subparsers.add_parser("analysis", help="create the optional ANALYSIS.md")
    analysis_parser.add_argument("feature", help="feature reference")
    analysis_parser.set_defaults(handler=cmd_analysis)

    scaffold_parser = subparsers.add_parser("scaffold", help="create a feature with every document at once")
    scaffold_parser.add_argument("feature", help="feature slug or directory name")
    scaffold_parser.add_argument("--create-branch", action="store_true", help="create a git branch for the feature")
    scaffold_parser.set_defaults(handler=cmd_scaffold)

    status_parser = subparsers.add_parser("status", help="show the phase and next step of a feature")
    status_parser.add_argument("feature", nargs="?", help="feature reference (default: latest feature)")
    status_parser.add_argument("--json", action="store_true", help="print JSON")
    status_parser.set_defaults(handler=cmd_status)

    list_parser = subparsers.add_parser("list", help="list features with phase and task progress")
    list_parser.add_argument("--json", action="store_true", help="print JSON")
    list_parser.set_defaults(handler=cmd_list)

    check_parser = subparsers.add_parser("check", help="validate feature documents")
    check_parser.add_argument("feature", nargs="?", help="feature reference (default: latest feature)")
    check_parser.add_argument("--all", action="store_true", help="validate every feature")
    check_parser.set_defaults(handler=cmd_check)

    complete_parser = subparsers.add_parser("complete", help="mark a feature complete")
    complete_parser.add_argument("feature", nargs="?", help="feature reference (default: latest feature)")
    complete_parser.add_argument("-f", "--force", action="store_true", help="complete even if tasks remain open")
    complete_parser.set_defaults(handler=cmd_complete)

    rollup_parser = subparsers.add_parser("rollup", help="regenerate docs/PROJECT_PROGRESS_SUMMARY.md")
    rollup_parser.set_defaults(handler=cmd_rollup)

    return parser


def _project_root(args: argparse.Namespace) -> Path:
    if args.root:
        return Path(args.root).expanduser().resolve()
    if args.command == "init":
        return Path.cwd()
    return kit_config.find_project_root()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        root = _project_root(args)
    except KitError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    workflow = WorkflowManager(root)
    return args.handler(workflow, args)


if __name__ == "__main__":
    sys.exit(main())
