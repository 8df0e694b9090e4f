"""Unit tests for kit data models."""

from datetime import datetime
from pathlib import Path

from kit.models import (
    WORKFLOW_STEPS,
    CheckReport,
    Feature,
    FeatureStatus,
    FileStatus,
    Phase,
    TaskProgress,
    format_feature_id,
)


class TestPhase:
    """Test cases for the Phase enum."""

    def test_pipeline_order(self):
        ordered = sorted([Phase.COMPLETE, Phase.SPEC, Phase.IMPLEMENT, Phase.PLAN, Phase.REFLECT, Phase.TASKS])
        assert ordered == [Phase.SPEC, Phase.PLAN, Phase.TASKS, Phase.IMPLEMENT, Phase.REFLECT, Phase.COMPLETE]
        assert Phase.PLAN < Phase.TASKS
        assert Phase.SPEC.order == 0
        assert Phase.COMPLETE.order == 5

    def test_string_values(self):
        assert Phase("implement") is Phase.IMPLEMENT
        assert str(Phase.REFLECT) == "reflect"
        assert Phase.SPEC == "spec"


class TestTaskProgress:
    """Test cases for TaskProgress."""

    def test_counts(self):
        progress = TaskProgress(total=5, complete=3)
        assert progress.incomplete == 2
        assert progress.has_tasks
        assert not progress.all_complete
        assert progress.to_dict() == {"total": 5, "complete": 3, "incomplete": 2}

    def test_empty_is_not_complete(self):
        assert not TaskProgress().all_complete


class TestFeature:
    """Test cases for Feature serialization."""

    def test_to_dict(self):
        feature = Feature(
            number=12,
            slug="login",
            dir_name="0012-login",
            path=Path("/tmp/specs/0012-login"),
            created_at=datetime(2024, 5, 1, 9, 30, 15),
            phase=Phase.PLAN,
        )
        data = feature.to_dict()
        assert data["id"] == "0012"
        assert data["created_at"] == "2024-05-01T09:30:15"
        assert data["phase"] == "plan"
        assert data["path"] == str(Path("/tmp/specs/0012-login"))

    def test_format_feature_id(self):
        assert format_feature_id(3) == "0003"
        assert format_feature_id(12345) == "12345"


class TestFeatureStatus:
    """Test cases for FeatureStatus serialization."""

    def test_optional_fields_omitted(self):
        status = FeatureStatus(
            id="0001",
            name="login",
            path=Path("x"),
            phase=Phase.SPEC,
            files={"spec": FileStatus(False, Path("x/SPEC.md"))},
        )
        data = status.to_dict()
        assert "summary" not in data
        assert "progress" not in data
        assert data["files"]["spec"] == {"exists": False, "path": str(Path("x/SPEC.md"))}

    def test_progress_included(self):
        status = FeatureStatus(
            id="0001", name="login", path=Path("x"), phase=Phase.IMPLEMENT,
            summary="Let users log in", progress=TaskProgress(2, 1),
        )
        data = status.to_dict()
        assert data["summary"] == "Let users log in"
        assert data["progress"]["incomplete"] == 1


class TestCheckReport:
    """Test cases for CheckReport."""

    def test_warnings_do_not_fail(self):
        report = CheckReport(feature="0001-login", warnings=["PLAN.md not found"])
        assert report.passed
        assert report.to_dict()["warning_count"] == 1

    def test_errors_fail(self):
        report = CheckReport(feature="0001-login", errors=["missing"])
        assert not report.passed


class TestWorkflowSteps:
    """Test cases for the workflow step definitions."""

    def test_steps_are_sequential(self):
        assert [step.step_number for step in WORKFLOW_STEPS] == list(range(1, len(WORKFLOW_STEPS) + 1))

    def test_prerequisites_refer_to_earlier_steps(self):
        seen = []
        for step in WORKFLOW_STEPS:
            assert step.can_execute(seen)
            seen.append(step.name)

    def test_cannot_skip_ahead(self):
        tasks_step = next(step for step in WORKFLOW_STEPS if step.phase == Phase.TASKS)
        assert not tasks_step.can_execute(["Project Initialization", "Specification"])
