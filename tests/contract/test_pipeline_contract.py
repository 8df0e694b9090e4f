"""
Contract tests for the feature pipeline:
SPEC.md must exist before PLAN.md, PLAN.md before TASKS.md, features are
numbered sequentially, and a feature is only complete once every task
checkbox is checked and the completion marker is present.
"""

import pytest

from kit.errors import AlreadyExists, InvalidSlug, PrerequisiteMissing, TasksIncomplete
from kit.models import Phase
from kit.phase import determine_phase
from kit.progress import COMPLETION_MARKER


class TestPipelineOrder:
    """Contract tests for document ordering."""

    def test_plan_requires_spec(self, workspace):
        """
        Given: A feature directory without SPEC.md
        When: PLAN.md is requested without force
        Then: The request fails and nothing is written
        """
        feature = workspace.registry.create("payments")

        with pytest.raises(PrerequisiteMissing):
            workspace.scaffold_plan("payments")

        assert not (feature.path / "PLAN.md").exists()

    def test_tasks_require_plan(self, workspace):
        """
        Given: A feature with SPEC.md only
        When: TASKS.md is requested without force
        Then: The request fails and nothing is written
        """
        workspace.scaffold_spec("payments", branch=False)

        with pytest.raises(PrerequisiteMissing):
            workspace.scaffold_tasks("payments")

        assert not (workspace.specs_dir / "0001-payments" / "TASKS.md").exists()

    def test_scaffolding_never_overwrites(self, workspace):
        """
        Given: Edited SPEC.md, PLAN.md and TASKS.md
        When: Every scaffold step runs again
        Then: No document content changes
        """
        workspace.scaffold_all("payments")
        feature_dir = workspace.specs_dir / "0001-payments"
        for name in ("SPEC.md", "PLAN.md", "TASKS.md"):
            (feature_dir / name).write_text(f"edited {name}\n")

        workspace.scaffold_spec("payments", branch=False)
        workspace.scaffold_plan("payments")
        workspace.scaffold_tasks("payments")
        workspace.scaffold_all("payments")

        for name in ("SPEC.md", "PLAN.md", "TASKS.md"):
            assert (feature_dir / name).read_text() == f"edited {name}\n"


class TestPhaseProgression:
    """Contract tests for phase inference across the whole pipeline."""

    def test_phases_follow_documents(self, workspace, write_tasks):
        """
        Given: A new feature
        When: Each pipeline step completes in turn
        Then: The inferred phase advances spec, plan, implement, reflect, complete
        """
        workspace.scaffold_spec("payments", branch=False)
        feature_dir = workspace.specs_dir / "0001-payments"
        phases = [determine_phase(feature_dir)]

        workspace.scaffold_plan("payments")
        phases.append(determine_phase(feature_dir))

        workspace.scaffold_tasks("payments")
        phases.append(determine_phase(feature_dir))

        write_tasks(feature_dir, done=2, open_=0)
        phases.append(determine_phase(feature_dir))

        workspace.complete_feature("payments")
        phases.append(determine_phase(feature_dir))

        assert phases == [Phase.SPEC, Phase.PLAN, Phase.IMPLEMENT, Phase.REFLECT, Phase.COMPLETE]
        assert phases == sorted(phases)

    def test_unchecking_a_task_reopens_feature(self, workspace, write_tasks):
        """
        Given: A completed feature
        When: A task is unchecked
        Then: The feature is back in implementation despite the marker
        """
        workspace.scaffold_all("payments")
        feature_dir = workspace.specs_dir / "0001-payments"
        tasks = write_tasks(feature_dir, done=2, open_=0)
        workspace.complete_feature("payments")

        tasks.write_text(tasks.read_text().replace("- [x] T002", "- [ ] T002", 1))

        assert COMPLETION_MARKER in tasks.read_text()
        assert determine_phase(feature_dir) == Phase.IMPLEMENT

    def test_completion_blocked_by_open_tasks(self, workspace, write_tasks):
        """
        Given: A feature with open tasks
        When: Completion is requested without force
        Then: It fails and no marker is appended
        """
        workspace.scaffold_all("payments")
        tasks = write_tasks(workspace.specs_dir / "0001-payments", done=1, open_=1)

        with pytest.raises(TasksIncomplete):
            workspace.complete_feature("payments")

        assert COMPLETION_MARKER not in tasks.read_text()


class TestFeatureNumbering:
    """Contract tests for feature numbering and naming."""

    def test_numbers_are_sequential_and_never_reused(self, workspace, specs_dir):
        """
        Given: Three features, the middle one later deleted
        When: Another feature is created
        Then: It takes the number after the highest existing one
        """
        for slug in ("alpha", "beta", "gamma"):
            workspace.scaffold_spec(slug, branch=False)
        (workspace.specs_dir / "0002-beta" / "SPEC.md").unlink()
        (workspace.specs_dir / "0002-beta").rmdir()

        result = workspace.scaffold_spec("delta", branch=False)
        assert result["feature"]["dir_name"] == "0004-delta"

    def test_slug_unique(self, workspace):
        """
        Given: An existing feature
        When: A feature with the same slug is created directly
        Then: Creation fails
        """
        workspace.scaffold_spec("alpha", branch=False)
        with pytest.raises(AlreadyExists):
            workspace.registry.create("alpha")

    @pytest.mark.parametrize("slug", ["", "Bad_Slug", "one-two-three-four-five-six", "-leading"])
    def test_invalid_slugs_rejected(self, workspace, slug):
        """Invalid slugs never create a directory."""
        with pytest.raises(InvalidSlug):
            workspace.registry.create(slug)
        assert workspace.list_features() == []
