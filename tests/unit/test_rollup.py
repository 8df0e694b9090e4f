"""Unit tests for the project progress summary."""

from datetime import datetime

from kit import rollup
from kit.config import Config
from kit.models import Phase


def _write(feature_dir, name, body):
    (feature_dir / name).write_text(body, encoding="utf-8")


class TestSummarizeFeature:
    """Test cases for summarize_feature."""

    def test_defaults_without_documents(self, registry):
        feature = registry.create("login")
        item = rollup.summarize_feature(feature, "docs/specs/")

        assert item.id == "0001"
        assert item.path == "docs/specs/0001-login"
        assert item.summary == "(no description)"
        assert item.intent == "(see SPEC.md)"
        assert item.approach == "(see PLAN.md)"
        assert item.open_items == "none"

    def test_reads_problem_questions_and_approach(self, registry):
        feature = registry.create("login")
        _write(feature.path, "SPEC.md", (
            "# SPEC\n\n## PROBLEM\n\n<!-- why -->\nUsers cannot sign in\nwith SSO.\n\nSecond paragraph.\n\n"
            "## OPEN-QUESTIONS\n\nWhich IdP first?\n"
        ))
        _write(feature.path, "PLAN.md", "# PLAN\n\n## APPROACH\n\nUse OIDC.\n")

        item = rollup.summarize_feature(registry.resolve("login"), "docs/specs")
        assert item.summary == "Users cannot sign in with SSO."
        assert item.intent == item.summary
        assert item.open_items == "Which IdP first?"
        assert item.approach == "Use OIDC."


class TestRender:
    """Test cases for render."""

    def _item(self, **overrides):
        fields = dict(
            id="0001",
            name="login",
            path="docs/specs/0001-login",
            phase=Phase.PLAN,
            created=datetime(2024, 3, 9, 12, 0, 0),
        )
        fields.update(overrides)
        return rollup.FeatureRollup(**fields)

    def test_sections_in_order(self):
        content = rollup.render([self._item()], Config(), now=datetime(2024, 3, 10, 8, 0, 0))
        headings = [line for line in content.splitlines() if line.startswith("## ")]
        assert headings == [
            "## FEATURE PROGRESS TABLE",
            "## PROJECT INTENT",
            "## GLOBAL CONSTRAINTS",
            "## FEATURE SUMMARIES",
            "## LAST UPDATED",
        ]
        assert "| 0001 | login | `docs/specs/0001-login` | plan | 2024-03-09 | (no description) |" in content
        assert "See `docs/CONSTITUTION.md`" in content
        assert "### login" in content
        assert "- **POINTERS**: `docs/specs/0001-login/SPEC.md`" in content
        assert content.rstrip().endswith("2024-03-10 08:00:00")

    def test_long_summary_truncated_in_table(self):
        item = self._item(summary="x" * 80, created=None)
        content = rollup.render([item], Config(), now=datetime(2024, 1, 1))
        assert "| - | " + "x" * 57 + "... |" in content

    def test_empty_project(self):
        content = rollup.render([], Config(), now=datetime(2024, 1, 1))
        assert "## FEATURE SUMMARIES" in content
        assert "### " not in content


class TestGenerate:
    """Test cases for generate."""

    def test_writes_summary(self, tmp_path, specs_dir, registry):
        registry.create("alpha")
        registry.create("beta")

        path = rollup.generate(tmp_path, Config(), now=lambda: datetime(2024, 1, 1))
        assert path == tmp_path / "docs" / "PROJECT_PROGRESS_SUMMARY.md"
        content = path.read_text()
        assert "| 0001 | alpha |" in content
        assert "| 0002 | beta |" in content

    def test_regenerating_replaces_content(self, tmp_path, specs_dir, registry):
        registry.create("alpha")
        rollup.generate(tmp_path, Config())
        (specs_dir / "0001-alpha").rename(specs_dir / "0001-renamed")

        content = rollup.generate(tmp_path, Config()).read_text()
        assert "renamed" in content
        assert "alpha" not in content
