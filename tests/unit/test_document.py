"""Unit tests for markdown document parsing and validation."""

import pytest

from kit import document
from kit.document import DocType, parse, parse_file
from kit.errors import IOFailure
from kit.templates import template_for


SPEC_WITHOUT_ACCEPTANCE = """# SPEC

## PROBLEM

Users cannot log in.

## GOALS

Let them.

## NON-GOALS

SSO.

## USERS

Everyone.

## REQUIREMENTS

Passwords.

## OPEN-QUESTIONS

None.
"""


class TestParse:
    """Test cases for section splitting."""

    def test_sections_in_order_with_lines(self):
        doc = parse("# Title\n\n## ONE\n\nfirst body\n\n## TWO\nsecond\n")
        assert [s.name for s in doc.sections] == ["ONE", "TWO"]
        assert doc.sections[0].content == "first body"
        assert doc.sections[0].line == 3
        assert doc.sections[1].content == "second"
        assert doc.sections[1].line == 7

    def test_no_headers_means_no_sections(self):
        doc = parse("just some text\n# top level only\n")
        assert doc.sections == []
        assert doc.validate(["PROBLEM"])[0].section == "PROBLEM"

    def test_level_three_headers_stay_inside_section(self):
        doc = parse("## TASK DETAILS\n\n### T001\n- goal\n")
        assert len(doc.sections) == 1
        assert "### T001" in doc.sections[0].content

    def test_header_requires_whitespace(self):
        doc = parse("##NOSPACE\n## REAL\n")
        assert doc.section_names() == ["REAL"]

    def test_get_section_case_insensitive_first_wins(self):
        doc = parse("## Notes\nfirst\n## NOTES\nsecond\n")
        assert doc.get_section("notes").content == "first"
        assert doc.has_section("NOTES")
        assert len(doc.sections) == 2

    def test_parse_file_missing(self, tmp_path):
        with pytest.raises(IOFailure):
            parse_file(tmp_path / "missing.md", DocType.SPEC)


class TestValidate:
    """Test cases for required section validation."""

    def test_reports_every_missing_section(self):
        doc = parse(SPEC_WITHOUT_ACCEPTANCE, "docs/specs/0001-login/SPEC.md", DocType.SPEC)
        errors = doc.validate()
        assert [e.section for e in errors] == ["ACCEPTANCE", "EDGE-CASES"]
        assert errors[0].message == "missing required section 'ACCEPTANCE'"
        assert errors[0].fix == "Add a '## ACCEPTANCE' section to docs/specs/0001-login/SPEC.md"
        assert errors[0].document == "docs/specs/0001-login/SPEC.md"

    def test_section_match_ignores_case(self):
        doc = parse("## tasks\n## Dependencies\n## notes\n", doc_type=DocType.TASKS)
        assert doc.validate() == []

    @pytest.mark.parametrize("doc_type", list(DocType))
    def test_templates_satisfy_their_own_requirements(self, doc_type):
        doc = parse(template_for(doc_type), doc_type=doc_type)
        assert doc.validate() == []

    def test_explicit_required_list(self):
        doc = parse("## A\n")
        assert [e.section for e in doc.validate(["A", "B"])] == ["B"]


class TestPlaceholdersAndLinks:
    """Test cases for placeholder and traceability detection."""

    def test_todo_comment_is_placeholder(self):
        assert parse("## A\n<!-- TODO: fill this in -->\n").has_unresolved_placeholders()

    def test_bare_todo_is_not_placeholder(self):
        assert not parse("## A\ntodo: later\n<!-- note -->\n").has_unresolved_placeholders()

    def test_lists_placeholders(self):
        doc = parse("<!-- TODO: a --> text <!--TODO: b-->")
        assert doc.unresolved_placeholders() == ["<!-- TODO: a -->", "<!--TODO: b-->"]

    def test_links(self):
        doc = parse("Implements [SPEC-01] via [PLAN-12]; ignores [TASK-1].")
        assert doc.links() == ["[SPEC-01]", "[PLAN-12]"]


class TestFileHelpers:
    """Test cases for write, merge and summary helpers."""

    def test_write_creates_parents(self, tmp_path):
        path = document.write(tmp_path / "a" / "b" / "DOC.md", "hello\n")
        assert path.read_text() == "hello\n"

    def test_write_if_missing(self, tmp_path):
        path = tmp_path / "DOC.md"
        assert document.write_if_missing(path, "first")
        assert not document.write_if_missing(path, "second")
        assert path.read_text() == "first"

    def test_merge_appends_missing_sections_only(self, tmp_path):
        path = tmp_path / "CONSTITUTION.md"
        path.write_text("# CONSTITUTION\n\n## PRINCIPLES\n\nBe kind.\n")
        added = document.merge_document(path, template_for(DocType.CONSTITUTION), DocType.CONSTITUTION)

        assert "PRINCIPLES" not in added
        assert {"CONSTRAINTS", "NON-GOALS", "DEFINITIONS"} <= set(added)
        merged = parse_file(path, DocType.CONSTITUTION)
        assert merged.get_section("PRINCIPLES").content == "Be kind."
        assert merged.validate() == []
        assert "\n\n## CONSTRAINTS\n\n" in path.read_text()

    def test_merge_is_stable(self, tmp_path):
        path = tmp_path / "CONSTITUTION.md"
        template = template_for(DocType.CONSTITUTION)
        document.merge_document(path, template, DocType.CONSTITUTION)
        assert path.read_text() == template
        assert document.merge_document(path, template, DocType.CONSTITUTION) == []
        assert path.read_text() == template

    def test_first_paragraph_skips_comments(self):
        doc = parse("## PROBLEM\n<!-- TODO: x -->\n\nLine one\nline two\n\nSecond para\n")
        assert document.first_paragraph(doc.get_section("PROBLEM")) == "Line one line two"

    def test_first_paragraph_truncates(self):
        doc = parse("## PROBLEM\n" + "x" * 200 + "\n")
        text = document.first_paragraph(doc.get_section("PROBLEM"))
        assert len(text) == 120
        assert text.endswith("...")

    def test_first_paragraph_of_missing_section(self):
        assert document.first_paragraph(None) == ""
