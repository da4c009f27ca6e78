"""
Section parser tests.

Covers:
  - Header detection (bulleted, standalone, Note callouts)
  - Header/description splitting and body cleanup
  - Intro sections and headerless text
  - Lossless round-trip through serialize
  - Reorder / delete / edit within one cell
  - Cross-cell move conservation
"""

import pytest

from boardcore.sections import (
    delete_section,
    edit_section,
    insert_raw_text,
    is_header_line,
    move_section_text,
    normalize_body,
    parse_sections,
    remove_raw_text,
    reorder_section,
    serialize,
    split_header_line,
)

TWO_SECTIONS = "- **Intro**\n  - hello\n- **Interview Plan**\n  - talk to 3 neighbors"


class TestHeaderDetection:
    @pytest.mark.parametrize(
        "line",
        [
            "- **Title**",
            "* **Title**",
            "**Title**",
            "  - **Indented** trailing text",
            "**Define**: Students narrow the problem",
        ],
    )
    def test_headers(self, line):
        assert is_header_line(line)

    @pytest.mark.parametrize(
        "line",
        [
            "**Note** this is a callout",
            "**Note:** another",
            "plain text with **bold** inside",
            "- plain bullet",
            "",
        ],
    )
    def test_not_headers(self, line):
        assert not is_header_line(line)

    def test_split_em_dash(self):
        assert split_header_line("- **Community Mapping** — Walk the block") == (
            "**Community Mapping**",
            "Walk the block",
        )

    def test_split_colon(self):
        assert split_header_line("**Define**: Narrow it down") == ("**Define**", "Narrow it down")

    def test_split_no_description(self):
        assert split_header_line("- **Ideate**") == ("**Ideate**", "")


class TestParse:
    def test_two_bulleted_sections(self):
        sections = parse_sections(TWO_SECTIONS)
        assert sections is not None
        assert [s.header for s in sections] == ["**Intro**", "**Interview Plan**"]
        assert [s.body for s in sections] == ["hello", "talk to 3 neighbors"]

    def test_no_headers_returns_none(self):
        assert parse_sections("just some text\n- a bullet") is None
        assert parse_sections("") is None

    def test_description_becomes_first_body_line(self):
        sections = parse_sections("**Define** — pick one problem\n  - write it down")
        assert sections[0].body.split("\n")[0] == "pick one problem"

    def test_nested_bullets_keep_their_marker(self):
        sections = parse_sections("- **Plan**\n  - step one\n    - detail")
        assert sections[0].body == "step one\n  - detail"

    def test_intro_section(self):
        text = "Some intro line\n\n- **First**\n  - body"
        sections = parse_sections(text)
        assert sections[0].header == ""
        assert sections[0].is_intro
        assert sections[0].body == "Some intro line"
        assert sections[0].raw_lines == ["Some intro line", ""]
        assert sections[1].header == "**First**"

    def test_note_stays_in_body(self):
        sections = parse_sections("- **Plan**\n**Note** bring water\n- **Next**")
        assert len(sections) == 2
        assert "**Note** bring water" in sections[0].raw_lines


class TestRoundTrip:
    @pytest.mark.parametrize(
        "text",
        [
            TWO_SECTIONS,
            "**A**\nline\n\n**B**\n\n",
            "Intro text\n- **A** — desc\n  - x\n\n* **B**\n**Note** hi",
            "- **Only**",
        ],
    )
    def test_serialize_inverts_parse(self, text):
        assert serialize(parse_sections(text)) == text


class TestStructuralEdits:
    def test_reorder_swaps_sections(self):
        assert reorder_section(TWO_SECTIONS, 0, 1) == (
            "- **Interview Plan**\n  - talk to 3 neighbors\n- **Intro**\n  - hello"
        )

    def test_reorder_to_same_index_is_noop(self):
        assert reorder_section(TWO_SECTIONS, 1, 1) == TWO_SECTIONS

    def test_reorder_out_of_range_is_noop(self):
        assert reorder_section(TWO_SECTIONS, 0, 7) == TWO_SECTIONS

    def test_delete_section(self):
        assert delete_section(TWO_SECTIONS, 0) == "- **Interview Plan**\n  - talk to 3 neighbors"

    def test_delete_only_section_yields_empty(self):
        assert delete_section("- **Solo**\n  - body", 0) == ""

    def test_edit_section_only_touches_target(self):
        edited = edit_section(TWO_SECTIONS, 1, "- **Interview Plan**\n  - talk to 5 neighbors")
        assert edited == "- **Intro**\n  - hello\n- **Interview Plan**\n  - talk to 5 neighbors"

    def test_edits_on_unstructured_text_are_noops(self):
        assert delete_section("plain", 0) == "plain"
        assert reorder_section("plain", 0, 1) == "plain"


class TestCrossCellMove:
    def test_remove_collapses_blank_runs(self):
        text = "- **A**\n\n- **B**\n  - b\n\n- **C**"
        assert remove_raw_text(text, "- **B**\n  - b") == "- **A**\n\n- **C**"

    def test_append_when_no_position(self):
        assert insert_raw_text("- **X**\n", "- **Y**") == "- **X**\n- **Y**"

    def test_insert_into_empty_target(self):
        assert insert_raw_text("", "- **Y**", 0) == "- **Y**"

    def test_insert_at_position(self):
        target = "- **X**\n  - x\n- **Z**"
        assert insert_raw_text(target, "- **Y**", 1) == "- **X**\n  - x\n- **Y**\n- **Z**"

    def test_insert_past_end_appends(self):
        assert insert_raw_text("- **X**", "- **Y**", 9) == "- **X**\n- **Y**"

    def test_move_conserves_text(self):
        source = "- **Intro**\n  - hello\n- **Interview Plan**\n  - talk to 3 neighbors"
        target = "- **Empathy Map**\n  - draw it"
        raw = parse_sections(source)[1].raw_text
        new_source, new_target = move_section_text(source, target, raw, 0)
        assert raw not in new_source
        assert new_target.count(raw) == 1
        assert new_source == "- **Intro**\n  - hello"
        assert new_target == raw + "\n" + target

    def test_move_of_text_missing_from_source_raises(self):
        source = "- **Interview Plan**\n  - talk to 5 neighbors"
        with pytest.raises(ValueError):
            move_section_text(source, "- **Problem**\n  - p", "- **Interview Plan**\n  - talk to 3 neighbors")

    def test_move_of_empty_text_raises(self):
        with pytest.raises(ValueError):
            move_section_text("- **A**", "- **B**", "")

    def test_position_ignores_leading_blank_lines(self):
        target = "\n\n- **X**\n  - x\n- **Z**"
        assert [s.header for s in parse_sections(target)] == ["**X**", "**Z**"]
        assert insert_raw_text(target, "- **Y**", 1) == "\n\n- **X**\n  - x\n- **Y**\n- **Z**"


class TestNormalizeBody:
    def test_plain_lines_become_bullets(self):
        assert normalize_body("hello\n  - already\n\nworld") == "- hello\n  - already\n\n- world"

    def test_empty(self):
        assert normalize_body("") == ""
