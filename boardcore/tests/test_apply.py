"""
Tests for folding generation results into a board.

Covers:
  - Suggestion replace / append
  - Full-board variation (list and string standards)
  - Agenda replacement
"""

from boardcore.apply import append_text, apply_agenda, apply_suggestion, apply_variation
from boardcore.cells import get_value
from boardcore.types import (
    DESIGN_THINKING_KEYS,
    INITIAL_PLANNING_KEYS,
    create_empty_board_content,
    sync_standards,
)

SUBJECTS = ["Math", "Science"]


def board():
    content = create_empty_board_content()
    content.initial_planning.standards = sync_standards([], SUBJECTS)
    return content


def variation(**overrides):
    v = {key: f"{key} text" for key in (*INITIAL_PLANNING_KEYS, *DESIGN_THINKING_KEYS)}
    v["title"] = "River Guardians"
    v.update(overrides)
    return v


class TestApplySuggestion:
    def test_replace(self):
        content = apply_suggestion(board(), "mainIdea", "Rivers")
        assert get_value(content, "mainIdea") == "Rivers"

    def test_append_to_existing(self):
        content = apply_suggestion(board(), "mainIdea", "Rivers")
        content = apply_suggestion(content, "mainIdea", "**Why**\nbecause", mode="append")
        assert get_value(content, "mainIdea") == "Rivers\n**Why**\nbecause"

    def test_append_to_blank_cell(self):
        assert append_text("  \n", "new") == "new"

    def test_append_trims_trailing_whitespace(self):
        assert append_text("old\n\n", "new") == "old\nnew"


class TestApplyVariation:
    def test_fixed_cells_and_standards_by_subject(self):
        v = variation(standards=[
            {"subject": "Science", "content": "NGSS"},
            {"subject": "Math", "content": "CCSS"},
            {"subject": "Art", "content": "ignored"},
        ])
        content = apply_variation(board(), v, SUBJECTS)
        for key in (*INITIAL_PLANNING_KEYS, *DESIGN_THINKING_KEYS):
            assert get_value(content, key) == f"{key} text"
        assert [(c.label, c.value) for c in content.initial_planning.standards] == [
            ("Standards: Math", "CCSS"),
            ("Standards: Science", "NGSS"),
        ]

    def test_missing_subject_gets_empty(self):
        content = apply_variation(board(), variation(standards=[{"subject": "Math", "content": "CCSS"}]), SUBJECTS)
        assert content.initial_planning.standards[1].value == ""

    def test_keeps_cell_ids(self):
        before = board()
        content = apply_variation(before, variation(standards=[]), SUBJECTS)
        assert content.initial_planning.main_idea.id == before.initial_planning.main_idea.id
        assert [c.id for c in content.initial_planning.standards] == [c.id for c in before.initial_planning.standards]

    def test_string_standards_land_in_first_cell(self):
        content = apply_variation(board(), variation(standards="All the standards"), SUBJECTS)
        assert content.initial_planning.standards[0].value == "All the standards"
        assert content.initial_planning.standards[1].value == ""

    def test_additional_and_agenda_untouched(self):
        before = board()
        content = apply_variation(before, variation(standards=[]), SUBJECTS)
        assert content.agenda is before.agenda
        assert content.initial_planning.additional == before.initial_planning.additional


class TestApplyAgenda:
    SESSIONS = [
        {"title": "Kickoff", "eventsContent": "**Walk**\nriver", "designPhase": "Empathize", "reflection": "What did you see?"},
        {"title": "Define it", "eventsContent": "", "designPhase": "Define", "reflection": ""},
    ]

    def test_replaces_agenda(self):
        before = board()
        old_ids = [e.id for e in before.agenda]
        content, orphaned = apply_agenda(before, self.SESSIONS)
        assert orphaned == old_ids
        assert [(e.date, e.leads) for e in content.agenda] == [("Empathize", "Kickoff"), ("Define", "Define it")]
        assert content.agenda[0].events_content == "**Walk**\nriver"
        assert content.agenda[0].reflection == "What did you see?"
        assert not {e.id for e in content.agenda} & set(old_ids)

    def test_empty_sessions_keep_agenda(self):
        before = board()
        content, orphaned = apply_agenda(before, [])
        assert content is before
        assert orphaned == []
