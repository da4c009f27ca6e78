"""
Cell addressing tests.

Covers:
  - Key parsing into addresses and back
  - get_value / set_value dispatch for every key family
  - Copy-on-write (inputs never mutated, untouched branches shared)
  - Unknown and unresolved keys are no-ops
  - Adding and removing additional columns and agenda sessions
  - Lesson section keys
  - Standards sync
"""

import pytest

from boardcore.cells import (
    AdditionalCell,
    AgendaField,
    FixedCell,
    LessonSection,
    StandardsCell,
    add_additional_cell,
    add_agenda_entry,
    board_cell_keys,
    cell_label,
    format_cell_key,
    get_lesson_value,
    get_value,
    parse_cell_key,
    remove_additional_cell,
    remove_agenda_entry,
    set_lesson_value,
    set_value,
)
from boardcore.types import (
    FIXED_CELL_KEYS,
    LessonPlan,
    LessonPlanContent,
    create_empty_board_content,
    create_empty_cell,
    create_standards_cell,
    sync_standards,
)


@pytest.fixture
def board():
    content = create_empty_board_content()
    content.initial_planning.standards = sync_standards([], ["Math", "Science"])
    content.initial_planning.additional = [create_empty_cell("Extra A"), create_empty_cell("Extra B")]
    content.design_thinking.additional = [create_empty_cell("DT Extra")]
    return content


class TestParseCellKey:
    @pytest.mark.parametrize(
        "key, address",
        [
            ("mainIdea", FixedCell("mainIdea")),
            ("milestonePrototypeTest", FixedCell("milestonePrototypeTest")),
            ("standards-English Language Arts", StandardsCell("English Language Arts")),
            ("additional-3", AdditionalCell("initialPlanning", 3)),
            ("dt-additional-0", AdditionalCell("designThinking", 0)),
            ("lesson-abc-materials", LessonSection("abc", "materials")),
            (
                "lesson-6f1c2d3e-aaaa-bbbb-cccc-0123456789ab-warmUpHook",
                LessonSection("6f1c2d3e-aaaa-bbbb-cccc-0123456789ab", "warmUpHook"),
            ),
            ("agenda-2-reflection", AgendaField(2, "reflection")),
            ("agenda-0-leads", AgendaField(0, "leads")),
        ],
    )
    def test_parse_and_format(self, key, address):
        assert parse_cell_key(key) == address
        assert format_cell_key(address) == key

    @pytest.mark.parametrize("key", ["", "bogus", "additional-x", "lesson-abc-notASection", "milestone1"])
    def test_unknown_keys(self, key):
        assert parse_cell_key(key) is None


class TestGetSetValue:
    @pytest.mark.parametrize("key", FIXED_CELL_KEYS)
    def test_fixed_cells_round_trip(self, board, key):
        updated = set_value(board, key, "new text")
        assert get_value(updated, key) == "new text"
        assert get_value(board, key) == ""

    def test_standards_by_subject_label(self, board):
        updated = set_value(board, "standards-Science", "NGSS 5-ESS3-1")
        assert get_value(updated, "standards-Science") == "NGSS 5-ESS3-1"
        assert get_value(updated, "standards-Math") == ""
        assert updated.initial_planning.standards[1].label == "Standards: Science"

    def test_missing_subject_is_noop(self, board):
        assert set_value(board, "standards-Art", "x") is board
        assert get_value(board, "standards-Art") == ""

    def test_additional_by_position(self, board):
        updated = set_value(board, "additional-1", "second")
        assert get_value(updated, "additional-1") == "second"
        assert get_value(updated, "additional-0") == ""
        updated = set_value(updated, "dt-additional-0", "dt")
        assert updated.design_thinking.additional[0].value == "dt"

    def test_out_of_range_additional_is_noop(self, board):
        assert set_value(board, "additional-5", "x") is board
        assert get_value(board, "dt-additional-4") == ""

    def test_agenda_fields(self, board):
        updated = set_value(board, "agenda-0-eventsContent", "- **Walk**")
        assert updated.agenda[0].events_content == "- **Walk**"
        assert get_value(updated, "agenda-0-eventsContent") == "- **Walk**"
        assert set_value(board, "agenda-3-reflection", "x") is board

    def test_agenda_session_title(self, board):
        updated = set_value(board, "agenda-0-leads", "Neighborhood Interviews")
        assert updated.agenda[0].leads == "Neighborhood Interviews"
        assert get_value(updated, "agenda-0-leads") == "Neighborhood Interviews"
        assert cell_label(updated, "agenda-0-leads") == "Session Title"

    def test_unknown_key_is_noop(self, board):
        assert set_value(board, "nope", "x") is board
        assert get_value(board, "nope") == ""

    def test_lesson_key_is_not_a_board_cell(self, board):
        assert set_value(board, "lesson-abc-materials", "x") is board

    def test_copy_on_write_shares_untouched_branches(self, board):
        updated = set_value(board, "mainIdea", "Water")
        assert updated is not board
        assert updated.design_thinking is board.design_thinking
        assert updated.agenda is board.agenda
        assert board.initial_planning.main_idea.value == ""

    def test_board_cell_keys_all_resolve(self, board):
        keys = board_cell_keys(board)
        assert "standards-Math" in keys
        assert "dt-additional-0" in keys
        for key in keys:
            assert set_value(board, key, "v") is not board


class TestAdditionalColumns:
    def test_add_appends_empty_column(self, board):
        updated = add_additional_cell(board)
        assert [c.label for c in updated.initial_planning.additional] == ["Extra A", "Extra B", "Additional"]
        assert updated.initial_planning.additional[2].subtitle == "Custom planning column"
        assert get_value(updated, "additional-2") == ""
        assert len(board.initial_planning.additional) == 2
        assert updated.design_thinking is board.design_thinking

    def test_add_to_design_thinking(self, board):
        updated = add_additional_cell(board, "designThinking")
        assert len(updated.design_thinking.additional) == 2
        assert updated.initial_planning is board.initial_planning

    def test_remove_renumbers_later_columns(self, board):
        board = set_value(board, "additional-0", "first")
        board = set_value(board, "additional-1", "second")
        updated = remove_additional_cell(board, "additional-0")
        assert get_value(updated, "additional-0") == "second"
        assert get_value(updated, "additional-1") == ""
        assert "additional-1" not in board_cell_keys(updated)
        assert get_value(board, "additional-0") == "first"

    def test_remove_from_design_thinking(self, board):
        updated = remove_additional_cell(board, "dt-additional-0")
        assert updated.design_thinking.additional == []
        assert updated.initial_planning is board.initial_planning

    @pytest.mark.parametrize("key", ["additional-2", "dt-additional-1", "mainIdea", "agenda-0-leads", "bogus"])
    def test_remove_unresolved_key_is_noop(self, board, key):
        assert remove_additional_cell(board, key) is board


class TestAgendaSessions:
    def test_add_appends_empty_session(self, board):
        updated = add_agenda_entry(board)
        assert len(updated.agenda) == 2
        assert updated.agenda[0] is board.agenda[0]
        assert updated.agenda[1].id != board.agenda[0].id
        assert get_value(updated, "agenda-1-leads") == ""
        assert len(board.agenda) == 1

    def test_remove_shifts_later_sessions(self, board):
        board = add_agenda_entry(add_agenda_entry(board))
        board = set_value(board, "agenda-2-leads", "Showcase")
        updated = remove_agenda_entry(board, 1)
        assert [e.id for e in updated.agenda] == [board.agenda[0].id, board.agenda[2].id]
        assert get_value(updated, "agenda-1-leads") == "Showcase"

    def test_last_session_is_never_removed(self, board):
        assert remove_agenda_entry(board, 0) is board

    @pytest.mark.parametrize("index", [-1, 2])
    def test_out_of_range_is_noop(self, board, index):
        board = add_agenda_entry(board)
        assert remove_agenda_entry(board, index) is board


class TestLessonValues:
    @pytest.fixture
    def lessons(self):
        return [
            LessonPlan(
                id="l-1",
                board_id="b",
                agenda_entry_id="a",
                subject="Math",
                period_minutes=45,
                content=LessonPlanContent(materials="rulers"),
            ),
            LessonPlan(id="l-2", board_id="b", agenda_entry_id="a", subject="Science", period_minutes=45),
        ]

    def test_get(self, lessons):
        assert get_lesson_value(lessons, "lesson-l-1-materials") == "rulers"
        assert get_lesson_value(lessons, "lesson-missing-materials") == ""

    def test_set(self, lessons):
        updated = set_lesson_value(lessons, "lesson-l-2-mainActivities", "**Lab (20 min)**")
        assert updated[1].content.main_activities == "**Lab (20 min)**"
        assert updated[0] is lessons[0]
        assert lessons[1].content.main_activities == ""

    def test_set_unknown_lesson_is_noop(self, lessons):
        assert set_lesson_value(lessons, "lesson-zzz-materials", "x") is lessons


class TestSyncStandards:
    def test_keeps_values_and_follows_subject_order(self):
        math = create_standards_cell("Math")
        math.value = "CCSS.MATH"
        science = create_standards_cell("Science")
        science.value = "NGSS"
        synced = sync_standards([math, science], ["Science", "Art", "Math"])
        assert [c.label for c in synced] == ["Standards: Science", "Standards: Art", "Standards: Math"]
        assert [c.value for c in synced] == ["NGSS", "", "CCSS.MATH"]

    def test_drops_removed_subjects(self):
        synced = sync_standards([create_standards_cell("Math")], ["Science"])
        assert [c.label for c in synced] == ["Standards: Science"]

    def test_empty_subject_list(self):
        assert sync_standards([create_standards_cell("Math")], []) == []

    def test_new_cell_subtitle(self):
        (cell,) = sync_standards([], ["History"])
        assert cell.subtitle == "Which History standards will be addressed?"
        assert cell.value == ""
