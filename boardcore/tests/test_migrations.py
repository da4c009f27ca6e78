"""
Load-time migration tests.

Covers:
  - Legacy milestone1/2/3 remap
  - Legacy single standards cell
  - Missing communityPartners / additional lists
  - Idempotency
  - Unreadable content and subjects
"""

import json

from boardcore.migrations import decode_subjects, load_content, migrate_content
from boardcore.types import DEFAULT_SUBJECTS, create_empty_board_content


def _cell(label, value=""):
    return {"id": "c-" + label, "label": label, "value": value}


def legacy_blob():
    return {
        "initialPlanning": {
            "mainIdea": _cell("Main Idea / Topic", "River cleanup"),
            "standards": _cell("Standards", "NGSS 5-ESS3-1"),
            "noticeReflect": _cell("Notice & Reflect"),
            "openingActivity": _cell("Opening Activity"),
        },
        "designThinking": {
            "drivingQuestion": _cell("Driving Question", "How can we clean our river?"),
            "empathize": _cell("Empathize"),
            "define": _cell("Define"),
            "ideate": _cell("Ideate"),
            "prototypeTest": _cell("Prototype & Test"),
            "milestone1": _cell("Milestone 1", "empathy map"),
            "milestone2": _cell("Milestone 2", "problem statement"),
            "milestone3": _cell("Milestone 3", "river fair"),
        },
        "agenda": [],
    }


class TestMigrateContent:
    def test_legacy_blob(self):
        migrated = migrate_content(legacy_blob())
        dt = migrated["designThinking"]
        assert dt["milestoneEmpathize"]["value"] == "empathy map"
        assert dt["milestoneDefine"]["value"] == "problem statement"
        assert dt["milestonePrototypeTest"]["value"] == "river fair"
        assert dt["milestoneIdeate"]["value"] == ""
        assert not {"milestone1", "milestone2", "milestone3"} & dt.keys()

        standards = migrated["initialPlanning"]["standards"]
        assert len(standards) == 1
        assert standards[0]["label"] == "Standards: General"
        assert standards[0]["value"] == "NGSS 5-ESS3-1"

    def test_empty_single_standards_cell_is_dropped(self):
        blob = legacy_blob()
        blob["initialPlanning"]["standards"] = _cell("Standards")
        assert migrate_content(blob)["initialPlanning"]["standards"] == []

    def test_synthesizes_missing_cells(self):
        migrated = migrate_content(legacy_blob())
        assert migrated["initialPlanning"]["communityPartners"]["label"] == "Community Partners"
        assert migrated["initialPlanning"]["additional"] == []
        assert migrated["designThinking"]["additional"] == []

    def test_idempotent(self):
        once = migrate_content(legacy_blob())
        assert migrate_content(once) == once

    def test_current_layout_untouched(self):
        current = create_empty_board_content().to_dict()
        assert migrate_content(current) == current

    def test_input_not_mutated(self):
        blob = legacy_blob()
        migrate_content(blob)
        assert "milestone1" in blob["designThinking"]


class TestLoadContent:
    def test_legacy_json_text(self):
        content = load_content(json.dumps(legacy_blob()), ["Science"])
        assert content.design_thinking.milestone_empathize.value == "empathy map"
        assert content.design_thinking.milestone_ideate.value == ""
        # "Standards: General" is not a configured subject, so sync replaces it
        assert [c.label for c in content.initial_planning.standards] == ["Standards: Science"]

    def test_standards_synced_with_subjects(self):
        blob = create_empty_board_content().to_dict()
        blob["initialPlanning"]["standards"] = [_cell("Standards: Math", "CCSS")]
        content = load_content(blob, ["Math", "Art"])
        assert [(c.label, c.value) for c in content.initial_planning.standards] == [
            ("Standards: Math", "CCSS"),
            ("Standards: Art", ""),
        ]

    def test_invalid_json_loads_empty_board(self):
        content = load_content("{not json", list(DEFAULT_SUBJECTS))
        assert content.initial_planning.main_idea.value == ""
        assert len(content.agenda) == 1
        assert len(content.initial_planning.standards) == len(DEFAULT_SUBJECTS)

    def test_none_loads_empty_board(self):
        assert load_content(None, []).initial_planning.standards == []


class TestDecodeSubjects:
    def test_list(self):
        assert decode_subjects(["Art"]) == ["Art"]

    def test_json_text(self):
        assert decode_subjects('["Math", "Art"]') == ["Math", "Art"]

    def test_defaults(self):
        assert decode_subjects(None) == list(DEFAULT_SUBJECTS)
        assert decode_subjects("[]") == list(DEFAULT_SUBJECTS)
        assert decode_subjects("garbage") == list(DEFAULT_SUBJECTS)
