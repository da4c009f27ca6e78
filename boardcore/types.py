"""
Board Core: Shared Types

Data classes for the PBL design board document. These are the contracts
shared by the cell accessors, the section parser, the migrations, the
history engine and the generation appliers.

Shape of a board document (persisted as one JSON blob, camelCase keys):
- initialPlanning: mainIdea, standards[], noticeReflect, communityPartners,
  openingActivity, additional[]
- designThinking: drivingQuestion, the four phase cells, the four milestone
  cells, additional[]
- agenda: ordered AgendaEntry list (session N is agenda[N - 1])

Every update is copy-on-write. Functions in this package return new
objects and never mutate their inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4

# ---------------------------------------------------------------------------
# Fixed cell keys
# ---------------------------------------------------------------------------

INITIAL_PLANNING_KEYS: tuple[str, ...] = (
    "mainIdea",
    "noticeReflect",
    "communityPartners",
    "openingActivity",
)

DESIGN_THINKING_KEYS: tuple[str, ...] = (
    "drivingQuestion",
    "empathize",
    "milestoneEmpathize",
    "define",
    "milestoneDefine",
    "ideate",
    "milestoneIdeate",
    "prototypeTest",
    "milestonePrototypeTest",
)

FIXED_CELL_KEYS: tuple[str, ...] = INITIAL_PLANNING_KEYS + DESIGN_THINKING_KEYS

# (label, subtitle) for every fixed cell
CELL_LABELS: dict[str, tuple[str, str]] = {
    "mainIdea": ("Main Idea / Topic", "What is the big idea or theme?"),
    "noticeReflect": ("Notice & Reflect", "What should students notice and reflect on?"),
    "communityPartners": (
        "Community Partners",
        "Local organizations, businesses, or individuals who could partner on this project",
    ),
    "openingActivity": ("Opening Activity", "How will you hook students?"),
    "drivingQuestion": ("Driving Question", "An open-ended question that guides the project"),
    "empathize": ("Empathize", "How will students understand the people they are designing for?"),
    "milestoneEmpathize": (
        "Milestone: Empathize",
        "Checkpoint: what should students demonstrate after empathy work?",
    ),
    "define": ("Define", "What is the specific problem or need?"),
    "milestoneDefine": (
        "Milestone: Define",
        "Checkpoint: how will students show they have defined the problem?",
    ),
    "ideate": ("Ideate", "How will students brainstorm solutions?"),
    "milestoneIdeate": (
        "Milestone: Ideate",
        "Checkpoint: what evidence of creative thinking will students produce?",
    ),
    "prototypeTest": ("Prototype & Test", "How will students build and test solutions?"),
    "milestonePrototypeTest": (
        "Milestone: Prototype & Test",
        "Final deliverable and presentation to an authentic audience",
    ),
}

STANDARDS_LABEL_PREFIX = "Standards: "

DEFAULT_SUBJECTS: tuple[str, ...] = ("Math", "English Language Arts", "Science", "Social Studies")

# Lesson plan sections, in display order, with their labels
LESSON_SECTION_LABELS: dict[str, str] = {
    "learningObjectives": "Learning Objectives",
    "materials": "Materials Needed",
    "warmUpHook": "Warm-Up / Hook",
    "mainActivities": "Main Activities",
    "closingExitTicket": "Closing / Exit Ticket",
    "differentiationNotes": "Differentiation",
    "standardsAddressed": "Standards Addressed",
}

LESSON_SECTION_KEYS: tuple[str, ...] = tuple(LESSON_SECTION_LABELS)

# Lesson content attribute for each wire key
_LESSON_ATTRS: dict[str, str] = {
    "learningObjectives": "learning_objectives",
    "materials": "materials",
    "warmUpHook": "warm_up_hook",
    "mainActivities": "main_activities",
    "closingExitTicket": "closing_exit_ticket",
    "differentiationNotes": "differentiation_notes",
    "standardsAddressed": "standards_addressed",
}


def new_id() -> str:
    """Fresh opaque id for a cell or agenda entry."""
    return uuid4().hex


def standards_label(subject: str) -> str:
    return STANDARDS_LABEL_PREFIX + subject


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Cell:
    """One labeled, independently editable text field."""

    id: str
    label: str
    value: str = ""
    subtitle: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id, "label": self.label, "value": self.value}
        if self.subtitle is not None:
            d["subtitle"] = self.subtitle
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Cell:
        return cls(
            id=str(d.get("id") or new_id()),
            label=str(d.get("label") or ""),
            value=str(d.get("value") or ""),
            subtitle=d.get("subtitle"),
        )


@dataclass
class AgendaEntry:
    """
    One scheduled session.

    `date` holds the design-thinking phase label and `leads` the session
    title; the names are kept from the persisted layout.
    """

    id: str
    date: str = ""
    leads: str = ""
    events_content: str = ""
    reflection: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "leads": self.leads,
            "eventsContent": self.events_content,
            "reflection": self.reflection,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AgendaEntry:
        return cls(
            id=str(d.get("id") or new_id()),
            date=str(d.get("date") or ""),
            leads=str(d.get("leads") or ""),
            events_content=str(d.get("eventsContent") or ""),
            reflection=str(d.get("reflection") or ""),
        )


@dataclass
class InitialPlanning:
    main_idea: Cell
    notice_reflect: Cell
    community_partners: Cell
    opening_activity: Cell
    standards: list[Cell] = field(default_factory=list)
    additional: list[Cell] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mainIdea": self.main_idea.to_dict(),
            "standards": [c.to_dict() for c in self.standards],
            "noticeReflect": self.notice_reflect.to_dict(),
            "communityPartners": self.community_partners.to_dict(),
            "openingActivity": self.opening_activity.to_dict(),
            "additional": [c.to_dict() for c in self.additional],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> InitialPlanning:
        return cls(
            main_idea=_cell_or_empty(d, "mainIdea"),
            notice_reflect=_cell_or_empty(d, "noticeReflect"),
            community_partners=_cell_or_empty(d, "communityPartners"),
            opening_activity=_cell_or_empty(d, "openingActivity"),
            standards=[Cell.from_dict(c) for c in d.get("standards") or [] if isinstance(c, dict)],
            additional=[Cell.from_dict(c) for c in d.get("additional") or [] if isinstance(c, dict)],
        )


@dataclass
class DesignThinking:
    driving_question: Cell
    empathize: Cell
    milestone_empathize: Cell
    define: Cell
    milestone_define: Cell
    ideate: Cell
    milestone_ideate: Cell
    prototype_test: Cell
    milestone_prototype_test: Cell
    additional: list[Cell] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {key: getattr(self, _CELL_ATTRS[key]).to_dict() for key in DESIGN_THINKING_KEYS}
        d["additional"] = [c.to_dict() for c in self.additional]
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DesignThinking:
        cells = {_CELL_ATTRS[key]: _cell_or_empty(d, key) for key in DESIGN_THINKING_KEYS}
        return cls(
            **cells,
            additional=[Cell.from_dict(c) for c in d.get("additional") or [] if isinstance(c, dict)],
        )


@dataclass
class BoardContent:
    """Top-level board document. Persisted as a single blob."""

    initial_planning: InitialPlanning
    design_thinking: DesignThinking
    agenda: list[AgendaEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "initialPlanning": self.initial_planning.to_dict(),
            "designThinking": self.design_thinking.to_dict(),
            "agenda": [e.to_dict() for e in self.agenda],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BoardContent:
        return cls(
            initial_planning=InitialPlanning.from_dict(d.get("initialPlanning") or {}),
            design_thinking=DesignThinking.from_dict(d.get("designThinking") or {}),
            agenda=[AgendaEntry.from_dict(e) for e in d.get("agenda") or [] if isinstance(e, dict)],
        )


@dataclass
class BoardContext:
    """Project context, persisted as separate columns next to the content blob."""

    state: str | None = None
    grade_level: str | None = None
    subjects: list[str] = field(default_factory=list)
    location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state,
            "gradeLevel": self.grade_level,
            "subjects": list(self.subjects),
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BoardContext:
        return cls(
            state=d.get("state") or None,
            grade_level=d.get("gradeLevel") or None,
            subjects=[str(s) for s in d.get("subjects") or []],
            location=d.get("location") or None,
        )


@dataclass
class LessonPlanContent:
    """The seven fixed sections of a lesson plan."""

    learning_objectives: str = ""
    materials: str = ""
    warm_up_hook: str = ""
    main_activities: str = ""
    closing_exit_ticket: str = ""
    differentiation_notes: str = ""
    standards_addressed: str = ""

    def get(self, section_key: str) -> str:
        return getattr(self, _LESSON_ATTRS[section_key])

    def with_section(self, section_key: str, value: str) -> LessonPlanContent:
        return replace(self, **{_LESSON_ATTRS[section_key]: value})

    def to_dict(self) -> dict[str, str]:
        return {key: self.get(key) for key in LESSON_SECTION_KEYS}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LessonPlanContent:
        return cls(**{attr: str(d.get(key) or "") for key, attr in _LESSON_ATTRS.items()})


@dataclass
class LessonPlan:
    """A subject-specific plan for one agenda entry."""

    id: str
    board_id: str
    agenda_entry_id: str
    subject: str
    period_minutes: int
    content: LessonPlanContent = field(default_factory=LessonPlanContent)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

# Python attribute for each fixed cell key
_CELL_ATTRS: dict[str, str] = {
    "mainIdea": "main_idea",
    "noticeReflect": "notice_reflect",
    "communityPartners": "community_partners",
    "openingActivity": "opening_activity",
    "drivingQuestion": "driving_question",
    "empathize": "empathize",
    "milestoneEmpathize": "milestone_empathize",
    "define": "define",
    "milestoneDefine": "milestone_define",
    "ideate": "ideate",
    "milestoneIdeate": "milestone_ideate",
    "prototypeTest": "prototype_test",
    "milestonePrototypeTest": "milestone_prototype_test",
}


def cell_attr(key: str) -> str:
    """Python attribute name for a fixed cell key."""
    return _CELL_ATTRS[key]


def create_empty_cell(label: str, subtitle: str | None = None) -> Cell:
    return Cell(id=new_id(), label=label, value="", subtitle=subtitle)


def create_fixed_cell(key: str) -> Cell:
    label, subtitle = CELL_LABELS[key]
    return create_empty_cell(label, subtitle)


def create_standards_cell(subject: str) -> Cell:
    return create_empty_cell(
        standards_label(subject),
        f"Which {subject} standards will be addressed?",
    )


def create_empty_agenda_entry() -> AgendaEntry:
    return AgendaEntry(id=new_id())


def create_empty_board_content() -> BoardContent:
    """A fresh board: every fixed cell empty, no standards, one empty session."""
    return BoardContent(
        initial_planning=InitialPlanning(
            main_idea=create_fixed_cell("mainIdea"),
            notice_reflect=create_fixed_cell("noticeReflect"),
            community_partners=create_fixed_cell("communityPartners"),
            opening_activity=create_fixed_cell("openingActivity"),
        ),
        design_thinking=DesignThinking(**{_CELL_ATTRS[key]: create_fixed_cell(key) for key in DESIGN_THINKING_KEYS}),
        agenda=[create_empty_agenda_entry()],
    )


def sync_standards(existing: list[Cell], subjects: list[str]) -> list[Cell]:
    """
    Re-derive the standards cells from the subject list.

    Keeps the existing cell whose label is "Standards: <subject>", creates an
    empty one for new subjects and drops cells for subjects no longer listed.
    Order follows `subjects`.
    """
    by_label: dict[str, Cell] = {}
    for cell in existing:
        by_label.setdefault(cell.label, cell)
    return [by_label.get(standards_label(subject)) or create_standards_cell(subject) for subject in subjects]


def _cell_or_empty(d: dict[str, Any], key: str) -> Cell:
    raw = d.get(key)
    if isinstance(raw, dict):
        return Cell.from_dict(raw)
    return create_fixed_cell(key)
