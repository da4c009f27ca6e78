"""
Board Core: Cell Addressing

Every editable field on a board (and in its lesson plans) is reachable
through a flat string key. Keys are parsed into a tagged address and all
lookups and updates dispatch over that address:

    mainIdea, drivingQuestion, ...      -> FixedCell(name)
    standards-<subject>                 -> StandardsCell(subject)
    additional-<i>, dt-additional-<i>   -> AdditionalCell(section, index)
    lesson-<lessonId>-<sectionKey>      -> LessonSection(lesson_id, section_key)
    agenda-<i>-<field>                  -> AgendaField(index, field)
      (field: eventsContent, reflection, leads)

Unknown keys parse to None. get_value returns "" for them and set_value
returns the content unchanged.

Adding and removing "additional" cells and agenda sessions also lives
here. Additional cells are addressed by position, so removing one
renumbers every later key in that section.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal, Union

from boardcore.types import (
    DESIGN_THINKING_KEYS,
    FIXED_CELL_KEYS,
    INITIAL_PLANNING_KEYS,
    LESSON_SECTION_KEYS,
    STANDARDS_LABEL_PREFIX,
    BoardContent,
    Cell,
    LessonPlan,
    cell_attr,
    create_empty_agenda_entry,
    create_empty_cell,
    standards_label,
)

STANDARDS_PREFIX = "standards-"
ADDITIONAL_PREFIX = "additional-"
DT_ADDITIONAL_PREFIX = "dt-additional-"
LESSON_PREFIX = "lesson-"

_LESSON_KEY_RE = re.compile(r"^lesson-(.+)-(" + "|".join(LESSON_SECTION_KEYS) + r")$")
_ADDITIONAL_RE = re.compile(r"^(dt-)?additional-(\d+)$")
_AGENDA_RE = re.compile(r"^agenda-(\d+)-(eventsContent|reflection|leads)$")

# Agenda field key -> AgendaEntry attribute, display label
_AGENDA_ATTRS = {"eventsContent": "events_content", "reflection": "reflection", "leads": "leads"}
_AGENDA_LABELS = {"eventsContent": "Session Activities", "reflection": "Session Reflection", "leads": "Session Title"}

ADDITIONAL_LABEL = "Additional"
ADDITIONAL_SUBTITLE = "Custom planning column"


AdditionalSection = Literal["initialPlanning", "designThinking"]


@dataclass(frozen=True)
class FixedCell:
    name: str


@dataclass(frozen=True)
class StandardsCell:
    subject: str


@dataclass(frozen=True)
class AdditionalCell:
    section: AdditionalSection
    index: int


@dataclass(frozen=True)
class LessonSection:
    lesson_id: str
    section_key: str


@dataclass(frozen=True)
class AgendaField:
    index: int
    field: Literal["eventsContent", "reflection", "leads"]


CellAddress = Union[FixedCell, StandardsCell, AdditionalCell, LessonSection, AgendaField]


def parse_cell_key(key: str) -> CellAddress | None:
    """Parse a flat cell key. Returns None when the key maps to nothing."""
    if key in FIXED_CELL_KEYS:
        return FixedCell(key)
    if key.startswith(STANDARDS_PREFIX):
        return StandardsCell(key[len(STANDARDS_PREFIX) :])
    m = _ADDITIONAL_RE.match(key)
    if m:
        section = "designThinking" if m.group(1) else "initialPlanning"
        return AdditionalCell(section, int(m.group(2)))
    m = _LESSON_KEY_RE.match(key)
    if m:
        return LessonSection(m.group(1), m.group(2))
    m = _AGENDA_RE.match(key)
    if m:
        return AgendaField(int(m.group(1)), m.group(2))  # type: ignore[arg-type]
    return None


def format_cell_key(address: CellAddress) -> str:
    if isinstance(address, FixedCell):
        return address.name
    if isinstance(address, StandardsCell):
        return STANDARDS_PREFIX + address.subject
    if isinstance(address, AdditionalCell):
        prefix = DT_ADDITIONAL_PREFIX if address.section == "designThinking" else ADDITIONAL_PREFIX
        return f"{prefix}{address.index}"
    if isinstance(address, LessonSection):
        return f"{LESSON_PREFIX}{address.lesson_id}-{address.section_key}"
    return f"agenda-{address.index}-{address.field}"


def is_lesson_key(key: str) -> bool:
    return key.startswith(LESSON_PREFIX)


def board_cell_keys(content: BoardContent) -> list[str]:
    """Every board key that currently resolves, in display order."""
    keys = list(INITIAL_PLANNING_KEYS[:1])
    keys += [STANDARDS_PREFIX + c.label.removeprefix(STANDARDS_LABEL_PREFIX) for c in content.initial_planning.standards]
    keys += list(INITIAL_PLANNING_KEYS[1:])
    keys += [f"{ADDITIONAL_PREFIX}{i}" for i in range(len(content.initial_planning.additional))]
    keys += list(DESIGN_THINKING_KEYS)
    keys += [f"{DT_ADDITIONAL_PREFIX}{i}" for i in range(len(content.design_thinking.additional))]
    return keys


# ---------------------------------------------------------------------------
# Board accessors
# ---------------------------------------------------------------------------


def get_cell(content: BoardContent, key: str) -> Cell | None:
    """The board cell a key points to, or None."""
    address = parse_cell_key(key)
    if isinstance(address, FixedCell):
        return _fixed_cell(content, address.name)
    if isinstance(address, StandardsCell):
        label = standards_label(address.subject)
        return next((c for c in content.initial_planning.standards if c.label == label), None)
    if isinstance(address, AdditionalCell):
        cells = _additional(content, address.section)
        return cells[address.index] if address.index < len(cells) else None
    return None


def get_value(content: BoardContent, key: str) -> str:
    """Current text at a board key. Unknown or unresolved keys read as ""."""
    address = parse_cell_key(key)
    if isinstance(address, AgendaField):
        if address.index >= len(content.agenda):
            return ""
        return getattr(content.agenda[address.index], _AGENDA_ATTRS[address.field])
    cell = get_cell(content, key)
    return cell.value if cell else ""


def set_value(content: BoardContent, key: str, value: str) -> BoardContent:
    """
    Return a copy of `content` with the cell at `key` set to `value`.

    Untouched branches are shared with the input. Keys that do not resolve
    (unknown names, missing subjects, out-of-range indices, lesson keys)
    return `content` itself.
    """
    address = parse_cell_key(key)

    if isinstance(address, FixedCell):
        if address.name in INITIAL_PLANNING_KEYS:
            ip = content.initial_planning
            attr = cell_attr(address.name)
            ip = replace(ip, **{attr: replace(getattr(ip, attr), value=value)})
            return replace(content, initial_planning=ip)
        dt = content.design_thinking
        attr = cell_attr(address.name)
        dt = replace(dt, **{attr: replace(getattr(dt, attr), value=value)})
        return replace(content, design_thinking=dt)

    if isinstance(address, StandardsCell):
        label = standards_label(address.subject)
        standards = content.initial_planning.standards
        if not any(c.label == label for c in standards):
            return content
        updated = [replace(c, value=value) if c.label == label else c for c in standards]
        return replace(content, initial_planning=replace(content.initial_planning, standards=updated))

    if isinstance(address, AdditionalCell):
        cells = _additional(content, address.section)
        if address.index >= len(cells):
            return content
        updated = list(cells)
        updated[address.index] = replace(cells[address.index], value=value)
        return _with_additional(content, address.section, updated)

    if isinstance(address, AgendaField):
        if address.index >= len(content.agenda):
            return content
        agenda = list(content.agenda)
        agenda[address.index] = replace(agenda[address.index], **{_AGENDA_ATTRS[address.field]: value})
        return replace(content, agenda=agenda)

    return content


def cell_label(content: BoardContent, key: str) -> str:
    """Display label for a key, falling back to the key itself."""
    address = parse_cell_key(key)
    if isinstance(address, AgendaField):
        return _AGENDA_LABELS[address.field]
    cell = get_cell(content, key)
    return cell.label if cell else key


# ---------------------------------------------------------------------------
# Adding and removing cells and sessions
# ---------------------------------------------------------------------------


def add_additional_cell(content: BoardContent, section: AdditionalSection = "initialPlanning") -> BoardContent:
    """Append an empty custom column to `section`. Its key is the next free index."""
    cells = _additional(content, section)
    return _with_additional(content, section, [*cells, create_empty_cell(ADDITIONAL_LABEL, ADDITIONAL_SUBTITLE)])


def remove_additional_cell(content: BoardContent, key: str) -> BoardContent:
    """
    Drop the additional cell at `key`. Later cells in the same section shift
    down one index. Keys that do not name an existing additional cell are a no-op.
    """
    address = parse_cell_key(key)
    if not isinstance(address, AdditionalCell):
        return content
    cells = _additional(content, address.section)
    if address.index >= len(cells):
        return content
    return _with_additional(content, address.section, [c for i, c in enumerate(cells) if i != address.index])


def add_agenda_entry(content: BoardContent) -> BoardContent:
    return replace(content, agenda=[*content.agenda, create_empty_agenda_entry()])


def remove_agenda_entry(content: BoardContent, index: int) -> BoardContent:
    """Drop session `index`. The last remaining session is never removed."""
    if len(content.agenda) <= 1 or not 0 <= index < len(content.agenda):
        return content
    return replace(content, agenda=[e for i, e in enumerate(content.agenda) if i != index])


# ---------------------------------------------------------------------------
# Lesson accessors
# ---------------------------------------------------------------------------


def get_lesson_value(lessons: list[LessonPlan], key: str) -> str:
    address = parse_cell_key(key)
    if not isinstance(address, LessonSection):
        return ""
    lesson = next((lp for lp in lessons if lp.id == address.lesson_id), None)
    return lesson.content.get(address.section_key) if lesson else ""


def set_lesson_value(lessons: list[LessonPlan], key: str, value: str) -> list[LessonPlan]:
    """Copy of `lessons` with one lesson section replaced. Unresolved keys are a no-op."""
    address = parse_cell_key(key)
    if not isinstance(address, LessonSection):
        return lessons
    if not any(lp.id == address.lesson_id for lp in lessons):
        return lessons
    return [
        replace(lp, content=lp.content.with_section(address.section_key, value)) if lp.id == address.lesson_id else lp
        for lp in lessons
    ]


def _fixed_cell(content: BoardContent, name: str) -> Cell:
    section = content.initial_planning if name in INITIAL_PLANNING_KEYS else content.design_thinking
    return getattr(section, cell_attr(name))


def _additional(content: BoardContent, section: str) -> list[Cell]:
    if section == "designThinking":
        return content.design_thinking.additional
    return content.initial_planning.additional


def _with_additional(content: BoardContent, section: str, cells: list[Cell]) -> BoardContent:
    if section == "designThinking":
        return replace(content, design_thinking=replace(content.design_thinking, additional=cells))
    return replace(content, initial_planning=replace(content.initial_planning, additional=cells))
