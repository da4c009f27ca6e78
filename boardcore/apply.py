"""
Board Core: Applying Generation Results

Pure functions that fold generated output into a board. Inputs are the
decoded (camelCase) result objects; nothing here talks to a model.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any, Literal

from boardcore.cells import get_value, set_value
from boardcore.types import (
    DESIGN_THINKING_KEYS,
    INITIAL_PLANNING_KEYS,
    AgendaEntry,
    BoardContent,
    cell_attr,
    create_standards_cell,
    new_id,
    standards_label,
)

ApplyMode = Literal["replace", "append"]


def append_text(current: str, text: str) -> str:
    """Append generated text on a new line; an empty cell just takes the text."""
    if not current.strip():
        return text
    return current.rstrip() + "\n" + text


def apply_suggestion(content: BoardContent, key: str, text: str, mode: ApplyMode = "replace") -> BoardContent:
    """Write a chosen suggestion into a cell, replacing or appending."""
    if mode == "append":
        text = append_text(get_value(content, key), text)
    return set_value(content, key, text)


def apply_variation(content: BoardContent, variation: Mapping[str, Any], subjects: Sequence[str]) -> BoardContent:
    """
    Replace every fixed cell and the standards cells with a full-board variation.

    `standards` may be a list of {subject, content} (one per subject) or a
    single string. With a list, each configured subject takes its matching
    entry, reusing the existing cell with that label or creating one, and
    gets "" when no entry matches. Any other shape lands in the first
    standards cell (a string as-is, anything else as "").
    """
    ip = content.initial_planning
    dt = content.design_thinking

    ip = replace(
        ip,
        **{cell_attr(k): replace(getattr(ip, cell_attr(k)), value=str(variation.get(k) or "")) for k in INITIAL_PLANNING_KEYS},
    )
    dt = replace(
        dt,
        **{cell_attr(k): replace(getattr(dt, cell_attr(k)), value=str(variation.get(k) or "")) for k in DESIGN_THINKING_KEYS},
    )

    standards = variation.get("standards")
    if isinstance(standards, list):
        by_subject: dict[str, str] = {}
        for item in standards:
            if isinstance(item, Mapping) and item.get("subject") is not None:
                by_subject.setdefault(str(item["subject"]), str(item.get("content") or ""))
        cells = []
        for subject in subjects:
            label = standards_label(subject)
            cell = next((c for c in ip.standards if c.label == label), None) or create_standards_cell(subject)
            cells.append(replace(cell, value=by_subject.get(subject, "")))
        ip = replace(ip, standards=cells)
    elif ip.standards:
        text = standards if isinstance(standards, str) else ""
        ip = replace(ip, standards=[replace(ip.standards[0], value=text), *ip.standards[1:]])

    return replace(content, initial_planning=ip, design_thinking=dt)


def agenda_from_sessions(sessions: Sequence[Mapping[str, Any]]) -> list[AgendaEntry]:
    """Fresh agenda entries from generated sessions (phase -> date, title -> leads)."""
    return [
        AgendaEntry(
            id=new_id(),
            date=str(s.get("designPhase") or ""),
            leads=str(s.get("title") or ""),
            events_content=str(s.get("eventsContent") or ""),
            reflection=str(s.get("reflection") or ""),
        )
        for s in sessions
    ]


def apply_agenda(content: BoardContent, sessions: Sequence[Mapping[str, Any]]) -> tuple[BoardContent, list[str]]:
    """
    Replace the whole agenda with generated sessions.

    Returns the new content and the ids of the replaced entries. Lesson
    plans tied to those ids are left in place. An empty result leaves the
    agenda as it was.
    """
    if not sessions:
        return content, []
    orphaned = [e.id for e in content.agenda]
    return replace(content, agenda=agenda_from_sessions(sessions)), orphaned
