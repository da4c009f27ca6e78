"""
Board Core: Proposed Changes

The collaborator returns a batch of proposed cell edits. Each one is
accepted or rejected on its own; "accept all remaining" takes every change
still pending and applies them together as a single edit.

Changes are routed by key: lesson keys update lesson plans, everything else
updates the board document. Keys that resolve nowhere are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from boardcore.cells import LessonSection, parse_cell_key, set_lesson_value, set_value
from boardcore.types import BoardContent, LessonPlan, LessonPlanContent

logger = logging.getLogger(__name__)

ChangeStatus = Literal["pending", "accepted", "rejected"]


@dataclass
class ProposedChange:
    cell_id: str
    proposed_value: str
    cell_label: str = ""
    current_value: str = ""
    rationale: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "cellId": self.cell_id,
            "cellLabel": self.cell_label,
            "currentValue": self.current_value,
            "proposedValue": self.proposed_value,
            "rationale": self.rationale,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> ProposedChange:
        return cls(
            cell_id=str(d.get("cellId") or ""),
            proposed_value=str(d.get("proposedValue") or ""),
            cell_label=str(d.get("cellLabel") or ""),
            current_value=str(d.get("currentValue") or ""),
            rationale=str(d.get("rationale") or ""),
        )


@dataclass
class ChangeRoute:
    """Result of routing a set of changes: new board content plus lesson updates."""

    content: BoardContent
    lessons: list[LessonPlan]
    lesson_updates: dict[str, LessonPlanContent] = field(default_factory=dict)
    board_keys: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)

    @property
    def board_changed(self) -> bool:
        return bool(self.board_keys)


def route_changes(
    content: BoardContent,
    lessons: Sequence[LessonPlan],
    changes: Sequence[ProposedChange],
) -> ChangeRoute:
    """Fold `changes` into the board and the lesson list, in order."""
    route = ChangeRoute(content=content, lessons=list(lessons))
    for change in changes:
        address = parse_cell_key(change.cell_id)
        if isinstance(address, LessonSection):
            updated = set_lesson_value(route.lessons, change.cell_id, change.proposed_value)
            if updated is route.lessons:
                logger.warning("proposals: no lesson for key %s, dropping change", change.cell_id)
                route.dropped.append(change.cell_id)
                continue
            route.lessons = updated
            lesson = next(lp for lp in updated if lp.id == address.lesson_id)
            route.lesson_updates[lesson.id] = lesson.content
            continue
        new_content = set_value(route.content, change.cell_id, change.proposed_value)
        if new_content is route.content:
            logger.warning("proposals: key %s does not resolve, dropping change", change.cell_id)
            route.dropped.append(change.cell_id)
            continue
        route.content = new_content
        route.board_keys.append(change.cell_id)
    return route


class ProposalBatch:
    """Accept/reject bookkeeping for one collaborator response."""

    def __init__(self, changes: Sequence[ProposedChange]):
        self.changes = list(changes)
        self.status: list[ChangeStatus] = ["pending"] * len(self.changes)

    def pending(self) -> list[ProposedChange]:
        return [c for c, s in zip(self.changes, self.status) if s == "pending"]

    def accept(self, index: int) -> ProposedChange | None:
        """Mark one change accepted. Returns it, or None if it was already decided."""
        if self.status[index] != "pending":
            return None
        self.status[index] = "accepted"
        return self.changes[index]

    def reject(self, index: int) -> None:
        if self.status[index] == "pending":
            self.status[index] = "rejected"

    def accept_all_remaining(self) -> list[ProposedChange]:
        """Mark every pending change accepted and return them, in order."""
        remaining = []
        for i, status in enumerate(self.status):
            if status == "pending":
                self.status[i] = "accepted"
                remaining.append(self.changes[i])
        return remaining

    @property
    def done(self) -> bool:
        return all(s != "pending" for s in self.status)
