"""
Board Core: Edit History

Whole-document undo/redo over BoardContent snapshots.

History holds a bounded `past` (oldest evicted first) and a `future`.
Edits that land within the coalescing window of the previous history push
share one undo step, so a burst of keystrokes undoes as a unit while the
current content still reflects every keystroke.

Undo and redo close the window, so the next edit after either one is
always its own step and clears `future`.

EditSession is the state holder for one open board. It applies edits,
records history and reports every change through `on_change`, which the
service wires to debounced persistence.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Sequence

from boardcore import cells, sections
from boardcore.proposals import ChangeRoute, ProposedChange, route_changes
from boardcore.types import BoardContent, LessonPlan

MAX_HISTORY = 50
COALESCE_SECONDS = 1.0


class History:
    """Bounded past/future stacks of board snapshots."""

    def __init__(
        self,
        max_depth: int = MAX_HISTORY,
        coalesce_seconds: float = COALESCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.past: deque[BoardContent] = deque(maxlen=max_depth)
        self.future: list[BoardContent] = []
        self.coalesce_seconds = coalesce_seconds
        self._clock = clock
        self._last_push: float | None = None

    def record(self, previous: BoardContent, force: bool = False) -> bool:
        """
        Push `previous` unless the last push was inside the coalescing window.

        `force` always pushes. Returns True when an entry was pushed.
        """
        now = self._clock()
        if not force and self._last_push is not None and now - self._last_push <= self.coalesce_seconds:
            return False
        self.past.append(previous)
        self.future.clear()
        self._last_push = now
        return True

    def undo(self, current: BoardContent) -> BoardContent | None:
        if not self.past:
            return None
        self.future.append(current)
        self._last_push = None
        return self.past.pop()

    def redo(self, current: BoardContent) -> BoardContent | None:
        if not self.future:
            return None
        self.past.append(current)
        self._last_push = None
        return self.future.pop()


class EditSession:
    """
    In-memory editing state for one board.

    The in-memory content is the source of truth for the session;
    `on_change` is told about every new state and its failures are not
    this class's concern.
    """

    def __init__(
        self,
        content: BoardContent,
        history: History | None = None,
        on_change: Callable[[BoardContent], None] | None = None,
    ):
        self._content = content
        self.history = history or History()
        self._on_change = on_change

    @property
    def content(self) -> BoardContent:
        return self._content

    @property
    def can_undo(self) -> bool:
        return bool(self.history.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.history.future)

    def apply_edit(self, new_content: BoardContent, checkpoint: bool = False) -> BoardContent:
        """
        Make `new_content` current.

        `checkpoint` records a history entry even inside the coalescing
        window; discrete operations (moves, AI results, batch accepts) use
        it so each one is exactly one undo step.
        """
        self.history.record(self._content, force=checkpoint)
        return self._set(new_content)

    def undo(self) -> BoardContent:
        previous = self.history.undo(self._content)
        if previous is None:
            return self._content
        return self._set(previous)

    def redo(self) -> BoardContent:
        following = self.history.redo(self._content)
        if following is None:
            return self._content
        return self._set(following)

    # Cell-level helpers

    def set_cell(self, key: str, value: str) -> BoardContent:
        return self.apply_edit(cells.set_value(self._content, key, value))

    def reorder_section(self, key: str, src: int, dst: int) -> BoardContent:
        value = cells.get_value(self._content, key)
        updated = sections.reorder_section(value, src, dst)
        if updated == value:
            return self._content
        return self.apply_edit(cells.set_value(self._content, key, updated), checkpoint=True)

    def delete_section(self, key: str, index: int) -> BoardContent:
        value = cells.get_value(self._content, key)
        updated = sections.delete_section(value, index)
        if updated == value:
            return self._content
        return self.apply_edit(cells.set_value(self._content, key, updated), checkpoint=True)

    def edit_section(self, key: str, index: int, new_text: str) -> BoardContent:
        value = cells.get_value(self._content, key)
        return self.apply_edit(cells.set_value(self._content, key, sections.edit_section(value, index, new_text)))

    def add_additional(self, section: cells.AdditionalSection = "initialPlanning") -> BoardContent:
        return self.apply_edit(cells.add_additional_cell(self._content, section), checkpoint=True)

    def remove_additional(self, key: str) -> BoardContent:
        return self._checkpoint_if_changed(cells.remove_additional_cell(self._content, key))

    def add_agenda_entry(self) -> BoardContent:
        return self.apply_edit(cells.add_agenda_entry(self._content), checkpoint=True)

    def remove_agenda_entry(self, index: int) -> BoardContent:
        return self._checkpoint_if_changed(cells.remove_agenda_entry(self._content, index))

    def move_section(
        self,
        source_key: str,
        target_key: str,
        raw_text: str,
        position: int | None = None,
    ) -> BoardContent:
        """
        Move a section's raw text between two cells as one edit.

        Moves within a single cell go through reorder_section instead.
        """
        if source_key == target_key:
            raise ValueError("source and target are the same cell; use reorder_section")
        for key in (source_key, target_key):
            address = cells.parse_cell_key(key)
            if address is None or isinstance(address, cells.LessonSection):
                raise ValueError(f"not a board cell key: {key}")
        new_source, new_target = sections.move_section_text(
            cells.get_value(self._content, source_key),
            cells.get_value(self._content, target_key),
            raw_text,
            position,
        )
        moved = cells.set_value(self._content, source_key, new_source)
        moved = cells.set_value(moved, target_key, new_target)
        return self.apply_edit(moved, checkpoint=True)

    def apply_changes(
        self,
        changes: Sequence[ProposedChange],
        lessons: Sequence[LessonPlan] = (),
    ) -> ChangeRoute:
        """
        Apply a batch of proposed changes as one undo step.

        Board keys land in the document; lesson keys are returned in the
        route's `lesson_updates` for the caller to persist.
        """
        route = route_changes(self._content, lessons, changes)
        if route.board_changed:
            self.apply_edit(route.content, checkpoint=True)
        return route

    def _checkpoint_if_changed(self, updated: BoardContent) -> BoardContent:
        if updated is self._content:
            return self._content
        return self.apply_edit(updated, checkpoint=True)

    def _set(self, content: BoardContent) -> BoardContent:
        self._content = content
        if self._on_change is not None:
            self._on_change(content)
        return content
