"""
Generation service: builds prompts from board data, calls the model and
hands back typed results.

Nothing here writes board content. Routes return results to the client,
which applies them through its edit session so each result is one undo
step. The exception is lesson batches, which are saved as they arrive.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import UUID

from boardcore.cells import AgendaField, LessonSection, cell_label, get_cell, get_value, parse_cell_key
from boardcore.types import LESSON_SECTION_LABELS, BoardContent, BoardContext, LessonPlan
from studio.models.generation import (
    AgendaPlan,
    BoardVariation,
    BoardVariationFallback,
    CellSuggestions,
    CollaboratorResponse,
    HqpblFeedback,
    LessonPlanGeneration,
    LessonSelection,
    Suggestion,
)
from studio.models.lesson import Lesson
from studio.repos.lesson_repo import LessonRepo
from studio.services import prompts
from studio.services.llm_client import GenerationError, LLMClient

logger = logging.getLogger(__name__)

_QUOTES_RE = re.compile(r"^[\"']|[\"']$")

_AGENDA_PROMPTS = {
    "eventsContent": "agendaEventsContent",
    "reflection": "agendaReflection",
    "leads": "agendaLeads",
}


class TargetNotFoundError(LookupError):
    """A cell key, lesson or agenda entry named in a request does not exist on the board."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class CellTarget:
    """Everything the cell prompt needs about one addressable field."""

    prompt_id: str
    label: str
    value: str
    lesson: LessonPlan | None = None


@dataclass
class LessonBatchResult:
    created: list[Lesson] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)


def resolve_target(content: BoardContent, key: str, lessons: Sequence[LessonPlan] = ()) -> CellTarget:
    """
    Resolve a cell key to its prompt id, label and current value.

    Raises:
        TargetNotFoundError: If the key does not point at anything
    """
    address = parse_cell_key(key)
    if address is None:
        raise TargetNotFoundError(f"Unknown cell '{key}'")

    if isinstance(address, LessonSection):
        lesson = next((lp for lp in lessons if lp.id == address.lesson_id), None)
        if lesson is None:
            raise TargetNotFoundError(f"Lesson '{address.lesson_id}' not found")
        label = f"{lesson.subject}: {LESSON_SECTION_LABELS[address.section_key]}"
        return CellTarget("lessonSection", label, lesson.content.get(address.section_key), lesson)

    if isinstance(address, AgendaField):
        if address.index >= len(content.agenda):
            raise TargetNotFoundError(f"Agenda session {address.index + 1} not found")
        return CellTarget(_AGENDA_PROMPTS[address.field], cell_label(content, key), get_value(content, key))

    if get_cell(content, key) is None:
        raise TargetNotFoundError(f"Cell '{key}' not found on this board")
    return CellTarget(key, cell_label(content, key), get_value(content, key))


def _entry_index(content: BoardContent, agenda_entry_id: str) -> int:
    for i, entry in enumerate(content.agenda):
        if entry.id == agenda_entry_id:
            return i
    raise TargetNotFoundError(f"Agenda entry '{agenda_entry_id}' not found")


class GenerationService:
    """All model-backed board operations."""

    def __init__(self, llm: LLMClient | None = None, lesson_repo: LessonRepo | None = None):
        self._llm = llm
        self.lesson_repo = lesson_repo or LessonRepo()

    @property
    def llm(self) -> LLMClient:
        # Built on first use so importing the app never needs an API key
        if self._llm is None:
            self._llm = LLMClient()
        return self._llm

    async def suggest(
        self,
        content: BoardContent,
        context: BoardContext,
        key: str,
        feedback: str | None = None,
        add_section: str | None = None,
        lessons: Sequence[LessonPlan] = (),
    ) -> list[Suggestion]:
        """
        Suggestions for one cell.

        With `add_section` the model writes one new section to append; with
        `feedback` it revises the current value once; otherwise it offers 1-3
        alternatives.
        """
        target = resolve_target(content, key, lessons)

        if add_section:
            feedback = prompts.build_add_section_feedback(add_section)
        elif feedback and target.lesson is not None:
            feedback = prompts.build_lesson_section_feedback(
                target.lesson.subject,
                target.lesson.period_minutes,
                target.label,
                feedback,
            )

        prompt = prompts.build_cell_prompt(target.prompt_id, target.label, target.value, content, context, feedback)
        result = await self.llm.generate_object(prompt, CellSuggestions, prompts.system_prompt())
        logger.info("generation: %d suggestion(s) for cell=%s", len(result.suggestions), key)
        return result.suggestions

    async def suggest_title(self, content: BoardContent, context: BoardContext) -> str:
        """A short project title built from the main idea."""
        feedback = prompts.build_title_feedback(content, context)
        value = content.initial_planning.main_idea.value
        prompt = prompts.build_cell_prompt("boardTitle", "Board Title", value, content, context, feedback)
        result = await self.llm.generate_object(prompt, CellSuggestions, prompts.system_prompt())
        if not result.suggestions:
            raise GenerationError("The model did not suggest a title.")
        return _QUOTES_RE.sub("", result.suggestions[0].text.strip())

    async def generate_board_variation(
        self,
        content: BoardContent,
        context: BoardContext,
        feedback: str | None = None,
        previous_variation: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """One complete board variation, camelCase keys, ready for apply_variation."""
        prompt = prompts.build_board_prompt(content, context, feedback, previous_variation)
        if context.subjects:
            schema = BoardVariation.model_json_schema()
            schema["properties"]["standards"]["description"] = "Standards for each subject: " + ", ".join(
                context.subjects
            )
            variation: BoardVariation | BoardVariationFallback = await self.llm.generate_object(
                prompt, BoardVariation, prompts.system_prompt(), json_schema=schema
            )
        else:
            variation = await self.llm.generate_object(prompt, BoardVariationFallback, prompts.system_prompt())
        return variation.model_dump(by_alias=True)

    async def generate_agenda(self, content: BoardContent, context: BoardContext, num_days: int) -> list[dict[str, Any]]:
        """Agenda sessions, camelCase keys, ready for apply_agenda."""
        prompt = prompts.build_agenda_prompt(content, context, num_days)
        plan = await self.llm.generate_object(prompt, AgendaPlan, prompts.system_prompt())
        if len(plan.sessions) != num_days:
            logger.warning("generation: asked for %d sessions, got %d", num_days, len(plan.sessions))
        return [s.model_dump(by_alias=True) for s in plan.sessions]

    async def generate_lesson(
        self,
        content: BoardContent,
        context: BoardContext,
        agenda_entry_id: str,
        subject: str,
        period_minutes: int,
    ) -> LessonPlanGeneration:
        index = _entry_index(content, agenda_entry_id)
        prompt = prompts.build_lesson_prompt(
            content, context, content.agenda[index], index, subject, period_minutes
        )
        return await self.llm.generate_object(prompt, LessonPlanGeneration, prompts.system_prompt())

    async def generate_lessons_for_session(
        self,
        user_id: str,
        board_id: UUID,
        content: BoardContent,
        context: BoardContext,
        agenda_entry_id: str,
        selections: Sequence[LessonSelection],
    ) -> LessonBatchResult:
        """
        Generate and save one lesson per selected subject, in order.

        A failed subject is recorded and the batch moves on; lessons that
        were already saved stay saved.
        """
        _entry_index(content, agenda_entry_id)
        result = LessonBatchResult()
        for selection in selections:
            try:
                generated = await self.generate_lesson(
                    content, context, agenda_entry_id, selection.subject, selection.period_minutes
                )
            except GenerationError as e:
                logger.warning("generation: lesson for subject=%s failed: %s", selection.subject, e.message)
                result.failures.append((selection.subject, e.message))
                continue

            lesson = await self.lesson_repo.create(
                user_id,
                board_id,
                agenda_entry_id,
                selection.subject,
                selection.period_minutes,
                generated.model_dump(by_alias=True),
            )
            if lesson is None:
                result.failures.append((selection.subject, "Board not found"))
                continue
            result.created.append(lesson)

        logger.info(
            "generation: lesson batch board_id=%s created=%d failed=%d",
            board_id,
            len(result.created),
            len(result.failures),
        )
        return result

    async def collaborate(
        self,
        content: BoardContent,
        context: BoardContext,
        user_message: str,
        mode: Literal["board", "lessons"] = "board",
        lessons: Sequence[LessonPlan] = (),
    ) -> CollaboratorResponse:
        if mode == "lessons":
            prompt = prompts.build_lesson_collaborator_prompt(content, context, lessons, user_message)
        else:
            prompt = prompts.build_collaborator_prompt(content, context, user_message)
        return await self.llm.generate_object(prompt, CollaboratorResponse, prompts.system_prompt())

    async def evaluate_hqpbl(self, content: BoardContent) -> HqpblFeedback:
        prompt = prompts.build_hqpbl_prompt(content)
        return await self.llm.generate_object(prompt, HqpblFeedback, prompts.system_prompt())

    def stream_standards(self, topic: str, state: str | None = None, grade_level: str | None = None) -> AsyncIterator[str]:
        prompt = prompts.build_standards_prompt(topic, state, grade_level)
        return self.llm.stream_text(prompt, prompts.system_prompt())


generation_service = GenerationService()
