"""
Generation routes.

Every route loads the board server-side (the live edit session if one is
open, otherwise the stored row) so prompts always see the current content.
Generation failures become {"error": message} responses via the handlers
registered in main.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from boardcore.cells import is_lesson_key
from boardcore.types import BoardContent, BoardContext, LessonPlan
from studio.auth import get_current_user
from studio.models.board import UpdateBoardRequest
from studio.models.generation import (
    AgendaPlan,
    CellSuggestions,
    CollaborateRequest,
    CollaboratorResponse,
    GenerateAgendaRequest,
    GenerateBoardRequest,
    GenerateLessonRequest,
    GenerateLessonsRequest,
    GenerateRequest,
    GenerateTitleRequest,
    HqpblFeedback,
    ImproveRequest,
    LessonBatchResponse,
    LessonFailure,
    LessonPlanGeneration,
    StandardsRequest,
    TitleResponse,
    VariationResponse,
)
from studio.models.lesson import LessonResponse
from studio.models.user import User
from studio.repos.board_repo import BoardRepo
from studio.repos.lesson_repo import LessonRepo
from studio.services.board_service import board_sessions
from studio.services.generation import generation_service
from studio.services.llm_client import GenerationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])
board_repo = BoardRepo()
lesson_repo = LessonRepo()


async def _document(user: User, board_id: UUID) -> tuple[BoardContent, BoardContext]:
    doc = await board_sessions.document(user.id, board_id)
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found.")
    return doc


async def _lesson_plans(user: User, board_id: UUID) -> list[LessonPlan]:
    lessons = await lesson_repo.list_for_board(user.id, board_id)
    return [lp.to_plan() for lp in lessons]


@router.post("/generate", status_code=200)
async def generate(
    req: GenerateRequest,
    user: User = Depends(get_current_user),
) -> CellSuggestions:
    """Suggestions for one cell, agenda field or lesson section."""
    content, context = await _document(user, req.board_id)
    lessons = await _lesson_plans(user, req.board_id) if is_lesson_key(req.cell_id) else []
    suggestions = await generation_service.suggest(
        content,
        context,
        req.cell_id,
        feedback=req.feedback,
        add_section=req.add_section,
        lessons=lessons,
    )
    return CellSuggestions(suggestions=suggestions)


@router.post("/generate-title", status_code=200)
async def generate_title(
    req: GenerateTitleRequest,
    user: User = Depends(get_current_user),
) -> TitleResponse:
    """Suggest a title from the main idea and save it on the board."""
    content, context = await _document(user, req.board_id)
    title = await generation_service.suggest_title(content, context)
    board = await board_repo.update(user.id, req.board_id, UpdateBoardRequest(title=title))
    if not board:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found.")
    return TitleResponse(title=title)


@router.post("/generate-board", status_code=200)
async def generate_board(
    req: GenerateBoardRequest,
    user: User = Depends(get_current_user),
) -> VariationResponse:
    """One full-board variation. The client applies it through its edit session."""
    content, context = await _document(user, req.board_id)
    variation = await generation_service.generate_board_variation(
        content, context, feedback=req.feedback, previous_variation=req.previous_variation
    )
    return VariationResponse(variation=variation)


@router.post("/generate-agenda", status_code=200)
async def generate_agenda(
    req: GenerateAgendaRequest,
    user: User = Depends(get_current_user),
) -> AgendaPlan:
    """Map the board onto `numDays` sessions."""
    content, context = await _document(user, req.board_id)
    sessions = await generation_service.generate_agenda(content, context, req.num_days)
    return AgendaPlan.model_validate({"sessions": sessions})


@router.post("/generate-lesson", status_code=200)
async def generate_lesson(
    req: GenerateLessonRequest,
    user: User = Depends(get_current_user),
) -> LessonPlanGeneration:
    """One lesson plan for an agenda entry and subject. Not saved."""
    content, context = await _document(user, req.board_id)
    return await generation_service.generate_lesson(
        content, context, req.agenda_entry_id, req.subject, req.period_minutes
    )


@router.post("/generate-lessons", status_code=200)
async def generate_lessons(
    req: GenerateLessonsRequest,
    user: User = Depends(get_current_user),
) -> LessonBatchResponse:
    """
    Generate and save one lesson per selected subject.

    Subjects that fail are listed in `failures`; the rest are saved.
    """
    content, context = await _document(user, req.board_id)
    result = await generation_service.generate_lessons_for_session(
        user.id, req.board_id, content, context, req.agenda_entry_id, req.selections
    )
    return LessonBatchResponse(
        created=[LessonResponse.from_model(lp) for lp in result.created],
        failures=[LessonFailure(subject=subject, error=error) for subject, error in result.failures],
    )


@router.post("/collaborate", status_code=200)
async def collaborate(
    req: CollaborateRequest,
    user: User = Depends(get_current_user),
) -> CollaboratorResponse:
    """Analysis plus proposed changes, for the board or for its lesson plans."""
    content, context = await _document(user, req.board_id)
    lessons = await _lesson_plans(user, req.board_id) if req.mode == "lessons" else []
    return await generation_service.collaborate(content, context, req.user_message, mode=req.mode, lessons=lessons)


@router.post("/improve", status_code=200)
async def improve(
    req: ImproveRequest,
    user: User = Depends(get_current_user),
) -> HqpblFeedback:
    """Rate the board against the six HQPBL criteria."""
    content, _ = await _document(user, req.board_id)
    return await generation_service.evaluate_hqpbl(content)


@router.post("/standards", status_code=200)
async def standards(
    req: StandardsRequest,
    user: User = Depends(get_current_user),
) -> StreamingResponse:
    """
    Stream standards suggestions as plain text.

    The first chunk is awaited before the response starts, so a request
    that fails outright still gets an error status.
    """
    stream = generation_service.stream_standards(req.topic, req.state, req.grade_level)
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        first = ""

    async def body() -> AsyncIterator[str]:
        yield first
        try:
            async for chunk in stream:
                yield chunk
        except GenerationError as e:
            logger.warning("ai: standards stream broke off: %s", e.message)

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")
