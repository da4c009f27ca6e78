"""Lesson plan routes: list by board, create, update, delete."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from studio.auth import get_current_user
from studio.models.lesson import CreateLessonRequest, LessonResponse, UpdateLessonRequest
from studio.models.user import User
from studio.repos.lesson_repo import LessonRepo

router = APIRouter(prefix="/api/lessons", tags=["lessons"])
lesson_repo = LessonRepo()


@router.get("", status_code=200)
async def list_lessons(
    board_id: UUID = Query(alias="boardId"),
    user: User = Depends(get_current_user),
) -> list[LessonResponse]:
    """List a board's lesson plans, ordered by agenda entry then subject."""
    lessons = await lesson_repo.list_for_board(user.id, board_id)
    return [LessonResponse.from_model(lp) for lp in lessons]


@router.post("", status_code=201)
async def create_lesson(
    req: CreateLessonRequest,
    user: User = Depends(get_current_user),
) -> LessonResponse:
    """Save a lesson plan for one agenda entry and subject."""
    lesson = await lesson_repo.create(
        user.id,
        req.board_id,
        req.agenda_entry_id,
        req.subject,
        req.period_minutes,
        req.content.model_dump(by_alias=True),
    )
    if not lesson:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found.")
    return LessonResponse.from_model(lesson)


@router.put("/{lesson_id}", status_code=200)
async def update_lesson(
    lesson_id: UUID,
    req: UpdateLessonRequest,
    user: User = Depends(get_current_user),
) -> LessonResponse:
    """Update a lesson's sections and/or period length."""
    content = req.content.model_dump(by_alias=True) if req.content else None
    lesson = await lesson_repo.update(user.id, lesson_id, content=content, period_minutes=req.period_minutes)
    if not lesson:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found.")
    return LessonResponse.from_model(lesson)


@router.delete("/{lesson_id}", status_code=200)
async def delete_lesson(
    lesson_id: UUID,
    user: User = Depends(get_current_user),
) -> dict[str, str]:
    """Delete a lesson plan."""
    deleted = await lesson_repo.delete(user.id, lesson_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found.")
    return {"message": "Lesson deleted."}
