"""Lesson plan models. Represents rows in the lesson_plans table and their API shapes."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from boardcore.types import LessonPlan, LessonPlanContent
from studio.models.common import CamelModel, CamelRequest


class LessonSections(CamelModel):
    """The seven sections of a lesson plan."""

    learning_objectives: str = ""
    materials: str = ""
    warm_up_hook: str = ""
    main_activities: str = ""
    closing_exit_ticket: str = ""
    differentiation_notes: str = ""
    standards_addressed: str = ""


class Lesson(BaseModel):
    """Core lesson plan model. Represents a row in the lesson_plans table."""

    id: UUID
    board_id: UUID
    agenda_entry_id: str
    subject: str
    period_minutes: int
    content: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    def to_plan(self) -> LessonPlan:
        """The document-engine view used for cell-key routing."""
        return LessonPlan(
            id=str(self.id),
            board_id=str(self.board_id),
            agenda_entry_id=self.agenda_entry_id,
            subject=self.subject,
            period_minutes=self.period_minutes,
            content=LessonPlanContent.from_dict(self.content or {}),
        )


class CreateLessonRequest(CamelRequest):
    """What the client sends to save a lesson plan. Every field is required."""

    board_id: UUID
    agenda_entry_id: str = Field(min_length=1)
    subject: str = Field(min_length=1, max_length=100)
    period_minutes: int = Field(gt=0, le=600)
    content: LessonSections


class UpdateLessonRequest(CamelRequest):
    """What the client sends to update a lesson. All fields optional."""

    content: LessonSections | None = None
    period_minutes: int | None = Field(default=None, gt=0, le=600)


class LessonResponse(CamelModel):
    """What the API returns."""

    id: UUID
    board_id: UUID
    agenda_entry_id: str
    subject: str
    period_minutes: int
    content: LessonSections
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, lesson: Lesson) -> LessonResponse:
        return cls(
            id=lesson.id,
            board_id=lesson.board_id,
            agenda_entry_id=lesson.agenda_entry_id,
            subject=lesson.subject,
            period_minutes=lesson.period_minutes,
            content=LessonSections.model_validate(lesson.content or {}),
            created_at=lesson.created_at,
            updated_at=lesson.updated_at,
        )
