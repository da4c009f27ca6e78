"""Board models. Represents rows in the boards table and their API shapes."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from boardcore.migrations import decode_subjects, load_content
from boardcore.types import BoardContent, BoardContext
from studio.models.common import CamelModel, CamelRequest


class Board(BaseModel):
    """
    Core board model. Represents a row in the boards table.

    `content` and `subjects` hold the stored blobs as-is; document() and
    decoded_subjects() give the migrated, standards-synced view.
    """

    id: UUID
    user_id: str
    title: str = "Untitled Board"
    slug: str
    content: Any = None
    subjects: Any = None
    state: str | None = None
    grade_level: str | None = None
    location: str | None = None
    created_at: datetime
    updated_at: datetime

    def decoded_subjects(self) -> list[str]:
        return decode_subjects(self.subjects)

    def document(self) -> BoardContent:
        return load_content(self.content, self.decoded_subjects())

    def context(self) -> BoardContext:
        return BoardContext(
            state=self.state,
            grade_level=self.grade_level,
            subjects=self.decoded_subjects(),
            location=self.location,
        )


class CreateBoardRequest(CamelRequest):
    """What the client sends to create a board. The body is optional."""

    title: str = Field(default="Untitled Board", max_length=200)


class UpdateBoardRequest(CamelRequest):
    """Partial update. Fields left out are not touched."""

    title: str | None = Field(default=None, max_length=200)
    content: dict[str, Any] | None = None
    state: str | None = Field(default=None, max_length=100)
    grade_level: str | None = Field(default=None, max_length=50)
    subjects: list[str] | None = None
    location: str | None = Field(default=None, max_length=200)

    @field_validator("title", "content")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # title and content may be left out but never cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class BoardResponse(CamelModel):
    """What the API returns. Content is always in the current layout."""

    id: UUID
    title: str
    slug: str
    content: dict[str, Any]
    subjects: list[str]
    state: str | None
    grade_level: str | None
    location: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, board: Board) -> BoardResponse:
        """Convert a board row to the API shape, migrating stored content."""
        return cls(
            id=board.id,
            title=board.title,
            slug=board.slug,
            content=board.document().to_dict(),
            subjects=board.decoded_subjects(),
            state=board.state,
            grade_level=board.grade_level,
            location=board.location,
            created_at=board.created_at,
            updated_at=board.updated_at,
        )


class BoardSummary(CamelModel):
    """Board list entry (no content)."""

    id: UUID
    title: str
    slug: str
    updated_at: datetime

    @classmethod
    def from_model(cls, board: Board) -> BoardSummary:
        return cls(id=board.id, title=board.title, slug=board.slug, updated_at=board.updated_at)
