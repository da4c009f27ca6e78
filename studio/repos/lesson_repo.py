"""Repository for lesson plan operations."""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

import asyncpg

from studio.db import user_conn
from studio.models.lesson import Lesson


def _row_to_lesson(row: asyncpg.Record) -> Lesson:
    """Convert a database row to a Lesson model."""
    return Lesson(
        id=row["id"],
        board_id=row["board_id"],
        agenda_entry_id=row["agenda_entry_id"],
        subject=row["subject"],
        period_minutes=row["period_minutes"],
        content=row["content"] or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class LessonRepo:
    """All lesson-plan database operations. Ownership follows the parent board."""

    async def list_for_board(self, user_id: str, board_id: UUID) -> list[Lesson]:
        """Lessons of one board, ordered by agenda entry then subject."""
        async with user_conn(user_id) as conn:
            rows = await conn.fetch(
                """
                SELECT * FROM lesson_plans
                WHERE board_id = $1
                ORDER BY agenda_entry_id ASC, subject ASC
                """,
                board_id,
            )
            return [_row_to_lesson(row) for row in rows]

    async def get(self, user_id: str, lesson_id: UUID) -> Lesson | None:
        async with user_conn(user_id) as conn:
            row = await conn.fetchrow("SELECT * FROM lesson_plans WHERE id = $1", lesson_id)
            return _row_to_lesson(row) if row else None

    async def create(
        self,
        user_id: str,
        board_id: UUID,
        agenda_entry_id: str,
        subject: str,
        period_minutes: int,
        content: dict[str, Any],
    ) -> Lesson | None:
        """
        Create a lesson plan on a board.

        Returns:
            The new Lesson, or None if the board is not found or not owned by user
        """
        async with user_conn(user_id) as conn:
            owned = await conn.fetchval("SELECT 1 FROM boards WHERE id = $1", board_id)
            if not owned:
                return None
            row = await conn.fetchrow(
                """
                INSERT INTO lesson_plans (id, board_id, agenda_entry_id, subject, period_minutes, content)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING *
                """,
                uuid4(),
                board_id,
                agenda_entry_id,
                subject,
                period_minutes,
                content,
            )
            return _row_to_lesson(row)

    async def update(
        self,
        user_id: str,
        lesson_id: UUID,
        content: dict[str, Any] | None = None,
        period_minutes: int | None = None,
    ) -> Lesson | None:
        """
        Update content and/or period length. None leaves a field as it is.

        Returns:
            Updated Lesson if found and owned by user, None otherwise
        """
        async with user_conn(user_id) as conn:
            row = await conn.fetchrow(
                """
                UPDATE lesson_plans
                SET content = COALESCE($2, content),
                    period_minutes = COALESCE($3, period_minutes),
                    updated_at = now()
                WHERE id = $1
                RETURNING *
                """,
                lesson_id,
                content,
                period_minutes,
            )
            return _row_to_lesson(row) if row else None

    async def delete(self, user_id: str, lesson_id: UUID) -> bool:
        """
        Delete a lesson plan.

        Returns:
            True if deleted, False if not found or not owned by user
        """
        async with user_conn(user_id) as conn:
            result = await conn.execute("DELETE FROM lesson_plans WHERE id = $1", lesson_id)
            return result == "DELETE 1"
