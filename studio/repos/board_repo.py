"""Repository for board operations."""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

import asyncpg

from boardcore.types import DEFAULT_SUBJECTS, create_empty_board_content
from studio.db import user_conn
from studio.models.board import Board, CreateBoardRequest, UpdateBoardRequest

# Request field -> column
_COLUMNS = {
    "title": "title",
    "content": "content",
    "state": "state",
    "grade_level": "grade_level",
    "subjects": "subjects",
    "location": "location",
}

# Columns an update may never set to NULL
_REQUIRED = {"title", "content"}


def _row_to_board(row: asyncpg.Record) -> Board:
    """Convert a database row to a Board model."""
    return Board(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        slug=row["slug"],
        content=row["content"],
        subjects=row["subjects"],
        state=row["state"],
        grade_level=row["grade_level"],
        location=row["location"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def new_slug() -> str:
    return uuid4().hex[:8]


class BoardRepo:
    """All board-related database operations."""

    async def create(self, user_id: str, req: CreateBoardRequest | None = None) -> Board:
        """
        Create a board with empty content and the default subjects.

        Args:
            user_id: Auth subject of the owner
            req: Optional CreateBoardRequest (title)

        Returns:
            Newly created Board
        """
        title = req.title if req else "Untitled Board"
        async with user_conn(user_id) as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO boards (id, user_id, title, slug, content, subjects)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING *
                """,
                uuid4(),
                user_id,
                title,
                new_slug(),
                create_empty_board_content().to_dict(),
                list(DEFAULT_SUBJECTS),
            )
            return _row_to_board(row)

    async def get(self, user_id: str, board_id: UUID) -> Board | None:
        """
        Get a board by ID. RLS ensures only the owner can access.

        Returns:
            Board if found and owned by user, None otherwise
        """
        async with user_conn(user_id) as conn:
            row = await conn.fetchrow("SELECT * FROM boards WHERE id = $1", board_id)
            return _row_to_board(row) if row else None

    async def list_for_user(self, user_id: str) -> list[Board]:
        """List the user's boards, most recently updated first."""
        async with user_conn(user_id) as conn:
            rows = await conn.fetch("SELECT * FROM boards ORDER BY updated_at DESC")
            return [_row_to_board(row) for row in rows]

    async def update(self, user_id: str, board_id: UUID, req: UpdateBoardRequest) -> Board | None:
        """
        Partially update a board. Only fields present in the request change;
        a None title or content is skipped, other None fields clear the column.

        Returns:
            Updated Board if found and owned by user, None otherwise
        """
        updates: dict[str, Any] = {}
        for name, column in _COLUMNS.items():
            if name not in req.model_fields_set:
                continue
            value = getattr(req, name)
            if value is None and name in _REQUIRED:
                continue
            updates[column] = value
        if not updates:
            return await self.get(user_id, board_id)

        async with user_conn(user_id) as conn:
            set_clause = ", ".join(f"{k} = ${i + 2}" for i, k in enumerate(updates))
            values = list(updates.values())

            # S608/B608: False positive - set_clause only contains columns from _COLUMNS
            row = await conn.fetchrow(
                f"""
                UPDATE boards
                SET {set_clause}, updated_at = now()
                WHERE id = $1
                RETURNING *
                """,  # nosec B608
                board_id,
                *values,
            )
            return _row_to_board(row) if row else None

    async def update_content(self, user_id: str, board_id: UUID, content: dict[str, Any]) -> bool:
        """
        Persist the whole content blob (autosave path).

        Returns:
            True if the board was updated, False if not found or not owned by user
        """
        async with user_conn(user_id) as conn:
            result = await conn.execute(
                "UPDATE boards SET content = $2, updated_at = now() WHERE id = $1",
                board_id,
                content,
            )
            return result == "UPDATE 1"

    async def delete(self, user_id: str, board_id: UUID) -> bool:
        """
        Delete a board. Its lesson plans cascade.

        Returns:
            True if deleted, False if not found or not owned by user
        """
        async with user_conn(user_id) as conn:
            result = await conn.execute("DELETE FROM boards WHERE id = $1", board_id)
            return result == "DELETE 1"
