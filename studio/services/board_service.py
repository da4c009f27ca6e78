"""
Live board sessions.

One BoardSession per open board holds the in-memory document, its
undo/redo history, the debounced saver and the WebSockets attached to it.
While a session is open its content is the source of truth; the database
catches up through the saver and is flushed when the last socket leaves.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any
from uuid import UUID

from fastapi import WebSocket

from boardcore.history import EditSession, History
from boardcore.types import BoardContent, BoardContext, sync_standards
from studio.config import settings
from studio.models.board import Board
from studio.repos.board_repo import BoardRepo
from studio.services.autosave import DebouncedSaver

logger = logging.getLogger(__name__)


class BoardSession:
    """Edit state for one open board."""

    def __init__(self, board: Board, repo: BoardRepo):
        self.board_id = board.id
        self.user_id = board.user_id
        self.context = board.context()
        self.sockets: set[WebSocket] = set()
        self.saver: DebouncedSaver[BoardContent] = DebouncedSaver(
            self._save, delay=settings.SAVE_DEBOUNCE_SECONDS, name=f"board {board.id}"
        )
        self.editor = EditSession(
            board.document(),
            history=History(
                max_depth=settings.HISTORY_MAX_DEPTH,
                coalesce_seconds=settings.HISTORY_COALESCE_SECONDS,
            ),
            on_change=self.saver.schedule,
        )
        self._repo = repo

    @property
    def content(self) -> BoardContent:
        return self.editor.content

    async def _save(self, content: BoardContent) -> None:
        saved = await self._repo.update_content(self.user_id, self.board_id, content.to_dict())
        if saved:
            logger.debug("board: saved board_id=%s", self.board_id)
        else:
            logger.warning("board: save found no row for board_id=%s", self.board_id)

    def state_message(self, **extra: Any) -> dict[str, Any]:
        return {
            "type": "state",
            "content": self.content.to_dict(),
            "canUndo": self.editor.can_undo,
            "canRedo": self.editor.can_redo,
            **extra,
        }

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send to every attached socket; sockets that fail are detached."""
        for ws in list(self.sockets):
            try:
                await ws.send_json(message)
            except (RuntimeError, ConnectionError) as e:
                logger.warning("ws: dropping socket for board_id=%s: %s", self.board_id, e)
                self.sockets.discard(ws)

    async def refresh(self, board: Board, content_changed: bool) -> None:
        """
        Fold a REST update of the same board into the live session.

        A new content blob replaces the document as one undo step; a new
        subject list re-syncs the standards cells.
        """
        self.context = board.context()
        if content_changed:
            updated = board.document()
        else:
            ip = self.content.initial_planning
            updated = replace(
                self.content,
                initial_planning=replace(ip, standards=sync_standards(ip.standards, self.context.subjects)),
            )
        if updated.to_dict() != self.content.to_dict():
            self.editor.apply_edit(updated, checkpoint=True)
        await self.broadcast(self.state_message())


class BoardSessionRegistry:
    """Open sessions keyed by board id."""

    def __init__(self, repo: BoardRepo | None = None):
        self.repo = repo or BoardRepo()
        self._sessions: dict[UUID, BoardSession] = {}
        self._lock = asyncio.Lock()

    def get(self, user_id: str, board_id: UUID) -> BoardSession | None:
        """The live session for a board, if the caller owns it."""
        session = self._sessions.get(board_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    async def open(self, user_id: str, board_id: UUID, ws: WebSocket) -> BoardSession | None:
        """
        Attach a socket to the board's session, loading the board if needed.

        Returns None if the board does not exist or is not the caller's.
        """
        async with self._lock:
            session = self._sessions.get(board_id)
            if session is None:
                board = await self.repo.get(user_id, board_id)
                if board is None:
                    return None
                session = BoardSession(board, self.repo)
                self._sessions[board_id] = session
                logger.info("board: opened session board_id=%s", board_id)
            elif session.user_id != user_id:
                return None
            session.sockets.add(ws)
            return session

    async def release(self, session: BoardSession, ws: WebSocket) -> None:
        """Detach a socket. The last one out flushes and closes the session."""
        async with self._lock:
            session.sockets.discard(ws)
            if session.sockets:
                return
            self._sessions.pop(session.board_id, None)
            await session.saver.flush()
        logger.info("board: closed session board_id=%s", session.board_id)

    async def document(self, user_id: str, board_id: UUID) -> tuple[BoardContent, BoardContext] | None:
        """
        Current content and context of a board.

        Prefers the live session so generation sees unsaved edits.
        """
        session = self.get(user_id, board_id)
        if session is not None:
            return session.content, session.context
        board = await self.repo.get(user_id, board_id)
        if board is None:
            return None
        return board.document(), board.context()

    async def close_all(self) -> None:
        """Flush every open session (app shutdown)."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.saver.flush()


board_sessions = BoardSessionRegistry()
