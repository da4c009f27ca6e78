"""
WebSocket endpoint for live board editing.

Accepts connections at /ws/boards/{board_id}. Every socket on the same
board shares one edit session; after each accepted message the new state
is broadcast to all of them.

Protocol:
  Client → Server:
    {"type": "edit", "key": "...", "value": "..."}
    {"type": "undo"} | {"type": "redo"}
    {"type": "section.reorder", "key": "...", "from": 0, "to": 2}
    {"type": "section.delete", "key": "...", "index": 1}
    {"type": "section.edit", "key": "...", "index": 1, "text": "..."}
    {"type": "section.move", "source": "...", "target": "...", "rawText": "...", "position": 0}
    {"type": "additional.add", "section": "initialPlanning" | "designThinking"}
    {"type": "additional.remove", "key": "additional-1"}
    {"type": "agenda.add"} | {"type": "agenda.remove", "index": 2}
    {"type": "apply_suggestion", "key": "...", "text": "...", "mode": "replace" | "append"}
    {"type": "apply_variation", "variation": {...}}
    {"type": "apply_agenda", "sessions": [...]}
    {"type": "apply_changes", "changes": [{"cellId": "...", "proposedValue": "...", ...}]}
    {"type": "replace", "content": {...}}
  Server → Client:
    {"type": "state", "content": {...}, "canUndo": bool, "canRedo": bool, ...}
    {"type": "error", "error": "..."}
"""

from __future__ import annotations

import json
import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from boardcore import cells
from boardcore.apply import apply_agenda, apply_suggestion, apply_variation
from boardcore.migrations import migrate_content
from boardcore.proposals import ProposedChange
from boardcore.types import BoardContent, sync_standards
from studio.auth import get_websocket_user
from studio.repos.lesson_repo import LessonRepo
from studio.services.board_service import BoardSession, board_sessions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])
lesson_repo = LessonRepo()

# Close codes in the application range (4000-4999)
CLOSE_UNAUTHORIZED = 4401
CLOSE_NOT_FOUND = 4404


class BadMessage(ValueError):
    """A client frame that cannot be applied."""


def _str(msg: dict[str, Any], name: str) -> str:
    value = msg.get(name)
    if not isinstance(value, str):
        raise BadMessage(f"'{name}' must be a string")
    return value


def _int(msg: dict[str, Any], name: str) -> int:
    value = msg.get(name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise BadMessage(f"'{name}' must be an integer")
    return value


def _board_key(content: BoardContent, msg: dict[str, Any], name: str = "key") -> str:
    """A key from the message that resolves to a field of this board."""
    key = _str(msg, name)
    address = cells.parse_cell_key(key)
    if address is None or isinstance(address, cells.LessonSection):
        raise BadMessage(f"Unknown cell '{key}'")
    if isinstance(address, cells.AgendaField):
        if address.index >= len(content.agenda):
            raise BadMessage(f"Unknown cell '{key}'")
    elif cells.get_cell(content, key) is None:
        raise BadMessage(f"Unknown cell '{key}'")
    return key


async def _apply_changes(session: BoardSession, msg: dict[str, Any]) -> dict[str, Any]:
    raw = msg.get("changes")
    if not isinstance(raw, list):
        raise BadMessage("'changes' must be a list")
    changes = [ProposedChange.from_dict(c) for c in raw if isinstance(c, dict)]

    lessons = []
    if any(cells.is_lesson_key(c.cell_id) for c in changes):
        lessons = [lp.to_plan() for lp in await lesson_repo.list_for_board(session.user_id, session.board_id)]

    route = session.editor.apply_changes(changes, lessons)
    for lesson_id, content in route.lesson_updates.items():
        updated = await lesson_repo.update(session.user_id, UUID(lesson_id), content=content.to_dict())
        if updated is None:
            logger.warning("ws: lesson %s vanished before update", lesson_id)
    return {"lessonUpdates": list(route.lesson_updates), "dropped": route.dropped}


async def _handle_message(session: BoardSession, msg: dict[str, Any]) -> dict[str, Any]:
    """
    Apply one client message to the session.

    Returns extra fields for the state broadcast.

    Raises:
        BadMessage: If the message is malformed or targets nothing
    """
    editor = session.editor
    content = editor.content
    msg_type = msg.get("type")

    if msg_type == "edit":
        editor.set_cell(_board_key(content, msg), _str(msg, "value"))
    elif msg_type == "undo":
        editor.undo()
    elif msg_type == "redo":
        editor.redo()
    elif msg_type == "section.reorder":
        editor.reorder_section(_board_key(content, msg), _int(msg, "from"), _int(msg, "to"))
    elif msg_type == "section.delete":
        editor.delete_section(_board_key(content, msg), _int(msg, "index"))
    elif msg_type == "section.edit":
        editor.edit_section(_board_key(content, msg), _int(msg, "index"), _str(msg, "text"))
    elif msg_type == "section.move":
        position = msg.get("position")
        if position is not None:
            position = _int(msg, "position")
        source = _board_key(content, msg, "source")
        target = _board_key(content, msg, "target")
        try:
            editor.move_section(source, target, _str(msg, "rawText"), position)
        except ValueError as e:
            raise BadMessage(str(e)) from e
    elif msg_type == "additional.add":
        section = msg.get("section", "initialPlanning")
        if section not in ("initialPlanning", "designThinking"):
            raise BadMessage("'section' must be 'initialPlanning' or 'designThinking'")
        editor.add_additional(section)
    elif msg_type == "additional.remove":
        key = _board_key(content, msg)
        if not isinstance(cells.parse_cell_key(key), cells.AdditionalCell):
            raise BadMessage(f"'{key}' is not an additional column")
        editor.remove_additional(key)
    elif msg_type == "agenda.add":
        editor.add_agenda_entry()
    elif msg_type == "agenda.remove":
        index = _int(msg, "index")
        if not 0 <= index < len(content.agenda):
            raise BadMessage(f"Agenda session {index + 1} not found")
        if len(content.agenda) == 1:
            raise BadMessage("Cannot remove the last agenda session")
        removed = content.agenda[index].id
        editor.remove_agenda_entry(index)
        return {"orphanedAgendaIds": [removed]}
    elif msg_type == "apply_suggestion":
        mode = msg.get("mode", "replace")
        if mode not in ("replace", "append"):
            raise BadMessage("'mode' must be 'replace' or 'append'")
        key = _board_key(content, msg)
        editor.apply_edit(apply_suggestion(content, key, _str(msg, "text"), mode), checkpoint=True)
    elif msg_type == "apply_variation":
        variation = msg.get("variation")
        if not isinstance(variation, dict):
            raise BadMessage("'variation' must be an object")
        editor.apply_edit(apply_variation(content, variation, session.context.subjects), checkpoint=True)
    elif msg_type == "apply_agenda":
        sessions = msg.get("sessions")
        if not isinstance(sessions, list):
            raise BadMessage("'sessions' must be a list")
        updated, orphaned = apply_agenda(content, [s for s in sessions if isinstance(s, dict)])
        if updated is not content:
            editor.apply_edit(updated, checkpoint=True)
        return {"orphanedAgendaIds": orphaned}
    elif msg_type == "apply_changes":
        return await _apply_changes(session, msg)
    elif msg_type == "replace":
        raw = msg.get("content")
        if not isinstance(raw, dict):
            raise BadMessage("'content' must be an object")
        updated = BoardContent.from_dict(migrate_content(raw))
        updated.initial_planning.standards = sync_standards(updated.initial_planning.standards, session.context.subjects)
        editor.apply_edit(updated, checkpoint=True)
    else:
        raise BadMessage(f"Unknown message type '{msg_type}'")
    return {}


@router.websocket("/ws/boards/{board_id}")
async def board_websocket(websocket: WebSocket, board_id: str) -> None:
    """
    Live edit session for one board.

    Sends the current state on connect. Closes with 4401 when the socket
    carries no valid session and 4404 when the board is not the caller's.
    """
    await websocket.accept()

    user = get_websocket_user(websocket)
    if user is None:
        logger.info("ws: unauthenticated connection for board_id=%s", board_id)
        await websocket.close(code=CLOSE_UNAUTHORIZED)
        return

    try:
        board_uuid = UUID(board_id)
    except ValueError:
        await websocket.close(code=CLOSE_NOT_FOUND)
        return

    session = await board_sessions.open(user.id, board_uuid, websocket)
    if session is None:
        logger.info("ws: board not found board_id=%s user=%s", board_id, user.id)
        await websocket.close(code=CLOSE_NOT_FOUND)
        return

    logger.info("ws: connected board_id=%s sockets=%d", board_id, len(session.sockets))
    try:
        await websocket.send_json(session.state_message())
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("ws: malformed message from client: %r", raw[:200])
                await websocket.send_json({"type": "error", "error": "Malformed message"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "error", "error": "Malformed message"})
                continue

            try:
                extra = await _handle_message(session, msg)
            except BadMessage as e:
                logger.warning("ws: rejected %s for board_id=%s: %s", msg.get("type"), board_id, e)
                await websocket.send_json({"type": "error", "error": str(e)})
                continue

            await session.broadcast(session.state_message(**extra))
    except WebSocketDisconnect:
        logger.info("ws: disconnected board_id=%s", board_id)
    finally:
        await board_sessions.release(session, websocket)
