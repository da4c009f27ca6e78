"""Board CRUD routes: list, create, get, update, delete."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, status

from boardcore.migrations import migrate_content
from boardcore.types import BoardContent
from studio.auth import get_current_user
from studio.models.board import BoardResponse, BoardSummary, CreateBoardRequest, UpdateBoardRequest
from studio.models.user import User
from studio.repos.board_repo import BoardRepo
from studio.services.board_service import board_sessions

router = APIRouter(prefix="/api/boards", tags=["boards"])
board_repo = BoardRepo()


@router.get("", status_code=200)
async def list_boards(user: User = Depends(get_current_user)) -> list[BoardSummary]:
    """List the caller's boards, most recently updated first."""
    boards = await board_repo.list_for_user(user.id)
    return [BoardSummary.from_model(b) for b in boards]


@router.post("", status_code=201)
async def create_board(
    req: CreateBoardRequest | None = Body(default=None),
    user: User = Depends(get_current_user),
) -> BoardResponse:
    """Create a board with empty content and the default subjects."""
    board = await board_repo.create(user.id, req)
    return BoardResponse.from_model(board)


@router.get("/{board_id}", status_code=200)
async def get_board(
    board_id: UUID,
    user: User = Depends(get_current_user),
) -> BoardResponse:
    """Get a board with its content migrated to the current layout."""
    board = await board_repo.get(user.id, board_id)
    if not board:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found.")
    return BoardResponse.from_model(board)


@router.put("/{board_id}", status_code=200)
async def update_board(
    board_id: UUID,
    req: UpdateBoardRequest,
    user: User = Depends(get_current_user),
) -> BoardResponse:
    """
    Partial update. Only fields present in the body are written.

    Content is normalized to the current layout before it is stored. If the
    board is open in an edit session, the session picks up the change.
    """
    if req.content is not None:
        normalized = BoardContent.from_dict(migrate_content(req.content)).to_dict()
        req = req.model_copy(update={"content": normalized})

    board = await board_repo.update(user.id, board_id, req)
    if not board:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found.")

    session = board_sessions.get(user.id, board_id)
    if session is not None:
        await session.refresh(board, content_changed=req.content is not None)
    return BoardResponse.from_model(board)


@router.delete("/{board_id}", status_code=200)
async def delete_board(
    board_id: UUID,
    user: User = Depends(get_current_user),
) -> dict[str, str]:
    """Delete a board. Its lesson plans go with it."""
    deleted = await board_repo.delete(user.id, board_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found.")
    session = board_sessions.get(user.id, board_id)
    if session is not None:
        session.saver.cancel()
    return {"message": "Board deleted."}
