"""Server-rendered pages: read-only board outline and the unauthorized notice."""

from __future__ import annotations

import html
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from boardcore.cells import board_cell_keys, cell_label, get_value
from boardcore.sections import normalize_body
from boardcore.types import BoardContent
from studio.auth import get_current_user
from studio.models.user import User
from studio.repos.board_repo import BoardRepo
from studio.services.board_service import board_sessions

router = APIRouter(tags=["pages"])
board_repo = BoardRepo()

_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: sans-serif; max-width: 760px; margin: 2rem auto; color: #222; }}
h2 {{ border-bottom: 1px solid #ddd; padding-bottom: 4px; }}
pre {{ white-space: pre-wrap; font-family: inherit; margin: 0 0 1rem; }}
.empty {{ color: #aaa; }}
</style>
</head>
<body>
{body}
</body>
</html>"""


def _cell_html(label: str, value: str) -> str:
    if not value.strip():
        return f'<h3>{html.escape(label)}</h3>\n<p class="empty">(empty)</p>'
    return f"<h3>{html.escape(label)}</h3>\n<pre>{html.escape(normalize_body(value))}</pre>"


def render_outline(title: str, content: BoardContent) -> str:
    """Plain HTML outline of every cell and agenda session, bodies normalized for display."""
    parts = [f"<h1>{html.escape(title)}</h1>", "<h2>Board</h2>"]
    parts += [_cell_html(cell_label(content, key), get_value(content, key)) for key in board_cell_keys(content)]
    if content.agenda:
        parts.append("<h2>Agenda</h2>")
        for i, entry in enumerate(content.agenda):
            heading = f"Session {i + 1}"
            if entry.leads:
                heading += f": {entry.leads}"
            if entry.date:
                heading += f" ({entry.date})"
            parts.append(_cell_html(heading, entry.events_content))
            if entry.reflection.strip():
                parts.append(_cell_html("Reflection", entry.reflection))
    return _PAGE.format(title=html.escape(title), body="\n".join(parts))


@router.get("/board/{board_id}", response_class=HTMLResponse)
async def board_outline(board_id: UUID, user: User = Depends(get_current_user)) -> HTMLResponse:
    """Read-only outline of a board, including unsaved edits from an open session."""
    board = await board_repo.get(user.id, board_id)
    if board is None:
        return HTMLResponse(
            content="<html><body><h1>404: Board not found</h1></body></html>",
            status_code=404,
        )
    session = board_sessions.get(user.id, board_id)
    content = session.content if session is not None else board.document()
    return HTMLResponse(content=render_outline(board.title, content))


@router.get("/unauthorized", response_class=HTMLResponse)
async def unauthorized() -> HTMLResponse:
    return HTMLResponse(
        content=(
            "<!DOCTYPE html><html><body style=\"font-family:sans-serif;text-align:center;margin-top:20vh\">"
            "<h1>Access restricted</h1>"
            "<p>This workspace is only available to accounts from an approved organization.</p>"
            "</body></html>"
        ),
        status_code=403,
    )
