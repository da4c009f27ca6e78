"""
Studio FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from studio import db
from studio.config import settings
from studio.routes import ai as ai_routes
from studio.routes import boards as board_routes
from studio.routes import lessons as lesson_routes
from studio.routes import pages as pages_routes
from studio.routes import ws as ws_routes
from studio.services.board_service import board_sessions
from studio.services.generation import TargetNotFoundError
from studio.services.llm_client import GenerationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Startup: configure logging, open the database pool.
    Shutdown: flush open board sessions, close the pool.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await db.init_pool()
    logger.info("Database pool initialized")

    yield

    await board_sessions.close_all()
    logger.info("Open board sessions flushed")
    await db.close_pool()
    logger.info("Database pool closed")


app = FastAPI(
    title="Studio",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(board_routes.router)
app.include_router(lesson_routes.router)
app.include_router(ai_routes.router)
app.include_router(ws_routes.router)
app.include_router(pages_routes.router)


@app.exception_handler(StarletteHTTPException)
async def auth_redirect_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    Page requests that fail auth are redirected; API requests get the status.

    401 goes to the login page (with a return path), 403 to /unauthorized.
    """
    if not request.url.path.startswith("/api/"):
        if exc.status_code == 401:
            return RedirectResponse(f"{settings.LOGIN_URL}?next={quote(request.url.path)}", status_code=303)
        if exc.status_code == 403:
            return RedirectResponse("/unauthorized", status_code=303)
    return await http_exception_handler(request, exc)


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=502)


@app.exception_handler(TargetNotFoundError)
async def target_not_found_handler(request: Request, exc: TargetNotFoundError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=404)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
