"""
Pytest configuration and fixtures for Studio tests.

Route and WebSocket tests patch the repositories and the model client, so
they run without Postgres or an API key. Repository tests need a real
database and are skipped unless DATABASE_URL is set.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("ALLOWED_EMAIL_DOMAINS", "school.org,district.org")
os.environ.setdefault("SAVE_DEBOUNCE_SECONDS", "0.05")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from studio.auth import create_jwt  # noqa: E402
from studio.main import app  # noqa: E402
from studio.tests.factories import USER_EMAIL, USER_ID  # noqa: E402


@pytest.fixture
def session_token() -> str:
    return create_jwt(USER_ID, USER_EMAIL, "Test Teacher")


@pytest.fixture
def auth_cookies(session_token) -> dict[str, str]:
    return {"session": session_token}


@pytest_asyncio.fixture(loop_scope="session")
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
