"""User model built from session claims."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr


class User(BaseModel):
    """The authenticated caller. There is no users table; boards are keyed by `id`."""

    id: str
    email: EmailStr
    name: str | None = None
