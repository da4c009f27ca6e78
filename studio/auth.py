"""
Authentication and authorization for Studio.

Sessions are HS256 JWTs issued by the login service. The claims we rely on
are `sub` (the stable user id) and `email`; only emails from an allowed
domain get past the gate.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Cookie, Header, HTTPException, WebSocket, status

from studio import config
from studio.models.user import User


def create_jwt(user_id: str, email: str, name: str | None = None) -> str:
    """
    Create a JWT for a user session.

    Args:
        user_id: Auth subject to encode in the token
        email: User's email address
        name: Optional display name

    Returns:
        Signed JWT string
    """
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "email": email,
        "exp": now + timedelta(hours=config.settings.JWT_EXPIRY_HOURS),
        "iat": now,
    }
    if name:
        payload["name"] = name
    return jwt.encode(payload, config.settings.JWT_SECRET, algorithm=config.settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and verify a JWT.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(token, config.settings.JWT_SECRET, algorithms=[config.settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please sign in again.",
        ) from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token. Please sign in again.",
        ) from e


def email_domain(email: str) -> str:
    return email.rpartition("@")[2].lower() if "@" in email else ""


def is_allowed_email(email: str) -> bool:
    """True when the email's domain is on the allow-list."""
    return email_domain(email) in config.settings.ALLOWED_EMAIL_DOMAINS


def user_from_token(token: str) -> User:
    """
    Resolve a session token to a User and apply the domain gate.

    Raises:
        HTTPException: 401 for a bad token, 403 for a domain not on the allow-list
    """
    payload = decode_jwt(token)
    user_id = payload.get("sub")
    email = payload.get("email") or ""
    if not user_id or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token. Please sign in again.",
        )

    if not is_allowed_email(email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is not authorized to use this application.",
        )

    return User(id=user_id, email=email, name=payload.get("name"))


async def get_current_user(
    session: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Tries a Bearer token first, then the session cookie (browser).

    Raises:
        HTTPException: If authentication fails
    """
    if authorization and authorization.startswith("Bearer "):
        return user_from_token(authorization.removeprefix("Bearer "))

    if session:
        return user_from_token(session)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated. Please sign in.",
    )


def get_websocket_user(websocket: WebSocket) -> User | None:
    """
    Authenticate a WebSocket from its session cookie.

    Returns None when the socket carries no valid, allowed session.
    """
    session = websocket.cookies.get("session")
    if not session:
        return None
    try:
        return user_from_token(session)
    except HTTPException:
        return None
