"""Session marking for the Hi Tek web API.

Credentials are checked by the spreadsheet proxy (``LOGIN`` envelope); this
module only issues and tracks the session token handed back as a cookie.
Sessions live in process memory and expire after
``SESSION_MAX_AGE`` seconds.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta

import structlog
from fastapi import HTTPException, Request

from hitek.config import get_config

logger = structlog.get_logger(__name__)

_sessions: dict[str, dict] = {}


def create_session(username: str) -> str:
    """Create a new session for an authenticated user.

    Args:
        username: Username accepted by the proxy

    Returns:
        str: Session token
    """
    max_age = get_config().session.max_age_seconds
    session_token = secrets.token_urlsafe(32)
    now = datetime.utcnow()
    _sweep_expired(now)
    _sessions[session_token] = {
        "username": username,
        "created_at": now.isoformat(),
        "expires_at": (now + timedelta(seconds=max_age)).isoformat(),
    }
    logger.info("session_created", username=username)
    return session_token


def _sweep_expired(now: datetime) -> None:
    expired = [
        token
        for token, data in _sessions.items()
        if datetime.fromisoformat(data["expires_at"]) < now
    ]
    for token in expired:
        del _sessions[token]
    if expired:
        logger.debug("sessions_expired", count=len(expired))


def validate_session(session_token: str | None) -> dict | None:
    """Return the session data for a live token, None otherwise."""
    if not session_token:
        return None

    session_data = _sessions.get(session_token)
    if not session_data:
        return None

    expires_at = datetime.fromisoformat(session_data["expires_at"])
    if datetime.utcnow() > expires_at:
        del _sessions[session_token]
        return None
    return session_data


def logout(session_token: str | None) -> None:
    """Invalidate a session token."""
    if session_token and session_token in _sessions:
        username = _sessions.pop(session_token)["username"]
        logger.info("session_ended", username=username)


def clear_sessions() -> None:
    _sessions.clear()


def require_session(request: Request) -> str:
    """Dependency to require a logged-in session on routes.

    Returns:
        str: Username of the session owner

    Raises:
        HTTPException: 307 to /login when there is no valid session
    """
    config = get_config()
    if config.session.auth_disabled:
        return "default_user"

    session_data = validate_session(request.cookies.get(config.session.cookie_name))
    if not session_data:
        raise HTTPException(
            status_code=307,
            detail="Authentication required",
            headers={"Location": "/login"},
        )
    return session_data["username"]
