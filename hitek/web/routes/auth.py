"""Authentication routes for the Hi Tek web API.

Routes:
- GET  /login  - Describe how to log in (target of the auth redirect)
- POST /login  - Check credentials with the proxy and set the session cookie
- GET  /logout - Invalidate the session and clear the cookie
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from hitek.config import get_config
from hitek.integration.sheet_client import SheetClient
from hitek.web.auth import create_session
from hitek.web.auth import logout as auth_logout
from hitek.web.dependencies import get_sheet_client

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["authentication"])

LOGIN_ERRORS = {"invalid": "Invalid username or password."}


@router.get("/login")
async def login_page(error: Optional[str] = None):
    """Tell an unauthenticated caller how to log in."""
    return {
        "login": "POST username and password as form fields to /login",
        "error": LOGIN_ERRORS.get(error) if error else None,
    }


@router.post("/login")
async def login(
    username: str = Form(...),
    password: str = Form(...),
    client: SheetClient = Depends(get_sheet_client),
):
    """Process login form.

    Redirects to the dashboard (/) on success, back to /login?error=invalid
    on failure.
    """
    result = await client.login(username, password)
    if not result.ok:
        logger.warning("login_failed", username=username, reason=result.message)
        return RedirectResponse(url="/login?error=invalid", status_code=302)

    session = get_config().session
    session_token = create_session(username)
    response = RedirectResponse(url="/", status_code=302)
    response.set_cookie(
        key=session.cookie_name,
        value=session_token,
        httponly=True,
        max_age=session.max_age_seconds,
        samesite="strict",
    )
    return response


@router.get("/logout")
async def logout(request: Request):
    """Logout and clear session."""
    cookie_name = get_config().session.cookie_name
    session_token = request.cookies.get(cookie_name)
    if session_token:
        auth_logout(session_token)

    response = RedirectResponse(url="/login", status_code=302)
    response.delete_cookie(cookie_name)
    return response
