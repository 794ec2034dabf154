"""
Inkwell Backend: Shared Route Dependencies
============================================

What:  FastAPI dependencies that hand route handlers the collaborators
       create_app() placed on `app.state`, and the caller's identity.
Who:   Injected with Depends() in routes/auth.py and routes/posts.py.
"""

from typing import Optional

from fastapi import Depends, Request

from inkwell.config import Settings
from inkwell.services.auth_guard import AuthGuard
from inkwell.services.post_service import PostService
from inkwell.services.token_service import Identity, SessionTokenCodec


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> SessionTokenCodec:
    return request.app.state.token_codec


def get_auth_guard(request: Request) -> AuthGuard:
    return request.app.state.auth_guard


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


def get_session_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Raw session token from the cookie named by settings, if any."""
    return request.cookies.get(settings.session_cookie_name) or None


def get_current_identity(
    token: Optional[str] = Depends(get_session_token),
    guard: AuthGuard = Depends(get_auth_guard),
) -> Identity:
    """
    Identity of the caller.

    Raises AuthenticationError (→ 401) for a missing or invalid token, before
    the route handler runs.
    """
    return guard.authenticate(token)
