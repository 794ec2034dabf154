"""
Inkwell Backend: Auth Route Handlers
======================================

What:  POST /register, POST /login, GET /profile, POST /logout.
How:   Credentials go through UserService; sessions are signed tokens in a
       cookie, issued by SessionTokenCodec and read back by AuthGuard.

Cookie transport:
    /login sets the cookie (name from settings, default "token"), HttpOnly,
    path "/". /logout deletes it. Nothing is stored server-side, so a copied
    token keeps working after logout until the signing secret changes.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import Settings
from inkwell.database import get_db_session
from inkwell.dependencies import get_current_identity, get_settings, get_token_codec
from inkwell.schemas.auth import CredentialsRequest, ProfileResponse, UserResponse
from inkwell.schemas.common import ErrorResponse
from inkwell.services.token_service import Identity, SessionTokenCodec
from inkwell.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=UserResponse,
    responses={
        201: {"description": "User created", "model": UserResponse},
        400: {"description": "Duplicate or invalid credentials", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    payload: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.register(db, payload.username, payload.password)
    return UserResponse(id=user.id, username=user.username)


@router.post(
    "/login",
    response_model=UserResponse,
    responses={
        200: {"description": "Logged in; session cookie set", "model": UserResponse},
        400: {"description": "Wrong credentials", "model": ErrorResponse},
    },
    summary="Log in and receive a session cookie",
)
async def login(
    payload: CredentialsRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    codec: SessionTokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> UserResponse:
    """
    Verify credentials and set the session cookie.

    The token is only issued after the password check succeeds; a failed
    login returns 400 without touching the cookie.
    """
    user = await user_service.authenticate(db, payload.username, payload.password)
    token = codec.issue(user.id, user.username)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path="/",
    )
    return UserResponse(id=user.id, username=user.username)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={
        200: {"description": "Identity from the session token", "model": ProfileResponse},
        401: {"description": "Missing or invalid session token", "model": ErrorResponse},
    },
    summary="Decode the caller's session",
)
async def profile(identity: Identity = Depends(get_current_identity)) -> ProfileResponse:
    return ProfileResponse(
        id=identity.user_id,
        username=identity.username,
        issued_at=identity.issued_at,
    )


@router.post("/logout", response_model=str, summary="Clear the session cookie")
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> str:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
    return "ok"
