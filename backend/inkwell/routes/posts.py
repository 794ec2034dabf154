"""
Inkwell Backend: Post Route Handlers
======================================

What:  CRUD over /post.
How:   Multipart form fields (title, summary, content) plus an optional `file`
       part for the cover; delegates to PostService.
Who:   Called by the blog frontend.

Route Inventory:
    POST   /post        create (session required)
    GET    /post        recent posts, newest first (max 20)
    GET    /post/{id}   single post
    PUT    /post/{id}   update (session + authorship required)
    DELETE /post/{id}   delete (session + authorship required)

Authentication is resolved by the get_current_identity dependency before the
handler body runs, so an unauthenticated mutation is a 401 whether or not
the post exists. Not-found (404) is checked next, then authorship (403).
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.database import get_db_session
from inkwell.dependencies import get_current_identity, get_post_service
from inkwell.exceptions import ValidationError
from inkwell.schemas.common import ErrorResponse
from inkwell.schemas.post import CoverUpload, DeleteResponse, PostFields, PostResponse
from inkwell.services.post_service import MAX_RECENT_POSTS, PostService
from inkwell.services.token_service import Identity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid session token", "model": ErrorResponse},
}
_OWNER_ERRORS = {
    **_AUTH_ERRORS,
    403: {"description": "Caller is not the author", "model": ErrorResponse},
    404: {"description": "Post not found", "model": ErrorResponse},
}


async def _read_cover(file: Optional[UploadFile]) -> Optional[CoverUpload]:
    """Read an attached file; a missing part or an empty filename means no file."""
    if file is None or not file.filename:
        return None
    try:
        content = await file.read()
    finally:
        await file.close()
    return CoverUpload(filename=file.filename, content=content, content_length=file.size)


def _check_form_id(path_id: str, form_id: Optional[str]) -> None:
    """The form may repeat the post id; when it does, it must match the URL."""
    if not form_id:
        return
    try:
        same = uuid.UUID(form_id) == uuid.UUID(path_id)
    except ValueError:
        same = form_id == path_id
    if not same:
        raise ValidationError(
            "Post id in the form does not match the URL",
            field="id",
            context={"path_id": path_id, "form_id": form_id},
        )


@router.post(
    "/post",
    status_code=201,
    response_model=PostResponse,
    responses={
        201: {"description": "Post created", "model": PostResponse},
        400: {"description": "Invalid cover file", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Create a post",
)
async def create_post(
    title: str = Form(default=""),
    summary: str = Form(default=""),
    content: str = Form(default=""),
    file: Optional[UploadFile] = File(default=None, description="Optional cover image"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    cover = await _read_cover(file)
    return await post_service.create_post(
        db=db,
        identity=identity,
        fields=PostFields(title=title, summary=summary, content=content),
        cover=cover,
    )


@router.get(
    "/post",
    response_model=List[PostResponse],
    summary="List recent posts",
)
async def list_posts(
    limit: int = Query(
        default=MAX_RECENT_POSTS, ge=1, le=MAX_RECENT_POSTS,
        description=f"How many posts to return (max {MAX_RECENT_POSTS})",
    ),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> List[PostResponse]:
    return await post_service.list_recent(db=db, limit=limit)


@router.get(
    "/post/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    return await post_service.get_post(db=db, post_id=post_id)


@router.put(
    "/post/{post_id}",
    response_model=PostResponse,
    responses={
        400: {"description": "Invalid cover file or mismatched id", "model": ErrorResponse},
        **_OWNER_ERRORS,
    },
    summary="Update a post",
)
async def update_post(
    post_id: str,
    title: str = Form(default=""),
    summary: str = Form(default=""),
    content: str = Form(default=""),
    form_id: Optional[str] = Form(default=None, alias="id"),
    file: Optional[UploadFile] = File(default=None, description="Optional replacement cover"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> PostResponse:
    """
    Overwrite title, summary and content; replace the cover only if a file
    is attached.
    """
    _check_form_id(post_id, form_id)
    cover = await _read_cover(file)
    return await post_service.update_post(
        db=db,
        identity=identity,
        post_id=post_id,
        fields=PostFields(title=title, summary=summary, content=content),
        cover=cover,
    )


@router.delete(
    "/post/{post_id}",
    response_model=DeleteResponse,
    responses=_OWNER_ERRORS,
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    post_service: PostService = Depends(get_post_service),
) -> DeleteResponse:
    return await post_service.delete_post(db=db, identity=identity, post_id=post_id)
