"""
Inkwell Backend: Post Service (Post Lifecycle Controller)
===========================================================

What:  Create, read, list, update and delete posts.
How:   Composes FileService (covers), authorize_ownership (author checks) and
       the request's database session.
Who:   Called by routes/posts.py; the route has already resolved the caller's
       Identity for mutating operations.

Orchestration Flow (POST /post, PUT /post/{id}):
    ┌──────────┐    ┌─────────────┐    ┌─────────────┐    ┌──────────┐
    │ Identity │───▶│  Ownership  │───▶│ Store cover │───▶│  Flush   │
    │ (Route)  │    │ (update)    │    │ (FileServ)  │    │  (DB)    │
    └──────────┘    └─────────────┘    └─────────────┘    └──────────┘

    If the flush fails after a cover was written, the file is removed again.

Attribute rules:
    - author_id comes from the identity at creation and is never reassigned
    - update overwrites title, summary and content with whatever was sent
      (missing fields become empty strings)
    - update replaces cover_path only when a new file is attached
    - delete removes the row; the cover file stays on disk

Concurrent updates of the same post are not serialized: the last flush wins.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from inkwell.exceptions import DatabaseError, NotFoundError
from inkwell.models.post import Post
from inkwell.schemas.post import (
    AuthorSummary,
    CoverUpload,
    DeleteResponse,
    PostFields,
    PostResponse,
)
from inkwell.services.auth_guard import authorize_ownership
from inkwell.services.file_service import FileService, StoredUpload
from inkwell.services.token_service import Identity

logger = logging.getLogger(__name__)

# Upper bound for GET /post; there is no pagination beyond it
MAX_RECENT_POSTS = 20


def parse_post_id(raw: Union[str, uuid.UUID]) -> uuid.UUID:
    """Parse a post id from the URL; anything that is not a UUID is a 404."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise NotFoundError(resource="post", resource_id=str(raw))


class PostService:
    """
    Business logic layer for post operations.

    Responsibilities:
        - create_post(): bind author, store optional cover, insert
        - get_post(): single post with author username
        - list_recent(): newest posts first, capped at MAX_RECENT_POSTS
        - update_post(): author-only overwrite with cover retention
        - delete_post(): author-only hard delete

    Error Handling Strategy:
        SQLAlchemy errors are wrapped in DatabaseError (500). NotFoundError,
        ForbiddenError and upload ValidationErrors propagate unchanged.
    """

    def __init__(self, file_service: FileService):
        self.file_service = file_service

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _fetch(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        with_author: bool = False,
    ) -> Post:
        query = select(Post).where(Post.id == post_id)
        if with_author:
            query = query.options(joinedload(Post.author))

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": str(post_id)},
            ) from e

        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def _store_cover(self, cover: Optional[CoverUpload]) -> Optional[StoredUpload]:
        if cover is None:
            return None
        return await self.file_service.store_upload(
            filename=cover.filename,
            content=cover.content,
            content_length=cover.content_length,
        )

    async def _flush(
        self,
        db: AsyncSession,
        stored: Optional[StoredUpload],
        operation: str,
    ) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            if stored is not None:
                await self.file_service.cleanup_file(stored.absolute_path)
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the post. Please try again.",
                context={"operation": operation},
            ) from e

    @staticmethod
    def _to_response(post: Post, author: Optional[AuthorSummary]) -> PostResponse:
        return PostResponse(
            id=post.id,
            title=post.title,
            summary=post.summary,
            content=post.content,
            cover_path=post.cover_path,
            author_id=post.author_id,
            author=author,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    @staticmethod
    def _author_of(post: Post) -> AuthorSummary:
        return AuthorSummary(id=post.author.id, username=post.author.username)

    # ── Operations ────────────────────────────────────────────────────────

    async def create_post(
        self,
        db: AsyncSession,
        identity: Identity,
        fields: PostFields,
        cover: Optional[CoverUpload] = None,
    ) -> PostResponse:
        """
        Create a post authored by `identity`.

        Raises:
            ValidationError: attached cover is empty or too large
            FileStorageError: cover could not be written
            DatabaseError: insert failed
        """
        stored = await self._store_cover(cover)

        now = datetime.now(timezone.utc)
        post = Post(
            id=uuid.uuid4(),
            title=fields.title,
            summary=fields.summary,
            content=fields.content,
            cover_path=stored.path if stored else None,
            author_id=identity.user_id,
            created_at=now,
            updated_at=now,
        )
        db.add(post)
        await self._flush(db, stored, "create_post")

        logger.info("Post %s created by %s", post.id, identity.username)
        return self._to_response(
            post,
            AuthorSummary(id=identity.user_id, username=identity.username),
        )

    async def get_post(self, db: AsyncSession, post_id: Union[str, uuid.UUID]) -> PostResponse:
        """
        Retrieve a single post with its author's username.

        Raises:
            NotFoundError: no post with this id (→ 404)
            DatabaseError: query failed (→ 500)
        """
        post = await self._fetch(db, parse_post_id(post_id), with_author=True)
        return self._to_response(post, self._author_of(post))

    async def list_recent(self, db: AsyncSession, limit: int = MAX_RECENT_POSTS) -> List[PostResponse]:
        """
        Newest posts first, at most `limit` (clamped to 1..MAX_RECENT_POSTS).

        Always the current top-N; there is no cursor.
        """
        limit = max(1, min(limit, MAX_RECENT_POSTS))
        query = (
            select(Post)
            .options(joinedload(Post.author))
            .order_by(desc(Post.created_at), desc(Post.id))
            .limit(limit)
        )

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        posts = list(result.scalars().all())
        return [self._to_response(post, self._author_of(post)) for post in posts]

    async def update_post(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: Union[str, uuid.UUID],
        fields: PostFields,
        cover: Optional[CoverUpload] = None,
    ) -> PostResponse:
        """
        Overwrite a post's text and, if a file is attached, its cover.

        Raises:
            NotFoundError: no post with this id
            ForbiddenError: identity is not the author
            ValidationError / FileStorageError: cover rejected or not written
            DatabaseError: update failed
        """
        post = await self._fetch(db, parse_post_id(post_id), with_author=True)
        authorize_ownership(identity, post)

        stored = await self._store_cover(cover)

        post.title = fields.title
        post.summary = fields.summary
        post.content = fields.content
        if stored is not None:
            post.cover_path = stored.path
        post.updated_at = datetime.now(timezone.utc)

        await self._flush(db, stored, "update_post")

        logger.info(
            "Post %s updated by %s (cover %s)",
            post.id,
            identity.username,
            "replaced" if stored else "kept",
        )
        return self._to_response(post, self._author_of(post))

    async def delete_post(
        self,
        db: AsyncSession,
        identity: Identity,
        post_id: Union[str, uuid.UUID],
    ) -> DeleteResponse:
        """
        Permanently delete a post. The cover file is left in place.

        Raises:
            NotFoundError: no post with this id
            ForbiddenError: identity is not the author
            DatabaseError: delete failed
        """
        post = await self._fetch(db, parse_post_id(post_id))
        authorize_ownership(identity, post)

        await db.delete(post)
        await self._flush(db, None, "delete_post")

        logger.info("Post %s deleted by %s", post.id, identity.username)
        return DeleteResponse(success=True)
