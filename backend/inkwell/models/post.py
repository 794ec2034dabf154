"""
Inkwell Backend: Post SQLAlchemy Model
========================================

What:  ORM model representing the `posts` table.
How:   Inherits from the shared DeclarativeBase; created by create_tables().
Who:   Used by PostService for every post operation.

Table Design:
    - UUID primary key, generated in Python at flush time
    - author_id: set once from the authenticated identity, never updated
    - cover_path: public path of the cover image ("uploads/<hex>.<ext>"),
      NULL when the post was created without a file
    - created_at / updated_at: UTC timestamps; listing orders by created_at

    Index on created_at DESC:
        Backs the "recent posts" listing (ORDER BY created_at DESC, id DESC LIMIT 20)
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.database import Base
from inkwell.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by exactly one user.

    Lifecycle:
        1. Created by an authenticated user (author_id = that user)
        2. Updated by its author only; title/summary/content are overwritten,
           cover_path changes only when a new file is attached
        3. Deleted by its author only (hard delete; the cover file stays on disk)

    Query Patterns:
        - Recent posts: SELECT ... ORDER BY created_at DESC, id DESC LIMIT 20
        - Single post: SELECT ... WHERE id = :uuid (primary key)
        Both join users for the author's username.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    cover_path: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    # No ON DELETE cascade: users are never deleted
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Read-only join for the author's username; loaded explicitly with
    # joinedload() since lazy loading is unavailable on AsyncSession
    author: Mapped[User] = relationship(User, lazy="raise")

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, author_id={self.author_id}, "
            f"created_at='{self.created_at}')>"
        )
