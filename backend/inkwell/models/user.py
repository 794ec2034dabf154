"""
Inkwell Backend: User SQLAlchemy Model
========================================

What:  ORM model for the `users` table, the credential store.
Who:   Written by UserService at registration; read at login and when posts
       are joined with their author's username.

Users are immutable after registration; there are no update or delete routes.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.database import Base


class User(Base):
    """A registered author. The password is stored as a salted hash only."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Uniqueness is enforced by the database as well as by UserService, so two
    # racing registrations cannot both succeed
    username: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )

    # passlib hash string (algorithm, rounds and salt are embedded in it)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
