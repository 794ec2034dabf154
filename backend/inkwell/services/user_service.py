"""
Inkwell Backend: User Service (Credential Store)
==================================================

What:  Registration and credential checks against the users table.
How:   Passwords are hashed with passlib (pbkdf2_sha256, salted per hash) in
       a worker thread so hashing does not stall the event loop.
Who:   Called by routes/auth.py.

Outcomes:
    register      → User | ValidationError (blank/too long/duplicate)
    authenticate  → User | ValidationError ("Wrong credentials")

A missing user and a wrong password produce the same error, so the
response does not reveal which usernames exist.
"""

import logging
import uuid

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from inkwell.exceptions import DatabaseError, ValidationError
from inkwell.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MAX_USERNAME_LENGTH = 64


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class UserService:
    """Stateless; every call receives the request's session."""

    async def _find_by_username(self, db: AsyncSession, username: str):
        try:
            result = await db.execute(select(User).where(User.username == username))
        except SQLAlchemyError as e:
            logger.error("Database error looking up user %s: %s", username, str(e))
            raise DatabaseError(context={"operation": "find_user"}) from e
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Create a user with a hashed password.

        Raises:
            ValidationError: blank username or password, username too long,
                or username already taken.
        """
        if not username or not username.strip():
            raise ValidationError("Username must not be empty", field="username")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at most {MAX_USERNAME_LENGTH} characters",
                field="username",
            )
        if not password:
            raise ValidationError("Password must not be empty", field="password")

        if await self._find_by_username(db, username) is not None:
            raise ValidationError(f"Username '{username}' is already taken", field="username")

        user = User(
            id=uuid.uuid4(),
            username=username,
            password_hash=await run_in_threadpool(hash_password, password),
        )
        try:
            db.add(user)
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name
            raise ValidationError(f"Username '{username}' is already taken", field="username") from e
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", username, str(e))
            raise DatabaseError(context={"operation": "register"}) from e

        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Check a username/password pair.

        Raises:
            ValidationError: unknown user or wrong password.
        """
        user = await self._find_by_username(db, username) if username else None
        if user is None or not password:
            raise ValidationError("Wrong credentials")

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.info("Failed login for %s", username)
            raise ValidationError("Wrong credentials")

        logger.info("User %s logged in", user.username)
        return user


user_service = UserService()
