"""
Inkwell Backend: Auth & Ownership Guard
=========================================

What:  Turns a session token into an Identity, and decides whether that
       identity may modify a given post.
Who:   `authenticate` runs inside the get_current_identity dependency;
       `authorize_ownership` is called by PostService before update/delete.

Outcomes:
    authenticate         → Identity | AuthenticationError (401)
    authorize_ownership  → None     | ForbiddenError      (403)

Ownership compares UUID values directly; the token's id claim is parsed into
a uuid.UUID by the codec, and Post.author_id is a UUID column.
"""

import logging
from typing import Optional

from inkwell.exceptions import AuthenticationError, ForbiddenError, InvalidTokenError
from inkwell.models.post import Post
from inkwell.services.token_service import Identity, SessionTokenCodec

logger = logging.getLogger(__name__)


class AuthGuard:
    """Authenticates requests against the session token codec."""

    def __init__(self, codec: SessionTokenCodec):
        self.codec = codec

    def authenticate(self, token: Optional[str]) -> Identity:
        """
        Resolve the caller's identity.

        Raises:
            AuthenticationError: no token, or the token failed verification.
        """
        if not token:
            raise AuthenticationError("Authentication required: no session token")

        try:
            return self.codec.verify(token)
        except InvalidTokenError as e:
            logger.info("Rejected session token: %s", e.message)
            raise AuthenticationError("Invalid session token", context=e.context) from e


def authorize_ownership(identity: Identity, post: Post) -> None:
    """Raise ForbiddenError unless identity is the post's author."""
    if identity.user_id != post.author_id:
        logger.warning(
            "User %s attempted to modify post %s owned by %s",
            identity.user_id,
            post.id,
            post.author_id,
        )
        raise ForbiddenError(
            context={"post_id": str(post.id), "user_id": str(identity.user_id)},
        )
