"""
Inkwell Backend: Session Token Codec
======================================

What:  Issues and verifies the signed session token carried in the cookie.
How:   HS256 JWT (python-jose) with claims {id, username, iat}.
Who:   `/login` issues tokens; AuthGuard verifies them on every
       authenticated request.

Token lifetime:
    Tokens carry no `exp` claim and are never stored server-side, so there is
    no revocation list. A token stays valid for as long as the signing secret
    does; logging out only clears the client's cookie. Callers must not read
    any freshness guarantee into a successful verify().
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from inkwell.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated user asserted by a valid session token."""
    user_id: uuid.UUID
    username: str
    issued_at: Optional[datetime] = None


class SessionTokenCodec:
    """
    Signs and verifies session tokens with a shared secret.

    The secret is handed in once by create_app() and never changes for the
    lifetime of the process.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Session token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def issue(self, user_id: uuid.UUID, username: str) -> str:
        """Return a signed token binding user_id and username to the current time."""
        claims: Dict[str, Any] = {
            "id": str(user_id),
            "username": username,
            "iat": int(datetime.now(timezone.utc).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Decode a token back into an Identity.

        Raises:
            InvalidTokenError: token absent, malformed, signed with another
                secret or algorithm, or missing the id/username claims.
        """
        if not token:
            raise InvalidTokenError("Session token is missing")

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidTokenError(context={"reason": str(e)}) from e

        return self._identity_from_claims(payload)

    @staticmethod
    def _identity_from_claims(payload: Dict[str, Any]) -> Identity:
        raw_id = payload.get("id")
        username = payload.get("username")

        try:
            user_id = uuid.UUID(str(raw_id)) if raw_id is not None else None
        except ValueError:
            user_id = None

        if user_id is None or not isinstance(username, str) or not username:
            raise InvalidTokenError(
                "Session token is missing identity claims",
                context={"claims": sorted(payload.keys())},
            )

        issued_at = None
        iat = payload.get("iat")
        if isinstance(iat, (int, float)):
            issued_at = datetime.fromtimestamp(iat, tz=timezone.utc)

        return Identity(user_id=user_id, username=username, issued_at=issued_at)
