"""
Inkwell Backend: Authentication Schemas
=========================================

What:  Pydantic models for /register, /login and /profile.
Who:   Used by routes/auth.py as request bodies and response models.

Length and emptiness rules for credentials are enforced by UserService so
that they surface as 400 validation errors with a field name.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """Body of POST /register and POST /login."""
    username: str = Field(description="Account name (unique)")
    password: str = Field(description="Plain-text password, hashed before storage")


class UserResponse(BaseModel):
    """Public view of a user; the password hash is never serialized."""
    id: uuid.UUID = Field(description="User identifier")
    username: str = Field(description="Account name")

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    """Identity decoded from the caller's session token."""
    id: uuid.UUID = Field(description="User identifier from the token")
    username: str = Field(description="Username from the token")
    issued_at: Optional[datetime] = Field(
        default=None,
        description="When the session token was issued (UTC)"
    )
