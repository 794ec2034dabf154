"""
Inkwell Backend: Post Request/Response Schemas
================================================

What:  Pydantic models defining the post API contract.
How:   FastAPI uses these models to serialize responses and generate the
       OpenAPI documentation. Post fields arrive as multipart form fields,
       collected into PostFields by the route handlers.
Who:   Built by PostService; returned by routes/posts.py.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class PostFields(BaseModel):
    """
    The editable text of a post.

    Absent form fields arrive as empty strings. An update writes all three
    fields as given, so an omitted field is cleared rather than kept.
    """
    title: str = ""
    summary: str = ""
    content: str = ""


class CoverUpload(BaseModel):
    """An attached cover file, read fully into memory by the route."""
    filename: str
    content: bytes
    content_length: Optional[int] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorSummary(BaseModel):
    """The author join: id plus username, nothing else."""
    id: uuid.UUID = Field(description="Author's user id")
    username: str = Field(description="Author's username")


class PostResponse(BaseModel):
    """
    What:  Full representation of a post.
    Who:   Returned by every post route except DELETE.

    cover_path is relative to the server root ("uploads/<name>.<ext>"), so a
    client fetches the image at "/" + cover_path.
    """
    id: uuid.UUID = Field(description="Post identifier")
    title: str
    summary: str
    content: str
    cover_path: Optional[str] = Field(
        default=None,
        description="Public path of the cover image, null when none was uploaded"
    )
    author_id: uuid.UUID = Field(description="Id of the user who created the post")
    author: Optional[AuthorSummary] = Field(
        default=None,
        description="Author id and username"
    )
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: Optional[datetime] = Field(default=None, description="Last update (UTC)")


class DeleteResponse(BaseModel):
    """Returned by DELETE /post/{id}."""
    success: bool = True
