"""
Bookmark data models.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Bookmark(BaseModel):
    """A saved URL with its short code, owned by one user."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Bookmark ID")
    description: str = Field(default="", max_length=256, description="Optional title")
    url: str = Field(..., max_length=2048, description="Original long URL")
    code: str = Field(..., max_length=10, description="Unique short code")
    user_id: str = Field(..., description="Owner user ID")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


def build_bookmark(**fields: Any) -> Bookmark:
    """Validate ``fields`` into a ``Bookmark``.

    Raises:
        ValidationError: a field is missing or breaks its constraints.
    """
    try:
        return Bookmark.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid bookmark fields",
            {
                "errors": [
                    {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ]
            }
        ) from e
