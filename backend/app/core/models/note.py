from __future__ import annotations

from uuid import UUID, uuid4

from pydantic import Field, field_validator

from .base import AppBaseModel, TimestampedModel


def _normalize_tags(v: list[str] | None) -> list[str] | None:
    """Trim tags and drop blanks; an empty result is stored as None."""
    if v is None:
        return None
    cleaned = [tag.strip() for tag in v if tag and tag.strip()]
    return cleaned or None


class Note(TimestampedModel):
    """Note domain model mirroring a row of the `notes` table."""

    id: UUID = Field(default_factory=uuid4, description="Unique note identifier")
    user_id: UUID = Field(..., description="Owner of the note")

    title: str = Field(..., min_length=1, description="Note title")
    content: str = Field(..., min_length=1, description="Note content")

    # None when the note was saved without tags
    tags: list[str] | None = Field(default=None, description="Tags for categorization")

    @property
    def was_edited(self) -> bool:
        """True once the note carries an update timestamp distinct from creation."""
        return self.updated_at is not None and self.updated_at != self.created_at

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": str(uuid4()),
                    "user_id": str(uuid4()),
                    "title": "Dentist Appointment",
                    "content": "Monday at 10:00 AM. Bring insurance card.",
                    "tags": ["health", "appointment"],
                }
            ]
        }
    }


class NoteDraft(AppBaseModel):
    """Payload for inserting a new note."""

    user_id: UUID
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    tags: list[str] | None = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return _normalize_tags(v)


class NoteChanges(AppBaseModel):
    """Partial update for a note. Only fields explicitly set are sent."""

    title: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return _normalize_tags(v)

    def to_row(self) -> dict:
        return self.model_dump(exclude_unset=True)


class NotePage(AppBaseModel):
    """One page of notes plus the total number of matching rows."""

    items: list[Note] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 3

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return -(-self.total // self.page_size)
