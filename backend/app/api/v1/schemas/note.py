from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from app.core.models.base import AppBaseModel


def _clean_tags(v: list[str] | None) -> list[str] | None:
    if v is None:
        return None
    cleaned = [tag.strip() for tag in v if tag and tag.strip()]
    return cleaned or None


class NoteCreate(AppBaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Note title")
    content: str = Field(..., min_length=1, max_length=10000, description="Note content")
    tags: list[str] | None = Field(default=None, description="Tags for categorization")

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class NoteUpdate(AppBaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1, max_length=10000)
    tags: list[str] | None = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class NoteRead(AppBaseModel):
    id: UUID
    user_id: UUID
    title: str
    content: str
    tags: list[str] | None
    created_at: datetime
    updated_at: datetime | None


class NotePageRead(AppBaseModel):
    items: list[NoteRead]
    total: int
    page: int
    page_size: int
    total_pages: int
