from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from app.core.models.note import Note, NoteChanges, NoteDraft
    from app.core.schemas.result import Result

DEFAULT_PAGE_SIZE = 3


class NoteRepository(ABC):
    """Abstract repository interface for notes.

    Every read is scoped to an owner. Methods return tagged results: expected
    remote failures come back as `Failure`, only transport-level exceptions
    are raised.
    """

    @abstractmethod
    async def get_notes(
        self, user_id: UUID, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Result[list[Note]]:  # pragma: no cover - interface only
        """Return one page of the owner's notes, newest first, with the total count."""

    @abstractmethod
    async def get_notes_by_tags(
        self,
        user_id: UUID,
        tags: Sequence[str] | None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Result[list[Note]]:  # pragma: no cover
        """Like `get_notes`, restricted to notes sharing at least one tag with `tags`."""

    @abstractmethod
    async def get_user_tags(self, user_id: UUID) -> Result[list[str]]:  # pragma: no cover
        """Return the sorted, distinct, non-blank tags used across the owner's notes."""

    @abstractmethod
    async def create_note(self, draft: NoteDraft) -> Result[Note]:  # pragma: no cover
        """Insert a note and return the stored row."""

    @abstractmethod
    async def update_note(self, note_id: UUID, changes: NoteChanges) -> Result[Note]:  # pragma: no cover
        """Apply a partial update and return the updated row."""

    @abstractmethod
    async def delete_note(self, note_id: UUID) -> Result[None]:  # pragma: no cover
        """Delete a note by id."""
