from __future__ import annotations

from typing import TYPE_CHECKING, Any

from supabase import PostgrestAPIError

from app.core.models.note import Note
from app.core.repositories.note_repository import DEFAULT_PAGE_SIZE, NoteRepository
from app.core.schemas.result import Failure, Success
from app.utils.logging import get_logger
from app.utils.tags import distinct_tags

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from supabase import Client

    from app.core.models.note import NoteChanges, NoteDraft
    from app.core.schemas.result import Result


NOT_FOUND = "not_found"


class SupabaseNoteRepository(NoteRepository):
    """Supabase implementation of the NoteRepository.

    Uses Supabase's PostgREST client. Assumes a `notes` table with columns
    `id, user_id, title, content, tags, created_at, updated_at`; ownership is
    additionally enforced by RLS on the server.
    """

    TABLE_NAME = "notes"

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def get_notes(
        self, user_id: UUID, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Result[list[Note]]:
        return await self._list(user_id, None, page, page_size)

    async def get_notes_by_tags(
        self,
        user_id: UUID,
        tags: Sequence[str] | None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Result[list[Note]]:
        if not tags:
            return await self.get_notes(user_id, page, page_size)
        return await self._list(user_id, list(tags), page, page_size)

    async def get_user_tags(self, user_id: UUID) -> Result[list[str]]:
        try:
            resp = await self._run(
                lambda: self._client.table(self.TABLE_NAME)
                .select("tags")
                .eq("user_id", str(user_id))
                .execute()
            )
        except PostgrestAPIError as err:
            return self._remote_failure("Fetching tags failed", err, user_id=user_id, data=[])

        rows: list[dict[str, Any]] = resp.data or []
        return Success(data=distinct_tags(row.get("tags") for row in rows))

    async def create_note(self, draft: NoteDraft) -> Result[Note]:
        row = draft.model_dump(mode="json")
        try:
            resp = await self._run(
                lambda: self._client.table(self.TABLE_NAME)
                .insert([row])
                .execute()
            )
        except PostgrestAPIError as err:
            return self._remote_failure("Creating note failed", err, user_id=draft.user_id)

        data = self._first(resp.data)
        if not data:
            return Failure.remote("Note was not returned after insert")
        return Success(data=self._row_to_note(data))

    async def update_note(self, note_id: UUID, changes: NoteChanges) -> Result[Note]:
        # Ownership and timestamps are never sent
        sanitized = {
            k: v for k, v in changes.to_row().items()
            if k not in {"id", "user_id", "created_at", "updated_at"}
        }
        if not sanitized:
            return Failure.validation("Nothing to update")

        try:
            resp = await self._run(
                lambda: self._client.table(self.TABLE_NAME)
                .update(sanitized)
                .eq("id", str(note_id))
                .execute()
            )
        except PostgrestAPIError as err:
            return self._remote_failure("Updating note failed", err, note_id=note_id)

        data = self._first(resp.data)
        if not data:
            return Failure.remote("Note not found", code=NOT_FOUND)
        return Success(data=self._row_to_note(data))

    async def delete_note(self, note_id: UUID) -> Result[None]:
        try:
            resp = await self._run(
                lambda: self._client.table(self.TABLE_NAME)
                .delete()
                .eq("id", str(note_id))
                .execute()
            )
        except PostgrestAPIError as err:
            return self._remote_failure("Deleting note failed", err, note_id=note_id)

        if isinstance(resp.data, list) and not resp.data:
            return Failure.remote("Note not found", code=NOT_FOUND)
        return Success(data=None)

    async def _list(
        self,
        user_id: UUID,
        tags: list[str] | None,
        page: int,
        page_size: int,
    ) -> Result[list[Note]]:
        if page < 1 or page_size < 1:
            return Failure.validation("Page and page size must be positive integers")

        start = (page - 1) * page_size
        end = page * page_size - 1

        def _query():
            q = (
                self._client.table(self.TABLE_NAME)
                .select("*", count="exact")
                .eq("user_id", str(user_id))
            )
            if tags:
                q = q.overlaps("tags", tags)
            return (
                q
                .order("created_at", desc=True)
                .range(start, end)
                .execute()
            )

        try:
            resp = await self._run(_query)
        except PostgrestAPIError as err:
            return self._remote_failure("Listing notes failed", err, user_id=user_id, tags=tags)

        items = resp.data or []
        count = resp.count if resp.count is not None else len(items)
        return Success(data=[self._row_to_note(i) for i in items], count=count)

    @staticmethod
    def _remote_failure(message: str, err: PostgrestAPIError, data: Any = None, **context: Any) -> Failure:
        logger.warning(
            message,
            extra={
                "error_code": getattr(err, "code", None),
                "error_summary": str(getattr(err, "message", None) or err)[:100],
                **{k: str(v) for k, v in context.items()},
            },
        )
        return Failure.remote(
            getattr(err, "message", None) or str(err),
            code=getattr(err, "code", None),
            data=data,
        )

    @staticmethod
    async def _run(func: Callable[[], Any]) -> Any:
        import asyncio
        return await asyncio.to_thread(func)

    @staticmethod
    def _first(data: Any) -> dict[str, Any]:
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        return {}

    @staticmethod
    def _row_to_note(row: dict[str, Any]) -> Note:
        # Drop columns the Note model does not know about
        normalized = {k: v for k, v in row.items() if k in Note.model_fields}
        if normalized.get("tags") == []:
            normalized["tags"] = None
        return Note.model_validate(normalized)
