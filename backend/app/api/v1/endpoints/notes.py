from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TCH003

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.v1.schemas.note import NoteCreate, NotePageRead, NoteRead, NoteUpdate
from app.config import settings
from app.core.models.note import NoteChanges, NoteDraft, NotePage
from app.core.repositories.implementations.supabase.note_repository import NOT_FOUND
from app.core.repositories.note_repository import NoteRepository  # noqa: TCH001
from app.core.schemas.auth import AuthUser  # noqa: TCH001
from app.core.schemas.result import ErrorKind
from app.dependencies import get_current_user, get_note_repository
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.core.schemas.result import Failure

logger = get_logger(__name__)

router = APIRouter()


def _raise_for_failure(failure: Failure) -> None:
    error = failure.error
    if error.kind is ErrorKind.VALIDATION:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if error.code == NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)


@router.get("/", response_model=NotePageRead)
async def list_notes(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.notes_page_size, ge=1, le=100),
    tags: list[str] | None = Query(None),
    current_user: AuthUser = Depends(get_current_user),
    repo: NoteRepository = Depends(get_note_repository),
):
    """List the caller's notes, newest first.

    Repeat `tags` to keep only notes sharing at least one of them.
    """
    result = await repo.get_notes_by_tags(current_user.id, tags, page, page_size)
    if not result.ok:
        _raise_for_failure(result)

    notes_page = NotePage(items=result.data, total=result.count or 0, page=page, page_size=page_size)
    return NotePageRead(
        items=[NoteRead.model_validate(n) for n in notes_page.items],
        total=notes_page.total,
        page=notes_page.page,
        page_size=notes_page.page_size,
        total_pages=notes_page.total_pages,
    )


@router.get("/tags", response_model=list[str])
async def list_tags(
    current_user: AuthUser = Depends(get_current_user),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Distinct tags across the caller's notes, sorted."""
    result = await repo.get_user_tags(current_user.id)
    if not result.ok:
        _raise_for_failure(result)
    return result.data


@router.post("/", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    current_user: AuthUser = Depends(get_current_user),
    repo: NoteRepository = Depends(get_note_repository),
):
    draft = NoteDraft(
        user_id=current_user.id,
        title=payload.title,
        content=payload.content,
        tags=payload.tags,
    )
    result = await repo.create_note(draft)
    if not result.ok:
        _raise_for_failure(result)
    return NoteRead.model_validate(result.data)


@router.patch("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    current_user: AuthUser = Depends(get_current_user),
    repo: NoteRepository = Depends(get_note_repository),
):
    # title/content cannot be cleared, only replaced
    fields = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if not (k in {"title", "content"} and v is None)
    }
    result = await repo.update_note(note_id, NoteChanges(**fields))
    if not result.ok:
        _raise_for_failure(result)
    logger.info("Note updated", extra={"note_id": str(note_id), "user_id": str(current_user.id)})
    return NoteRead.model_validate(result.data)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: UUID,
    current_user: AuthUser = Depends(get_current_user),
    repo: NoteRepository = Depends(get_note_repository),
):
    result = await repo.delete_note(note_id)
    if not result.ok:
        _raise_for_failure(result)
    logger.info("Note deleted", extra={"note_id": str(note_id), "user_id": str(current_user.id)})
    return None
