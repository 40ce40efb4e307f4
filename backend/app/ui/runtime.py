from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from app.core.repositories.implementations.supabase.note_repository import (
    SupabaseNoteRepository,
)
from app.core.services.auth_service import AuthService
from app.db.base import get_session_supabase_client
from app.ui.landing import LandingPage
from app.ui.notes_page import NotesPage
from app.ui.session import SessionContext

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable


class PageContext:
    """Pages of one running session, all sharing the same client."""

    def __init__(self, session: SessionContext, repo: SupabaseNoteRepository) -> None:
        self.session = session
        self.repo = repo
        self._notes_pages: list[NotesPage] = []

    def landing(self) -> LandingPage:
        return LandingPage(self.session)

    def notes(self, confirm: Callable[[str], bool]) -> NotesPage:
        page = NotesPage(self.session, self.repo, confirm=confirm)
        self._notes_pages.append(page)
        return page

    def close(self) -> None:
        for page in self._notes_pages:
            page.close()
        self._notes_pages.clear()


@asynccontextmanager
async def open_pages() -> AsyncIterator[PageContext]:
    """Start a session on the long-lived client; the subscription ends with the block."""
    client = get_session_supabase_client()
    async with SessionContext(AuthService(client)) as session:
        pages = PageContext(session, SupabaseNoteRepository(client))
        try:
            yield pages
        finally:
            pages.close()
