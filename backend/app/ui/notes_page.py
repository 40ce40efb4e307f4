from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from app.config import settings
from app.core.models.base import utc_now
from app.core.models.note import Note, NoteChanges, NoteDraft
from app.ui.views import LANDING_PATH, Redirect
from app.utils.logging import get_logger
from app.utils.tags import format_tags, parse_tags
from app.utils.validation import validate_note_fields

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from app.core.repositories.note_repository import NoteRepository
    from app.ui.session import Session, SessionContext

logger = get_logger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this note?"


class NotesPage:
    """State and actions of the notes (profile) surface.

    All remote failures land in the single `error` slot; loading flags are
    reset whatever the outcome. List reloads are tagged with an increasing
    token and only the newest response is applied.

    Once mounted the page follows the session: a user appearing loads their
    notes, the session ending clears the page and sets `redirect`. Call
    `close()` when the page goes away.
    """

    def __init__(
        self,
        session: SessionContext,
        repo: NoteRepository,
        *,
        confirm: Callable[[str], bool],
        page_size: int | None = None,
    ) -> None:
        self._session = session
        self._repo = repo
        self._confirm = confirm
        self._load_token = 0
        self._remove_listener: Callable[[], None] | None = None
        self._user_id: UUID | None = None
        self._tasks: set[asyncio.Task] = set()
        self._tags_error = ""

        self.redirect: Redirect | None = None

        self.notes: list[Note] = []
        self.notes_loading = True
        self.submitting = False
        self.updating = False
        self.error = ""

        # create form
        self.title = ""
        self.content = ""
        self.tags_text = ""

        # edit form
        self.editing_id: UUID | None = None
        self.edit_title = ""
        self.edit_content = ""
        self.edit_tags_text = ""

        self.selected_tags: set[str] = set()
        self.available_tags: list[str] = []

        self.page = 1
        self.page_size = page_size or settings.notes_page_size
        self.total = 0

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return -(-self.total // self.page_size)

    @property
    def show_clear_filters(self) -> bool:
        return bool(self.selected_tags)

    @property
    def empty_message(self) -> str | None:
        if self.notes_loading or self.notes:
            return None
        if self.selected_tags:
            return "No notes match the selected tags."
        return "No notes yet. Create your first note above!"

    async def mount(self) -> Redirect | None:
        """Load data for a signed-in user, or redirect to the landing page.

        While the session is still resolving nothing is loaded; the page
        picks the user up from the session's change notification instead.
        """
        if self._remove_listener is None:
            self._remove_listener = self._session.add_listener(self._on_session_change)
        if self._session.loading:
            return None
        user = self._session.user
        if user is None:
            self.redirect = Redirect(to=LANDING_PATH)
            return self.redirect
        await self._load_for(user.id)
        return None

    async def settled(self) -> None:
        """Wait for loads started by session changes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
        for task in list(self._tasks):
            task.cancel()

    async def _load_for(self, user_id: UUID) -> None:
        self._user_id = user_id
        self.redirect = None
        await self.load_notes()
        await self.load_tags()

    def _on_session_change(self, session: Session) -> None:
        if session.user is not None:
            if session.user.id == self._user_id:
                return
            self._user_id = session.user.id
            task = asyncio.get_running_loop().create_task(self._load_for(session.user.id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif not session.loading:
            logger.debug("Session ended, clearing notes page")
            for task in list(self._tasks):
                task.cancel()
            self._user_id = None
            self._load_token += 1
            self.notes = []
            self.total = 0
            self.available_tags = []
            self.selected_tags.clear()
            self.page = 1
            self.cancel_edit()
            self.notes_loading = False
            self.redirect = Redirect(to=LANDING_PATH)

    async def load_notes(self) -> None:
        user = self._session.user
        if user is None:
            return

        self._load_token += 1
        token = self._load_token
        tags = sorted(self.selected_tags)

        self.notes_loading = True
        self.error = ""
        try:
            if tags:
                result = await self._repo.get_notes_by_tags(user.id, tags, self.page, self.page_size)
            else:
                result = await self._repo.get_notes(user.id, self.page, self.page_size)

            if token != self._load_token:
                logger.debug("Discarding stale notes response", extra={"token": token})
                return

            if result.ok:
                self.notes = list(result.data)
                self.total = result.count if result.count is not None else len(self.notes)
            else:
                self.error = f"Failed to load notes: {result.error.message}"
        except Exception:
            if token == self._load_token:
                logger.exception("Loading notes failed", extra={"user_id": str(user.id)})
                self.error = "An unexpected error occurred while loading notes"
        finally:
            if token == self._load_token:
                self.notes_loading = False

    async def load_tags(self) -> None:
        user = self._session.user
        if user is None:
            return
        try:
            result = await self._repo.get_user_tags(user.id)
        except Exception:
            logger.exception("Loading tags failed", extra={"user_id": str(user.id)})
            self.error = self._tags_error = "An unexpected error occurred while loading tags"
            return

        if result.ok:
            self.available_tags = list(result.data)
            # Only clear what a previous tags load left behind
            if self._tags_error and self.error == self._tags_error:
                self.error = ""
            self._tags_error = ""
        else:
            self.available_tags = list(result.data or [])
            self.error = self._tags_error = f"Failed to load tags: {result.error.message}"

    async def create_note(self) -> bool:
        user = self._session.user
        if user is None:
            return False

        ok, message = validate_note_fields(self.title, self.content)
        if not ok:
            self.error = message or ""
            return False

        self.submitting = True
        self.error = ""
        try:
            draft = NoteDraft(
                user_id=user.id,
                title=self.title.strip(),
                content=self.content.strip(),
                tags=parse_tags(self.tags_text),
            )
            result = await self._repo.create_note(draft)
            if not result.ok:
                self.error = f"Failed to create note: {result.error.message}"
                return False

            self.notes = [result.data, *self.notes]
            self.total += 1
            self.title = ""
            self.content = ""
            self.tags_text = ""
        except Exception:
            logger.exception("Creating note failed", extra={"user_id": str(user.id)})
            self.error = "An unexpected error occurred while creating note"
            return False
        finally:
            self.submitting = False

        # New tags may have been introduced
        await self.load_tags()
        return True

    def start_edit(self, note: Note) -> None:
        self.editing_id = note.id
        self.edit_title = note.title
        self.edit_content = note.content
        self.edit_tags_text = format_tags(note.tags)
        self.error = ""

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.edit_title = ""
        self.edit_content = ""
        self.edit_tags_text = ""
        self.error = ""

    async def save_edit(self) -> bool:
        note_id = self.editing_id
        if note_id is None:
            return False

        ok, message = validate_note_fields(self.edit_title, self.edit_content)
        if not ok:
            self.error = message or ""
            return False

        self.updating = True
        self.error = ""
        try:
            changes = NoteChanges(
                title=self.edit_title.strip(),
                content=self.edit_content.strip(),
                tags=parse_tags(self.edit_tags_text),
            )
            result = await self._repo.update_note(note_id, changes)
            if not result.ok:
                self.error = f"Failed to update note: {result.error.message}"
                return False

            self.notes = [
                self._merge_update(n, changes, result.data) if n.id == note_id else n
                for n in self.notes
            ]
            self.cancel_edit()
        except Exception:
            logger.exception("Updating note failed", extra={"note_id": str(note_id)})
            self.error = "An unexpected error occurred while updating note"
            return False
        finally:
            self.updating = False

        await self.load_tags()
        return True

    async def delete_note(self, note_id: UUID) -> bool:
        if not self._confirm(DELETE_PROMPT):
            return False

        self.error = ""
        try:
            result = await self._repo.delete_note(note_id)
        except Exception:
            logger.exception("Deleting note failed", extra={"note_id": str(note_id)})
            self.error = "An unexpected error occurred while deleting note"
            return False

        if not result.ok:
            self.error = f"Failed to delete note: {result.error.message}"
            return False

        before = len(self.notes)
        self.notes = [n for n in self.notes if n.id != note_id]
        if len(self.notes) < before:
            self.total = max(0, self.total - 1)
        await self.load_tags()
        return True

    async def toggle_tag(self, tag: str) -> None:
        if tag in self.selected_tags:
            self.selected_tags.discard(tag)
        else:
            self.selected_tags.add(tag)
        self.page = 1
        await self.load_notes()

    async def show_all(self) -> None:
        self.selected_tags.clear()
        self.page = 1
        await self.load_notes()

    clear_filters = show_all

    async def go_to_page(self, page: int) -> None:
        self.page = max(1, page)
        await self.load_notes()

    async def sign_out(self) -> Redirect | None:
        try:
            result = await self._session.sign_out()
        except Exception:
            logger.exception("Sign out failed")
            self.error = "An unexpected error occurred while signing out"
            return None
        if not result.ok:
            self.error = f"Failed to sign out: {result.error.message}"
            return None
        return Redirect(to=LANDING_PATH)

    @staticmethod
    def _merge_update(note: Note, changes: NoteChanges, server: Note | None) -> Note:
        # Prefer the server's timestamp when it recorded the edit
        if server is not None and server.was_edited:
            updated_at = server.updated_at
        else:
            updated_at = utc_now()
        return note.model_copy(update={**changes.to_row(), "updated_at": updated_at})
