from __future__ import annotations

from typing import TYPE_CHECKING

from app.ui.auth_form import AuthForm
from app.ui.views import NOTES_PATH, Loading, Redirect

if TYPE_CHECKING:
    from app.ui.session import SessionContext


class LandingPage:
    """Entry surface: sends signed-in users to their notes, others to the auth form."""

    def __init__(self, session: SessionContext) -> None:
        self._session = session
        self.form = AuthForm(session)

    def render(self) -> Loading | Redirect | AuthForm:
        if self._session.loading:
            return Loading()
        if self._session.user is not None:
            return Redirect(to=NOTES_PATH)
        return self.form
