from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from app.ui.views import NOTES_PATH, Redirect
from app.utils.logging import get_logger
from app.utils.validation import validate_credentials

if TYPE_CHECKING:
    from app.ui.session import SessionContext

logger = get_logger(__name__)


class AuthMode(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


class AuthForm:
    """Login / signup form state. Submitting delegates to the session."""

    def __init__(self, session: SessionContext) -> None:
        self._session = session
        self.mode = AuthMode.LOGIN
        self.email = ""
        self.password = ""
        self.error = ""
        self.loading = False

    @property
    def heading(self) -> str:
        return "Sign In to Your Account" if self.mode is AuthMode.LOGIN else "Create New Account"

    @property
    def submit_label(self) -> str:
        if self.loading:
            return "Please wait..."
        return "Sign In" if self.mode is AuthMode.LOGIN else "Sign Up"

    def toggle_mode(self) -> None:
        self.mode = AuthMode.SIGNUP if self.mode is AuthMode.LOGIN else AuthMode.LOGIN
        self.error = ""
        self.email = ""
        self.password = ""

    async def submit(self) -> Redirect | None:
        """Validate and submit. Returns a redirect to the notes surface on success."""
        self.error = ""
        self.loading = True
        try:
            ok, message = validate_credentials(self.email, self.password)
            if not ok:
                self.error = message or ""
                return None

            if self.mode is AuthMode.LOGIN:
                result = await self._session.sign_in(self.email, self.password)
            else:
                result = await self._session.sign_up(self.email, self.password)

            if not result.ok:
                self.error = result.error.message
                return None
            return Redirect(to=NOTES_PATH)
        except Exception:
            logger.exception("Auth form submission failed", extra={"mode": self.mode.value})
            self.error = "An unexpected error occurred"
            return None
        finally:
            self.loading = False
