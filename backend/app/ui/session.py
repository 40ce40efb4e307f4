from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import ConfigDict, model_validator

from app.core.models.base import AppBaseModel
from app.core.schemas.auth import AuthUser  # noqa: TCH001
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.core.schemas.auth import AuthResult
    from app.core.schemas.result import Result
    from app.core.services.auth_service import AuthService

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    UNRESOLVED = "unresolved"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Session(AppBaseModel):
    """Immutable snapshot of the authentication state."""

    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.UNRESOLVED
    user: AuthUser | None = None

    @model_validator(mode="after")
    def check_consistency(self) -> Session:
        if self.status is SessionStatus.AUTHENTICATED and self.user is None:
            raise ValueError("authenticated session requires a user")
        if self.status is not SessionStatus.AUTHENTICATED and self.user is not None:
            raise ValueError("only an authenticated session may carry a user")
        return self

    @property
    def loading(self) -> bool:
        return self.status is SessionStatus.UNRESOLVED

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @classmethod
    def for_user(cls, user: AuthUser | None) -> Session:
        if user is None:
            return cls(status=SessionStatus.UNAUTHENTICATED)
        return cls(status=SessionStatus.AUTHENTICATED, user=user)


class SessionContext:
    """Holds the current user for one running page context.

    State is only ever changed by the provider's auth-state notifications;
    sign in/up/out just forward to the auth service. Notifications fired from
    worker threads are handed to the event loop, so snapshots and listeners
    only ever change on the loop. Use as an async context manager so the
    subscription is always released:

        async with SessionContext(auth_service) as session:
            ...
    """

    def __init__(self, auth: AuthService) -> None:
        self._auth = auth
        self._session = Session()
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: list[Callable[[Session], None]] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> AuthUser | None:
        return self._session.user

    @property
    def loading(self) -> bool:
        return self._session.loading

    def add_listener(self, listener: Callable[[Session], None]) -> Callable[[], None]:
        """Call `listener` with each new snapshot. Returns a remover."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def start(self) -> None:
        """Subscribe to auth changes and resolve the initial user once."""
        if self._unsubscribe is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._auth.on_auth_state_change(self._handle_auth_change)

        try:
            result = await self._auth.get_current_user()
        except Exception:
            logger.exception("Resolving current user failed")
            result = None

        # A notification may already have resolved the session
        if not self._session.loading:
            return
        user = result.data if result is not None and result.ok else None
        self._set(Session.for_user(user))

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def __aenter__(self) -> SessionContext:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def sign_in(self, email: str, password: str) -> Result[AuthResult]:
        return await self._auth.sign_in(email, password)

    async def sign_up(self, email: str, password: str) -> Result[AuthResult]:
        return await self._auth.sign_up(email, password)

    async def sign_out(self) -> Result[None]:
        return await self._auth.sign_out()

    def _handle_auth_change(self, event: str, user: AuthUser | None) -> None:
        logger.debug("Auth state changed", extra={"event": event})
        session = Session.for_user(user)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if self._loop is None or running is self._loop:
            self._set(session)
        else:
            # Runs before the awaiting to_thread call resumes
            self._loop.call_soon_threadsafe(self._set, session)

    def _set(self, session: Session) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
