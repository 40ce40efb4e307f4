from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from supabase import AuthError, AuthSessionMissingError

from app.core.schemas.auth import AuthResult, AuthUser
from app.core.schemas.result import Failure, Success
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.core.schemas.result import Result


logger = get_logger(__name__)


def to_auth_user(user: Any) -> AuthUser | None:
    """Convert a provider user object into an AuthUser, or None if absent."""
    if user is None or not getattr(user, "id", None):
        return None
    return AuthUser(
        id=user.id,
        email=getattr(user, "email", None) or "",
        role=getattr(user, "role", None),
    )


class AuthService:
    """Thin wrapper around the Supabase auth client.

    Provider failures are returned as `Failure` carrying the provider's
    message; anything else (network, unexpected payloads) is raised.
    """

    def __init__(self, supabase_client: Any):
        self.supabase = supabase_client

    async def sign_up(self, email: str, password: str) -> Result[AuthResult]:
        """Create an account with email and password."""
        email = email.lower().strip()
        try:
            resp = await asyncio.to_thread(
                lambda: self.supabase.auth.sign_up({
                    "email": email,
                    "password": password,
                })
            )
        except AuthError as err:
            return self._auth_failure("Sign up failed", err, email)

        result = self._to_auth_result(resp)
        if result is None:
            return Failure.remote("Sign up did not return a user")

        logger.info("User signed up", extra={"user_id": str(result.user.id)})
        return Success(data=result)

    async def sign_in(self, email: str, password: str) -> Result[AuthResult]:
        """Exchange email and password for a session."""
        email = email.lower().strip()
        try:
            resp = await asyncio.to_thread(
                lambda: self.supabase.auth.sign_in_with_password({
                    "email": email,
                    "password": password,
                })
            )
        except AuthError as err:
            return self._auth_failure("Sign in failed", err, email)

        result = self._to_auth_result(resp)
        if result is None:
            return Failure.remote("Invalid login credentials")

        logger.info("User signed in", extra={"user_id": str(result.user.id)})
        return Success(data=result)

    async def sign_out(self) -> Result[None]:
        """Invalidate the current session."""
        try:
            await asyncio.to_thread(lambda: self.supabase.auth.sign_out())
        except AuthError as err:
            logger.warning("Sign out failed", extra={"error_summary": str(err)[:100]})
            return Failure.remote(getattr(err, "message", None) or str(err), code=getattr(err, "code", None))
        logger.info("User signed out")
        return Success(data=None)

    async def get_current_user(self) -> Result[AuthUser | None]:
        """Return the user of the current session, or None when signed out."""
        try:
            resp = await asyncio.to_thread(lambda: self.supabase.auth.get_user())
        except AuthSessionMissingError:
            return Success(data=None)
        except AuthError as err:
            logger.warning("Fetching current user failed", extra={"error_summary": str(err)[:100]})
            return Failure.remote(getattr(err, "message", None) or str(err), code=getattr(err, "code", None))

        return Success(data=to_auth_user(getattr(resp, "user", None)))

    def on_auth_state_change(self, callback: Callable[[str, AuthUser | None], None]) -> Callable[[], None]:
        """Register `callback(event, user)` for session changes.

        Returns a callable that removes the registration.
        """
        def _listener(event: Any, session: Any) -> None:
            user = to_auth_user(getattr(session, "user", None)) if session else None
            callback(getattr(event, "value", event), user)

        subscription = self.supabase.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    @staticmethod
    def _to_auth_result(resp: Any) -> AuthResult | None:
        user = to_auth_user(getattr(resp, "user", None))
        if user is None:
            return None
        session = getattr(resp, "session", None)
        return AuthResult(
            user=user,
            access_token=getattr(session, "access_token", None),
            refresh_token=getattr(session, "refresh_token", None),
            expires_in=getattr(session, "expires_in", None),
        )

    @staticmethod
    def _auth_failure(message: str, err: AuthError, email: str) -> Failure:
        error_msg = getattr(err, "message", None) or str(err)
        logger.warning(
            message,
            extra={
                "email": email,
                "error_type": type(err).__name__,
                "error_summary": error_msg[:100],
            },
        )
        return Failure.remote(error_msg, code=getattr(err, "code", None))
