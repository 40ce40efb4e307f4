"""Tests for the session context state machine."""
import threading
from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.core.schemas.auth import AuthResult, AuthUser
from app.core.schemas.result import Success
from app.ui.session import Session, SessionContext, SessionStatus


class StubAuth:
    """Auth service whose calls never fire notifications on their own."""

    def __init__(self, current=None, fail=False) -> None:
        self.current = current
        self.fail = fail
        self.callback = None
        self.unsubscribed = False

    def on_auth_state_change(self, callback):
        self.callback = callback

        def _unsubscribe():
            self.unsubscribed = True

        return _unsubscribe

    async def get_current_user(self):
        if self.fail:
            raise ConnectionError("offline")
        return Success(data=self.current)

    async def sign_in(self, email, password):
        return Success(data=AuthResult(user=AuthUser(id=uuid4(), email=email)))

    async def sign_up(self, email, password):
        return Success(data=AuthResult(user=AuthUser(id=uuid4(), email=email)))

    async def sign_out(self):
        return Success(data=None)


def make_user() -> AuthUser:
    return AuthUser(id=uuid4(), email="a@b.com")


def test_session_starts_unresolved() -> None:
    session = Session()
    assert session.status is SessionStatus.UNRESOLVED
    assert session.loading
    assert session.user is None


def test_session_rejects_inconsistent_pairs() -> None:
    with pytest.raises(ValidationError):
        Session(status=SessionStatus.AUTHENTICATED)
    with pytest.raises(ValidationError):
        Session(status=SessionStatus.UNAUTHENTICATED, user=make_user())
    with pytest.raises(ValidationError):
        Session(status=SessionStatus.UNRESOLVED, user=make_user())


async def test_start_resolves_to_authenticated() -> None:
    user = make_user()
    async with SessionContext(StubAuth(current=user)) as ctx:
        assert ctx.session.status is SessionStatus.AUTHENTICATED
        assert ctx.user == user
        assert not ctx.loading


async def test_start_resolves_to_unauthenticated() -> None:
    async with SessionContext(StubAuth()) as ctx:
        assert ctx.session.status is SessionStatus.UNAUTHENTICATED
        assert ctx.user is None


async def test_unexpected_error_while_resolving_means_signed_out() -> None:
    async with SessionContext(StubAuth(fail=True)) as ctx:
        assert ctx.session.status is SessionStatus.UNAUTHENTICATED


async def test_sign_in_does_not_touch_local_state_until_notified() -> None:
    auth = StubAuth()
    async with SessionContext(auth) as ctx:
        result = await ctx.sign_in("a@b.com", "secret1")
        assert result.ok
        assert ctx.session.status is SessionStatus.UNAUTHENTICATED

        user = make_user()
        auth.callback("SIGNED_IN", user)
        assert ctx.session.status is SessionStatus.AUTHENTICATED
        assert ctx.user == user

        auth.callback("SIGNED_OUT", None)
        assert ctx.session.status is SessionStatus.UNAUTHENTICATED
        assert not ctx.loading


async def test_listeners_receive_snapshots_until_removed() -> None:
    auth = StubAuth()
    ctx = SessionContext(auth)
    seen = []
    remove = ctx.add_listener(seen.append)

    await ctx.start()
    auth.callback("SIGNED_IN", make_user())
    remove()
    auth.callback("SIGNED_OUT", None)
    ctx.close()

    assert [s.status for s in seen] == [SessionStatus.UNAUTHENTICATED, SessionStatus.AUTHENTICATED]


async def test_subscription_released_on_exit_even_after_error() -> None:
    auth = StubAuth()
    with pytest.raises(RuntimeError):
        async with SessionContext(auth):
            raise RuntimeError("page crashed")
    assert auth.unsubscribed


async def test_with_supabase_auth(auth_service) -> None:
    async with SessionContext(auth_service) as ctx:
        assert ctx.user is None
        await ctx.sign_up("a@b.com", "secret1")
        assert ctx.session.is_authenticated
        assert ctx.user.email == "a@b.com"
        await ctx.sign_out()
        assert ctx.user is None


async def test_notifications_from_worker_threads_reach_listeners_on_the_loop(auth_service) -> None:
    on_main_thread = []

    async with SessionContext(auth_service) as ctx:
        ctx.add_listener(
            lambda _: on_main_thread.append(threading.current_thread() is threading.main_thread())
        )
        await ctx.sign_up("a@b.com", "secret1")
        assert ctx.session.is_authenticated
        await ctx.sign_out()
        assert ctx.user is None

    assert on_main_thread == [True, True]
