"""Shared fixtures: an in-memory stand-in for the Supabase client."""
import os
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from uuid import uuid4

os.environ.setdefault("APP_SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("APP_SUPABASE_ANON_KEY", "test-anon-key")

import pytest  # noqa: E402
from supabase import AuthError, PostgrestAPIError  # noqa: E402

from app.core.repositories.implementations.supabase.note_repository import (  # noqa: E402
    SupabaseNoteRepository,
)
from app.core.services.auth_service import AuthService  # noqa: E402


class FakeAuthError(AuthError):
    """Provider-side auth failure carrying a readable message."""

    def __init__(self, message: str) -> None:
        Exception.__init__(self, message)
        self.message = message
        self.code = None


def remote_error(message: str = "database unavailable") -> PostgrestAPIError:
    return PostgrestAPIError({"message": message, "code": "XX000", "hint": None, "details": None})


class FakeTable:
    def __init__(self) -> None:
        self.rows: list[dict] = []
        self.fail_with: Exception | None = None
        # Mimics a database trigger that stamps updated_at on UPDATE
        self.touch_on_update = False
        self._clock = datetime(2024, 1, 1, tzinfo=UTC)

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()


class FakeQuery:
    def __init__(self, table: FakeTable) -> None:
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._count = None
        self._payload = None
        self._filters = []
        self._order = None
        self._range = None

    def select(self, *columns, count=None):
        self._op = "select"
        self._columns = columns[0] if columns else "*"
        self._count = count
        return self

    def insert(self, rows):
        self._op = "insert"
        self._payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, values):
        self._op = "update"
        self._payload = values
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda r: str(r.get(column)) == str(value))
        return self

    def overlaps(self, column, values):
        wanted = set(values)
        self._filters.append(lambda r: bool(set(r.get(column) or []) & wanted))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, n):
        self._range = (0, n - 1)
        return self

    def execute(self):
        table = self._table
        if table.fail_with is not None:
            raise table.fail_with

        if self._op == "insert":
            inserted = []
            for payload in self._payload:
                row = {"id": str(uuid4()), "created_at": table.next_timestamp(), "updated_at": None}
                row.update(payload)
                table.rows.append(row)
                inserted.append(dict(row))
            return SimpleNamespace(data=inserted, count=None)

        matched = [r for r in table.rows if all(f(r) for f in self._filters)]

        if self._op == "update":
            for row in matched:
                row.update(self._payload)
                if table.touch_on_update:
                    row["updated_at"] = table.next_timestamp()
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        if self._op == "delete":
            table.rows = [r for r in table.rows if r not in matched]
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: r[column], reverse=desc)
        total = len(matched)
        if self._range:
            start, end = self._range
            matched = matched[start:end + 1]
        if self._columns != "*":
            names = [c.strip() for c in self._columns.split(",")]
            matched = [{n: r.get(n) for n in names} for r in matched]
        else:
            matched = [dict(r) for r in matched]
        return SimpleNamespace(data=matched, count=total if self._count else None)


class FakeAuth:
    def __init__(self) -> None:
        self.accounts: dict[str, tuple[str, SimpleNamespace]] = {}
        self.tokens: dict[str, SimpleNamespace] = {}
        self.current = None
        self.listeners = []

    def _notify(self, event, session) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    def _open_session(self, user) -> SimpleNamespace:
        token = f"header.{user.id}.signature"
        self.tokens[token] = user
        self.current = SimpleNamespace(
            access_token=token, refresh_token="refresh", expires_in=3600, user=user
        )
        self._notify("SIGNED_IN", self.current)
        return self.current

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.accounts:
            raise FakeAuthError("User already registered")
        user = SimpleNamespace(id=uuid4(), email=email, role="authenticated")
        self.accounts[email] = (credentials["password"], user)
        session = self._open_session(user)
        return SimpleNamespace(user=user, session=session)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        session = self._open_session(account[1])
        return SimpleNamespace(user=account[1], session=session)

    def sign_out(self):
        self.current = None
        self._notify("SIGNED_OUT", None)

    def get_user(self, jwt=None):
        if jwt is not None:
            user = self.tokens.get(jwt)
            if user is None:
                raise FakeAuthError("invalid JWT")
            return SimpleNamespace(user=user)
        if self.current is None:
            return None
        return SimpleNamespace(user=self.current.user)

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.listeners.remove(callback))


class FakeSupabaseClient:
    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {"notes": FakeTable()}
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables.setdefault(name, FakeTable()))

    @property
    def notes(self) -> FakeTable:
        return self.tables["notes"]


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def repo(supabase_client) -> SupabaseNoteRepository:
    return SupabaseNoteRepository(supabase_client)


@pytest.fixture
def auth_service(supabase_client) -> AuthService:
    return AuthService(supabase_client)


@pytest.fixture
def user_id():
    return uuid4()
