from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from app.core.models.base import AppBaseModel


class AuthUser(AppBaseModel):
    """Authenticated user extracted from a Supabase session or JWT."""

    id: UUID
    email: str
    role: str | None = None


class AuthResult(AppBaseModel):
    """Outcome of a successful credential exchange.

    Session fields are None when the provider created the user but did not
    open a session (e.g. email confirmation pending).
    """

    user: AuthUser
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
