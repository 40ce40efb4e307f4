from __future__ import annotations

from app.core.models.base import AppBaseModel

LANDING_PATH = "/"
NOTES_PATH = "/profile"


class Redirect(AppBaseModel):
    """Instruction to navigate to another surface."""

    to: str


class Loading(AppBaseModel):
    message: str = "Loading..."
