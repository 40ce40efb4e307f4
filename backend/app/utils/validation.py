from __future__ import annotations

from app.config import settings


def validate_credentials(email: str, password: str) -> tuple[bool, str | None]:
    """Validate login/signup input before it reaches the auth provider."""
    if not email or not password:
        return False, "Please fill in all fields"

    if len(password) < settings.min_password_length:
        return False, f"Password must be at least {settings.min_password_length} characters"
    return True, None


def validate_note_fields(title: str | None, content: str | None) -> tuple[bool, str | None]:
    """Both title and content must be non-empty once trimmed."""
    if not (title or "").strip() or not (content or "").strip():
        return False, "Please fill in both title and content"
    return True, None
