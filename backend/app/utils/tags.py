from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def parse_tags(text: str | None) -> list[str] | None:
    """Parse a comma separated tag field.

    Pieces are trimmed and blanks dropped; duplicates are kept. Returns None
    when nothing remains so that notes never store an empty tag list.
    """
    if not text:
        return None
    tags = [piece.strip() for piece in text.split(",")]
    tags = [t for t in tags if t]
    return tags or None


def format_tags(tags: Iterable[str] | None) -> str:
    """Render tags back into the comma separated form used by the edit field."""
    if not tags:
        return ""
    return ", ".join(tags)


def distinct_tags(tag_lists: Iterable[Iterable[str] | None]) -> list[str]:
    """Flatten tag lists into a sorted list of unique, non-blank tags."""
    seen: set[str] = set()
    for tags in tag_lists:
        if not tags:
            continue
        for tag in tags:
            if isinstance(tag, str) and tag.strip():
                seen.add(tag)
    return sorted(seen)
