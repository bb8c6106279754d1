from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from .post import Post

# Legacy v1.1-style timestamp, still emitted by most tweet scrapers.
_LEGACY_TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def _coerce_str(value: Any) -> str | None:
    if isinstance(value, str):
        s = value.strip()
        return s if s else None
    return None


def _coerce_id(value: Any) -> str | None:
    if isinstance(value, str):
        v = value.strip()
        return v if v else None
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse ISO 8601 ("2024-05-01T12:00:00.000Z") or legacy
    ("Wed May 01 12:00:00 +0000 2024") timestamps into aware UTC datetimes.
    """
    raw = _coerce_str(value)
    if raw is None:
        return None

    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        try:
            parsed = datetime.strptime(raw, _LEGACY_TIMESTAMP_FORMAT)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def post_from_item(item: Mapping[str, Any]) -> Post | None:
    """
    Best-effort extraction of a Post from a search API object or scraper dataset item.

    Returns None when the item has no id, no text, or no readable timestamp.
    """
    post_id = _coerce_id(item.get("id")) or _coerce_id(item.get("id_str"))
    if not post_id:
        return None

    # Text may legitimately be whitespace-only; keep it verbatim when present.
    text: str | None = None
    for key in ("text", "full_text", "fullText"):
        val = item.get(key)
        if isinstance(val, str):
            text = val
            break
    if text is None:
        return None

    created_at = (
        parse_timestamp(item.get("created_at"))
        or parse_timestamp(item.get("createdAt"))
        or parse_timestamp(item.get("timestamp"))
    )
    if created_at is None:
        return None

    return Post(id=post_id, text=text, created_at=created_at)


def posts_from_items(items: Iterable[Mapping[str, Any]]) -> list[Post]:
    out: list[Post] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        post = post_from_item(item)
        if post is not None:
            out.append(post)
    return out
