"""Deterministic document reference derivation."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

SOURCE_MAX_LENGTH = 20
PUBLISHER_MAX_LENGTH = 50
LABEL_MAX_LENGTH = 50
FALLBACK_SEGMENT = "unknown"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def sanitize(value: Optional[str], max_length: int = 50, fallback: str = FALLBACK_SEGMENT) -> str:
    """Lowercase, hyphenate and cap a path segment; never returns an empty string."""

    sanitized = _NON_ALNUM.sub("-", (value or "").strip().lower()).strip("-")
    sanitized = sanitized[:max_length].rstrip("-")
    return sanitized or fallback


def to_utc(timestamp: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones."""

    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def derive_document_ref(
    label: str,
    source: str,
    *,
    publisher: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    id: Optional[str] = None,
) -> str:
    """
    Build the relative path identifying a document in both storage layers.

    The result has the shape ``source/[publisher/]YYYY-MM/YYYY-MM-DD-label.md`` and
    depends only on the arguments, so the same tuple always yields the same
    reference without any registry lookup.
    """

    moment = to_utc(timestamp or datetime.now(timezone.utc))
    safe_id = sanitize(id, LABEL_MAX_LENGTH)
    safe_label = sanitize(label, LABEL_MAX_LENGTH, fallback=safe_id)
    segments = [sanitize(source, SOURCE_MAX_LENGTH)]
    if publisher and publisher.strip():
        segments.append(sanitize(publisher, PUBLISHER_MAX_LENGTH))
    segments.append(moment.strftime("%Y-%m"))
    segments.append(f"{moment.strftime('%Y-%m-%d')}-{safe_label}.md")
    return "/".join(segments)
