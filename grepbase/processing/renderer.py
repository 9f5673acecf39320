"""Rendering of enrichment output into processed-layer documents."""

from __future__ import annotations

from typing import Optional, Tuple

from grepbase.models import DocumentRef, Tags
from grepbase.storage.frontmatter import render_document


def render_processed_document(tags: Tags, chunk_content: str) -> str:
    """Document-level YAML header (scalar lists inline) followed by the model output."""

    return render_document(tags, chunk_content, flow_lists=True)


def resolve_document_metadata(ref: DocumentRef, tags: Optional[Tags] = None) -> Tuple[str, Optional[str], str]:
    """
    Return ``(source, publisher, label)`` for reporting.

    Header tags win when they hold non-blank strings; otherwise the values come
    from the reference layout ``source/[publisher/]YYYY-MM/file.md``.
    """

    parts = ref.split("/")
    filename = parts[-1] if parts else ""
    source = parts[0] if parts else ""
    publisher = parts[1] if len(parts) > 3 else None
    label = filename[:-3] if filename.endswith(".md") else filename

    tags = tags or {}
    if _is_text(tags.get("source")):
        source = tags["source"]
    if _is_text(tags.get("publisher")):
        publisher = tags["publisher"]
    if _is_text(tags.get("title")):
        label = tags["title"]

    return source, publisher, label


def _is_text(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())
