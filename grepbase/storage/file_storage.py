"""File-backed storage for the raw and processed document layers."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal

import yaml

from grepbase.core.exceptions import InvalidRawContentError
from grepbase.models import (
    DocumentAdded,
    DocumentDuplicate,
    DocumentRef,
    DocumentSaveError,
    DocumentSaveResult,
    EatInput,
    RawContent,
    SourceCounts,
)
from grepbase.storage.frontmatter import parse_header, render_document, split_document
from grepbase.storage.references import derive_document_ref, to_utc

logger = logging.getLogger(__name__)

RAW_DIR_NAME = "raw"
PROCESSED_DIR_NAME = "processed"

Layer = Literal["raw", "processed"]


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""

    return to_utc(moment).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FileStorage:
    """
    Two mirrored directory trees under one base directory.

    A document's reference is its path relative to either layer root. Whether a
    file exists at ``processed/<ref>`` is the only record of processing state.
    """

    def __init__(self, base_dir: str | os.PathLike[str]) -> None:
        self.base_dir = Path(base_dir)

    @property
    def raw_content_path(self) -> Path:
        return self.base_dir / RAW_DIR_NAME

    @property
    def processed_content_path(self) -> Path:
        return self.base_dir / PROCESSED_DIR_NAME

    def resolve_layer_path(self, layer: Layer, ref: DocumentRef) -> Path:
        return self.base_dir / layer / Path(*ref.split("/"))

    async def save_raw_content(self, document: EatInput) -> DocumentSaveResult:
        """Persist a submitted document; never raises for I/O or serialization failures."""

        created_at = document.creation_date or datetime.now(timezone.utc)
        try:
            ref = derive_document_ref(
                document.label,
                document.source,
                publisher=document.publisher,
                timestamp=created_at,
                id=document.id or "unknown",
            )
            body = self._build_raw_file_content(document, created_at)
            destination = self.resolve_layer_path("raw", ref)

            def write() -> bool:
                if destination.exists() and not document.overwrite:
                    return False
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_text(body, encoding="utf-8")
                return True

            written = await asyncio.to_thread(write)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            logger.error("Unable to persist raw document '%s' from %s: %s", document.label, document.source, exc)
            return DocumentSaveError(message=str(exc) or exc.__class__.__name__)

        if not written:
            logger.debug("Raw document %s already exists; skipping write.", ref)
            return DocumentDuplicate(ref=ref)

        logger.info("Stored raw document %s", ref)
        return DocumentAdded(ref=ref)

    async def read_raw_content(self, ref: DocumentRef) -> RawContent:
        """Parse a raw record into its header mapping and body."""

        path = self.resolve_layer_path("raw", ref)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")

        try:
            header, body = split_document(text)
        except ValueError as exc:
            raise InvalidRawContentError(
                "invalid_raw_content",
                f"Invalid raw file format. The file '{ref}' doesn't have a yaml header.",
                {"ref": ref, "reason": str(exc)},
            ) from exc

        try:
            tags = parse_header(header)
        except yaml.YAMLError as exc:
            raise InvalidRawContentError(
                "invalid_raw_content",
                f"Invalid raw file format. The file '{ref}' has an unparsable yaml header.",
                {"ref": ref, "reason": str(exc)},
            ) from exc
        except ValueError as exc:
            raise InvalidRawContentError(
                "invalid_raw_content",
                f"Invalid raw file format. The file '{ref}' has a non-object yaml header.",
                {"ref": ref, "reason": str(exc)},
            ) from exc

        return RawContent(tags=tags, content=body)

    async def get_unprocessed_contents(self) -> List[DocumentRef]:
        """References present in the raw layer but absent from the processed layer."""

        raw_refs = await self.list_layer_refs("raw")
        processed_refs = set(await self.list_layer_refs("processed"))
        return [ref for ref in raw_refs if ref not in processed_refs]

    async def save_processed_content(self, ref: DocumentRef, content: str) -> None:
        """Write enrichment output, replacing any earlier output for the same reference."""

        destination = self.resolve_layer_path("processed", ref)

        def write() -> None:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", suffix=".part", dir=destination.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(content)
                os.replace(tmp_name, destination)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        await asyncio.to_thread(write)
        logger.info("Stored processed document %s", ref)

    async def get_document_counts(self) -> Dict[str, SourceCounts]:
        """Raw and processed document totals keyed by source directory."""

        counts: Dict[str, SourceCounts] = {}
        for layer in ("raw", "processed"):
            for ref in await self.list_layer_refs(layer):
                source = ref.split("/", 1)[0]
                entry = counts.setdefault(source, SourceCounts())
                setattr(entry, layer, getattr(entry, layer) + 1)
        return dict(sorted(counts.items()))

    async def list_layer_refs(self, layer: Layer) -> List[DocumentRef]:
        root = self.base_dir / layer

        def walk() -> List[DocumentRef]:
            if not root.is_dir():
                return []
            refs = []
            for dirpath, _, filenames in os.walk(root):
                for name in filenames:
                    if not name.lower().endswith(".md"):
                        continue
                    relative = Path(dirpath, name).relative_to(root)
                    refs.append(relative.as_posix())
            return sorted(refs)

        return await asyncio.to_thread(walk)

    @staticmethod
    def _build_raw_file_content(document: EatInput, created_at: datetime) -> str:
        header: Dict[str, Any] = {}
        if document.id:
            header["id"] = document.id
        header["title"] = document.label
        header["created_at"] = format_timestamp(created_at)
        header.update(document.tags)
        header["source"] = document.source
        if document.publisher:
            header["publisher"] = document.publisher
        return render_document(header, document.content)
