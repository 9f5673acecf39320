"""Public entry point tying storage, queue and enrichment workers together."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

from opentelemetry import trace
from pydantic import ValidationError

from grepbase.core.exceptions import ConfigurationError
from grepbase.core.settings_file import StoreConfig, write_config
from grepbase.models import (
    DocumentDuplicate,
    DocumentSaveError,
    EatInput,
    EatResult,
    SourceCounts,
    TagField,
)
from grepbase.models.document import SUPPORTED_FORMATS
from grepbase.processing import (
    EnrichmentWorkerPool,
    HookDispatcher,
    ProcessingHooks,
    ProcessingQueue,
    ProcessorContext,
    enqueue_unprocessed_documents,
)
from grepbase.processing.prompts import render_tag_schema
from grepbase.processing.workers import DEFAULT_IDLE_SLEEP_SECONDS
from grepbase.storage import FileStorage
from grepbase.utils.llm import CompletionModel
from grepbase.utils.monitoring import observe_ingestion, processing_queue_size

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class Grepbase:
    """
    Ingest documents into the raw layer and enrich them in the background.

    Build instances with :meth:`create`, which reconciles the store so that every
    raw document without a processed counterpart is queued before any worker runs.
    """

    def __init__(
        self,
        storage: FileStorage,
        queue: ProcessingQueue,
        ctx: ProcessorContext,
        *,
        workers: int = 1,
        idle_sleep: float = DEFAULT_IDLE_SLEEP_SECONDS,
    ) -> None:
        self.storage = storage
        self.queue = queue
        self.ctx = ctx
        self.workers = workers
        self.idle_sleep = idle_sleep
        self._pool: Optional[EnrichmentWorkerPool] = None

    @classmethod
    async def create(
        cls,
        base_dir: Union[str, os.PathLike[str]],
        topic: str,
        model: CompletionModel,
        tag_schema: Sequence[TagField],
        *,
        workers: int = 1,
        custom_processing_prompts: Optional[Mapping[str, str]] = None,
        hooks: Optional[Iterable[ProcessingHooks]] = None,
        idle_sleep: float = DEFAULT_IDLE_SLEEP_SECONDS,
    ) -> "Grepbase":
        if not tag_schema:
            raise ConfigurationError(
                "missing_tag_schema",
                "Missing tag schema. Provide `tag_schema` or resolve one with initialize_tag_schema().",
            )

        storage = FileStorage(base_dir)
        prompts = dict(custom_processing_prompts or {})
        await write_config(
            base_dir,
            StoreConfig(domain=topic, tag_schema=list(tag_schema), custom_processing_prompts=prompts),
        )

        queue = ProcessingQueue()
        await enqueue_unprocessed_documents(storage, queue)
        processing_queue_size.set(queue.size())

        ctx = ProcessorContext(
            domain=topic,
            tag_schema=render_tag_schema(tag_schema),
            model=model,
            storage=storage,
            hooks=HookDispatcher(hooks),
            custom_processing_prompts=prompts,
        )
        return cls(storage, queue, ctx, workers=workers, idle_sleep=idle_sleep)

    @property
    def running(self) -> bool:
        return self._pool is not None and self._pool.running

    @property
    def in_flight(self) -> int:
        return self._pool.in_flight if self._pool else 0

    async def start(self) -> None:
        """Start the background workers; a second call is a no-op."""

        if self._pool is not None:
            return
        self._pool = EnrichmentWorkerPool(self.ctx, self.queue, concurrency=self.workers, idle_sleep=self.idle_sleep)
        await self._pool.start()

    async def stop(self) -> None:
        """Stop the workers once each has finished its current document."""

        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.stop()

    async def eat(self, document: Union[EatInput, Mapping[str, Any]]) -> EatResult:
        """Persist a document and queue it for enrichment. Never raises for bad input."""

        with tracer.start_as_current_span("grepbase.eat") as span:
            if not isinstance(document, EatInput):
                fmt = document.get("format", "text") if isinstance(document, Mapping) else None
                if fmt is not None and fmt not in SUPPORTED_FORMATS:
                    return EatResult(success=False, message=f"Unsupported format: {fmt}")
                try:
                    document = EatInput.model_validate(document)
                except ValidationError as exc:
                    return EatResult(success=False, message=f"Invalid document: {_describe_errors(exc)}")

            span.set_attribute("grepbase.source", document.source)
            if document.format not in SUPPORTED_FORMATS:
                observe_ingestion(document.source, "rejected")
                return EatResult(success=False, message=f"Unsupported format: {document.format}")

            result = await self.storage.save_raw_content(document)

            if isinstance(result, DocumentDuplicate):
                observe_ingestion(document.source, "duplicate")
                return EatResult(success=False, message="Document already exists.", ref=result.ref, duplicate=True)

            if isinstance(result, DocumentSaveError):
                observe_ingestion(document.source, "error")
                return EatResult(success=False, message=result.message)

            self.queue.enqueue(result.ref)
            processing_queue_size.set(self.queue.size())
            observe_ingestion(document.source, "added")
            span.set_attribute("grepbase.ref", result.ref)
            return EatResult(success=True, message="Content added.", ref=result.ref)

    async def get_document_counts(self) -> Dict[str, SourceCounts]:
        return await self.storage.get_document_counts()

    async def __aenter__(self) -> "Grepbase":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(item) for item in error.get("loc", ())) or "document"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)
