"""Background enrichment workers draining the processing queue."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from opentelemetry import trace

from grepbase.core.exceptions import EnrichmentError
from grepbase.models import DocumentRef, RawContent
from grepbase.processing.hooks import (
    DocumentProcessingCompletedEvent,
    DocumentProcessingStartedEvent,
    ErrorContext,
    ErrorEvent,
    HookDispatcher,
    ProcessingRunCompletedEvent,
    ProcessingRunStartedEvent,
)
from grepbase.processing.prompts import create_processing_prompt
from grepbase.processing.queue import ProcessingQueue
from grepbase.processing.renderer import render_processed_document, resolve_document_metadata
from grepbase.storage import FileStorage
from grepbase.utils.llm import Completion, CompletionModel, as_completion
from grepbase.utils.monitoring import observe_processing, processing_queue_size

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_IDLE_SLEEP_SECONDS = 0.75
MIN_IDLE_SLEEP_SECONDS = 0.05


@dataclass
class ProcessorContext:
    """Everything a worker needs to turn a raw record into a processed one."""

    domain: str
    tag_schema: str
    model: CompletionModel
    storage: FileStorage
    hooks: HookDispatcher = field(default_factory=HookDispatcher)
    custom_processing_prompts: Dict[str, str] = field(default_factory=dict)

    def resolve_custom_prompt(self, source: Optional[str], ref: DocumentRef) -> Optional[str]:
        if not self.custom_processing_prompts:
            return None
        if source and source in self.custom_processing_prompts:
            return self.custom_processing_prompts[source]
        return self.custom_processing_prompts.get(ref.split("/", 1)[0])


async def process_document(
    ref: DocumentRef,
    ctx: ProcessorContext,
    raw: Optional[RawContent] = None,
    source: Optional[str] = None,
) -> Completion:
    """Clean, chunk and tag one document with a single model call and store the result."""

    if raw is None:
        raw = await ctx.storage.read_raw_content(ref)

    prompt = create_processing_prompt(
        raw.content,
        ctx.domain,
        ctx.tag_schema,
        ctx.resolve_custom_prompt(source, ref),
    )

    completion = as_completion(await ctx.model.complete(prompt))
    if not completion.text.strip():
        raise EnrichmentError("empty_completion", "Failed to process content: empty LLM response", {"ref": ref})

    rendered = render_processed_document(raw.tags, completion.text)
    await ctx.storage.save_processed_content(ref, rendered)
    return completion


class EnrichmentWorkerPool:
    """
    Fixed number of cooperative worker loops sharing one queue.

    Each loop takes one reference at a time. A failing document is reported through
    the hooks and skipped; nothing short of ``stop`` ends a loop. ``stop`` lets every
    worker finish its in-flight document before returning.
    """

    def __init__(
        self,
        ctx: ProcessorContext,
        queue: ProcessingQueue,
        *,
        concurrency: int = 1,
        idle_sleep: float = DEFAULT_IDLE_SLEEP_SECONDS,
    ) -> None:
        self.ctx = ctx
        self.queue = queue
        self.concurrency = max(1, int(concurrency or 1))
        self.idle_sleep = max(MIN_IDLE_SLEEP_SECONDS, idle_sleep)

        self._tasks: List[asyncio.Task] = []
        self._stop_event: Optional[asyncio.Event] = None

        # Shared run state across workers
        self._run_active = False
        self._run_started_at = 0.0
        self._successful = 0
        self._failed = 0
        self._in_flight = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def start(self) -> None:
        if self._tasks:
            return

        self._stop_event = asyncio.Event()
        self._tasks = [
            asyncio.create_task(self._worker_loop(index), name=f"grepbase-worker-{index}")
            for index in range(self.concurrency)
        ]
        logger.info("Started %d enrichment worker(s); %d document(s) queued.", self.concurrency, self.queue.size())

    async def stop(self) -> None:
        if not self._tasks:
            return

        assert self._stop_event is not None
        self._stop_event.set()
        tasks, self._tasks = self._tasks, []
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for task, result in zip(tasks, results):
            if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
                logger.error("Worker %s ended with an error", task.get_name(), exc_info=result)
        await self._try_end_run()
        logger.info("Enrichment workers stopped.")

    def _queue_totals(self) -> Tuple[int, int, int]:
        processed = self._successful + self._failed if self._run_active else 0
        pending = self.queue.size()
        return processed, pending, processed + pending + self._in_flight

    async def _start_run(self, total: int) -> None:
        self._run_active = True
        self._run_started_at = time.perf_counter()
        self._successful = 0
        self._failed = 0
        await self.ctx.hooks.emit(ProcessingRunStartedEvent(documents_to_process=total, total_documents=total))

    async def _try_end_run(self) -> None:
        if not self._run_active or self.queue.size() or self._in_flight:
            return
        self._run_active = False
        await self.ctx.hooks.emit(
            ProcessingRunCompletedEvent(
                successful=self._successful,
                failed=self._failed,
                elapsed_ms=_elapsed_ms(self._run_started_at),
            )
        )

    async def _idle(self) -> None:
        assert self._stop_event is not None
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.idle_sleep)
        except asyncio.TimeoutError:
            pass

    async def _worker_loop(self, index: int) -> None:
        assert self._stop_event is not None
        logger.debug("Worker %d started", index)

        while not self._stop_event.is_set():
            _, _, total = self._queue_totals()
            if total > 0 and not self._run_active:
                await self._start_run(total)

            ref = self.queue.dequeue()
            processing_queue_size.set(self.queue.size())
            if ref is None:
                await self._try_end_run()
                await self._idle()
                continue

            await self._handle(ref)
            await self._try_end_run()

        logger.debug("Worker %d exiting", index)

    async def _handle(self, ref: DocumentRef) -> None:
        self._in_flight += 1
        started_at = time.perf_counter()

        raw: Optional[RawContent] = None
        read_error: Optional[Exception] = None
        try:
            raw = await self.ctx.storage.read_raw_content(ref)
        except Exception as exc:
            read_error = exc

        source, publisher, label = resolve_document_metadata(ref, raw.tags if raw else None)

        await self.ctx.hooks.emit(
            DocumentProcessingStartedEvent(
                source=source,
                publisher=publisher,
                label=label,
                ref=ref,
                successful=self._successful,
                failed=self._failed,
                queue_size=self._queue_totals()[2],
            )
        )

        completion: Optional[Completion] = None
        success = False
        with tracer.start_as_current_span("grepbase.process_document") as span:
            span.set_attribute("grepbase.ref", ref)
            span.set_attribute("grepbase.source", source)
            try:
                if read_error is not None:
                    raise read_error
                completion = await process_document(ref, self.ctx, raw, source)
                self._successful += 1
                success = True
            except Exception as exc:
                self._failed += 1
                span.record_exception(exc)
                logger.exception("Failed to process document %s", ref)
                await self.ctx.hooks.emit(
                    ErrorEvent(
                        error=exc,
                        context=ErrorContext(source=source, publisher=publisher, label=label, ref=ref),
                    )
                )
            finally:
                self._in_flight -= 1

        elapsed = time.perf_counter() - started_at
        observe_processing(
            source,
            success,
            elapsed,
            completion.input_tokens if completion else 0,
            completion.output_tokens if completion else 0,
        )
        await self.ctx.hooks.emit(
            DocumentProcessingCompletedEvent(
                success=success,
                source=source,
                publisher=publisher,
                label=label,
                ref=ref,
                successful=self._successful,
                failed=self._failed,
                queue_size=self._queue_totals()[2],
                elapsed_ms=int(elapsed * 1000),
                input_tokens=completion.input_tokens if completion else 0,
                output_tokens=completion.output_tokens if completion else 0,
                total_tokens=completion.total_tokens if completion else 0,
            )
        )


def _elapsed_ms(started_at: float) -> int:
    return int((time.perf_counter() - started_at) * 1000)
