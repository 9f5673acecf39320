"""Lifecycle events emitted by the enrichment workers and the observers that receive them."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ProcessingRunStartedEvent:
    documents_to_process: int
    total_documents: int


@dataclass
class ProcessingRunCompletedEvent:
    successful: int
    failed: int
    elapsed_ms: int


@dataclass
class DocumentProcessingStartedEvent:
    source: str
    label: str
    successful: int
    failed: int
    queue_size: int
    publisher: Optional[str] = None
    ref: Optional[str] = None


@dataclass
class DocumentProcessingCompletedEvent:
    success: bool
    source: str
    label: str
    successful: int
    failed: int
    queue_size: int
    elapsed_ms: int
    publisher: Optional[str] = None
    ref: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ErrorContext:
    source: Optional[str] = None
    publisher: Optional[str] = None
    label: Optional[str] = None
    ref: Optional[str] = None


@dataclass
class ErrorEvent:
    error: BaseException
    context: ErrorContext = field(default_factory=ErrorContext)


class ProcessingHooks:
    """
    Observer interface for pipeline events.

    Every method is a no-op; subclasses override what they need. Methods may be
    plain functions or coroutines.
    """

    def on_processing_run_started(self, event: ProcessingRunStartedEvent) -> Any:
        return None

    def on_processing_run_completed(self, event: ProcessingRunCompletedEvent) -> Any:
        return None

    def on_document_processing_started(self, event: DocumentProcessingStartedEvent) -> Any:
        return None

    def on_document_processing_completed(self, event: DocumentProcessingCompletedEvent) -> Any:
        return None

    def on_error(self, event: ErrorEvent) -> Any:
        return None


_EVENT_METHODS = {
    ProcessingRunStartedEvent: "on_processing_run_started",
    ProcessingRunCompletedEvent: "on_processing_run_completed",
    DocumentProcessingStartedEvent: "on_document_processing_started",
    DocumentProcessingCompletedEvent: "on_document_processing_completed",
    ErrorEvent: "on_error",
}


class HookDispatcher:
    """Delivers events to observers; a failing observer never affects the caller."""

    def __init__(self, hooks: Optional[Iterable[ProcessingHooks]] = None) -> None:
        self.hooks: List[ProcessingHooks] = [hook for hook in (hooks or []) if hook is not None]

    def add(self, hook: ProcessingHooks) -> None:
        self.hooks.append(hook)

    async def emit(self, event: Any) -> None:
        method_name = _EVENT_METHODS[type(event)]
        for hook in self.hooks:
            handler = getattr(hook, method_name, None)
            if not callable(handler):
                continue
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Hook %s.%s raised; ignoring.", hook.__class__.__name__, method_name)


class LoggingHooks(ProcessingHooks):
    """Structured event log, one JSON line per event."""

    def __init__(self, logger_name: str = "grepbase.events") -> None:
        self.logger = logging.getLogger(logger_name)

    def _record(self, name: str, payload: Dict[str, Any], level: int = logging.INFO) -> None:
        self.logger.log(level, json.dumps({"event": name, **payload}, default=str))

    def on_processing_run_started(self, event: ProcessingRunStartedEvent) -> None:
        self._record("processing_run.started", asdict(event))

    def on_processing_run_completed(self, event: ProcessingRunCompletedEvent) -> None:
        self._record("processing_run.completed", asdict(event))

    def on_document_processing_started(self, event: DocumentProcessingStartedEvent) -> None:
        self._record("document.started", asdict(event), logging.DEBUG)

    def on_document_processing_completed(self, event: DocumentProcessingCompletedEvent) -> None:
        self._record("document.completed", asdict(event))

    def on_error(self, event: ErrorEvent) -> None:
        self._record(
            "document.error",
            {"error": str(event.error), "error_type": event.error.__class__.__name__, **asdict(event.context)},
            logging.ERROR,
        )
