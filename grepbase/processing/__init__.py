"""Background enrichment pipeline."""

from .hooks import (
    DocumentProcessingCompletedEvent,
    DocumentProcessingStartedEvent,
    ErrorContext,
    ErrorEvent,
    HookDispatcher,
    LoggingHooks,
    ProcessingHooks,
    ProcessingRunCompletedEvent,
    ProcessingRunStartedEvent,
)
from .queue import ProcessingQueue, enqueue_unprocessed_documents
from .workers import EnrichmentWorkerPool, ProcessorContext, process_document

__all__ = [
    "DocumentProcessingCompletedEvent",
    "DocumentProcessingStartedEvent",
    "EnrichmentWorkerPool",
    "ErrorContext",
    "ErrorEvent",
    "HookDispatcher",
    "LoggingHooks",
    "ProcessingHooks",
    "ProcessingQueue",
    "ProcessingRunCompletedEvent",
    "ProcessingRunStartedEvent",
    "ProcessorContext",
    "enqueue_unprocessed_documents",
    "process_document",
]
