"""In-memory FIFO of document references awaiting enrichment."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Iterable, Optional

from grepbase.models import DocumentRef
from grepbase.storage import FileStorage

logger = logging.getLogger(__name__)


class ProcessingQueue:
    """
    FIFO of bare document references.

    Duplicates are allowed; the processed-layer write is idempotent. The lock makes
    ``dequeue`` an atomic pop, so two workers never receive the same entry.
    """

    def __init__(self, refs: Optional[Iterable[DocumentRef]] = None) -> None:
        self._items: Deque[DocumentRef] = deque(refs or ())
        self._lock = threading.Lock()

    def enqueue(self, ref: DocumentRef) -> None:
        with self._lock:
            self._items.append(ref)

    def dequeue(self) -> Optional[DocumentRef]:
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    def size(self) -> int:
        with self._lock:
            return len(self._items)

    def __len__(self) -> int:
        return self.size()


async def enqueue_unprocessed_documents(storage: FileStorage, queue: ProcessingQueue) -> int:
    """Re-enqueue every reference that has a raw record but no processed record."""

    refs = await storage.get_unprocessed_contents()
    for ref in refs:
        queue.enqueue(ref)
    if refs:
        logger.info("Recovered %d unprocessed document(s) from %s", len(refs), storage.base_dir)
    return len(refs)
