import asyncio
import re
import time
from typing import Callable, Dict, List, Type

import pytest

from grepbase.models import TagField, TagFieldType
from grepbase.processing import HookDispatcher, ProcessingHooks, ProcessingQueue, ProcessorContext
from grepbase.processing.prompts import render_tag_schema
from grepbase.service import Grepbase
from grepbase.storage import FileStorage
from grepbase.utils.llm import Completion

RAW_CONTENT_MARKER = "# RAW CONTENT:\n"


class StubModel:
    """Drops sentences mentioning 'Buy now' and wraps the rest in one section."""

    def __init__(self, fail_on=(), delay: float = 0.0, empty_on=()):
        self.fail_on = tuple(fail_on)
        self.empty_on = tuple(empty_on)
        self.delay = delay
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> Completion:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)

        content = prompt.split(RAW_CONTENT_MARKER, 1)[-1].strip()
        for marker in self.fail_on:
            if marker in content:
                raise RuntimeError(f"model failure for {marker}")
        for marker in self.empty_on:
            if marker in content:
                return Completion(text="   ")

        kept = [s for s in re.split(r"(?<=[.!?])\s+", content) if "Buy now" not in s]
        return Completion(
            text="## 01 Section\ntopic=demo\n" + " ".join(kept) + "\n",
            input_tokens=len(prompt) // 4,
            output_tokens=12,
        )


class RecordingHooks(ProcessingHooks):
    def __init__(self):
        self.events: List[object] = []

    def _record(self, event):
        self.events.append(event)

    on_processing_run_started = _record
    on_processing_run_completed = _record
    on_document_processing_started = _record
    on_document_processing_completed = _record
    on_error = _record

    def of_type(self, event_type: Type) -> List[object]:
        return [event for event in self.events if isinstance(event, event_type)]


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def tag_schema() -> List[TagField]:
    return [
        TagField(name="topic", type=TagFieldType.STRING_ARRAY, description="Main topics"),
        TagField(
            name="sentiment",
            type=TagFieldType.ENUM,
            description="Overall tone",
            enum_values=["positive", "neutral", "negative"],
        ),
    ]


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path)


@pytest.fixture
def stub_model() -> StubModel:
    return StubModel()


@pytest.fixture
def hooks() -> RecordingHooks:
    return RecordingHooks()


def make_context(storage, model, tag_schema, hooks=None, prompts: Dict[str, str] = None) -> ProcessorContext:
    return ProcessorContext(
        domain="testing",
        tag_schema=render_tag_schema(tag_schema),
        model=model,
        storage=storage,
        hooks=HookDispatcher([hooks] if hooks else None),
        custom_processing_prompts=prompts or {},
    )


def make_grepbase(storage, model, tag_schema, hooks=None, workers: int = 1) -> Grepbase:
    ctx = make_context(storage, model, tag_schema, hooks)
    return Grepbase(storage, ProcessingQueue(), ctx, workers=workers, idle_sleep=0.05)
