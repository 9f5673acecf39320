import logging

import pytest

from grepbase.processing import (
    ErrorContext,
    ErrorEvent,
    HookDispatcher,
    LoggingHooks,
    ProcessingHooks,
    ProcessingRunStartedEvent,
)


class ExplodingHooks(ProcessingHooks):
    def on_processing_run_started(self, event):
        raise RuntimeError("observer bug")


class AsyncHooks(ProcessingHooks):
    def __init__(self):
        self.seen = []

    async def on_processing_run_started(self, event):
        self.seen.append(event)


@pytest.mark.asyncio
async def test_dispatcher_swallows_handler_errors_and_keeps_going(caplog):
    recorder = AsyncHooks()
    dispatcher = HookDispatcher([ExplodingHooks(), recorder])
    event = ProcessingRunStartedEvent(documents_to_process=2, total_documents=2)

    with caplog.at_level(logging.ERROR, logger="grepbase.processing.hooks"):
        await dispatcher.emit(event)

    assert recorder.seen == [event]
    assert "observer bug" in caplog.text


@pytest.mark.asyncio
async def test_default_hooks_are_no_ops():
    dispatcher = HookDispatcher([ProcessingHooks(), None])
    await dispatcher.emit(ErrorEvent(error=ValueError("x")))
    assert len(dispatcher.hooks) == 1


@pytest.mark.asyncio
async def test_logging_hooks_write_structured_lines(caplog):
    dispatcher = HookDispatcher([LoggingHooks()])
    event = ErrorEvent(error=ValueError("bad header"), context=ErrorContext(source="demo", ref="demo/x.md"))

    with caplog.at_level(logging.INFO, logger="grepbase.events"):
        await dispatcher.emit(event)

    assert '"event": "document.error"' in caplog.text
    assert '"ref": "demo/x.md"' in caplog.text
    assert '"error_type": "ValueError"' in caplog.text
