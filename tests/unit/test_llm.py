from types import SimpleNamespace

import pytest

from grepbase.core.config import Settings
from grepbase.core.exceptions import LLMError
from grepbase.utils.llm import Completion, LLMClient


class StubOpenAI:
    def __init__(self, text="openai answer", error=None):
        self.text = text
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.text))],
            usage=SimpleNamespace(prompt_tokens=11, completion_tokens=7),
        )


class StubClaude:
    def __init__(self, blocks=(), error=None):
        self.blocks = list(blocks)
        self.error = error
        self.calls = []
        self.messages = SimpleNamespace(create=self.create)

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(
            content=self.blocks,
            usage=SimpleNamespace(input_tokens=5, output_tokens=3),
        )


def text_block(text):
    return SimpleNamespace(type="text", text=text)


@pytest.fixture
def client():
    llm = LLMClient(Settings(OPENAI_MODEL="gpt-test", CLAUDE_MODEL="claude-test", MAX_TOKENS=256))
    llm.openai = None
    llm.claude = None
    return llm


@pytest.mark.asyncio
async def test_openai_answers_first(client):
    client.openai = StubOpenAI("## 01 Rates")
    client.claude = StubClaude([text_block("unused")])

    result = await client.complete("prompt")

    assert result == Completion(text="## 01 Rates", input_tokens=11, output_tokens=7)
    assert result.total_tokens == 18
    assert client.openai.calls[0]["model"] == "gpt-test"
    assert client.openai.calls[0]["messages"] == [{"role": "user", "content": "prompt"}]
    assert client.openai.calls[0]["max_tokens"] == 256
    assert client.claude.calls == []


@pytest.mark.asyncio
async def test_claude_answers_when_openai_fails(client):
    client.openai = StubOpenAI(error=RuntimeError("rate limited"))
    client.claude = StubClaude(
        [text_block("## 01 "), SimpleNamespace(type="tool_use", name="noop"), text_block("Rates")]
    )

    result = await client.complete("prompt")

    assert result == Completion(text="## 01 Rates", input_tokens=5, output_tokens=3)
    assert client.claude.calls[0]["model"] == "claude-test"
    assert len(client.openai.calls) == 1


@pytest.mark.asyncio
async def test_all_providers_failing_raises(client):
    client.openai = StubOpenAI(error=RuntimeError("down"))
    client.claude = StubClaude(error=RuntimeError("also down"))

    with pytest.raises(LLMError) as excinfo:
        await client.complete("prompt")

    assert excinfo.value.error_code == "llm_unavailable"


@pytest.mark.asyncio
async def test_no_provider_configured_raises(client):
    with pytest.raises(LLMError):
        await client.complete("prompt")
