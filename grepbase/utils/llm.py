"""Utilities for interacting with LLM providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union, runtime_checkable

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from grepbase.core.config import Settings, settings as default_settings
from grepbase.core.exceptions import LLMError

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    """Model output with token usage when the provider reports it."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@runtime_checkable
class CompletionModel(Protocol):
    """The enrichment capability: one prompt in, one text out. May raise."""

    async def complete(self, prompt: str) -> Union[str, Completion]:
        ...


def as_completion(result: Union[str, Completion, None]) -> Completion:
    if isinstance(result, Completion):
        return result
    return Completion(text=result or "")


class LLMClient:
    """Coordinate completions across a primary OpenAI model and a Claude fallback."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self.settings = config or default_settings
        self.openai: Optional[AsyncOpenAI] = None
        self.claude: Optional[AsyncAnthropic] = None

        if self.settings.OPENAI_API_KEY or self.settings.OPENAI_BASE_URL:
            self.openai = AsyncOpenAI(
                api_key=self.settings.OPENAI_API_KEY or "not-needed",
                base_url=str(self.settings.OPENAI_BASE_URL) if self.settings.OPENAI_BASE_URL else None,
            )
        if self.settings.ANTHROPIC_API_KEY:
            self.claude = AsyncAnthropic(api_key=self.settings.ANTHROPIC_API_KEY)

        if self.openai is None and self.claude is None:
            logger.warning("No LLM provider configured; completions will fail.")

    async def complete(self, prompt: str) -> Completion:
        """Send a single-turn prompt, falling back to Claude when OpenAI fails."""

        messages = [{"role": "user", "content": prompt}]

        if self.openai:
            try:
                response = await self.openai.chat.completions.create(
                    model=self.settings.OPENAI_MODEL,
                    messages=messages,
                    temperature=self.settings.TEMPERATURE,
                    max_tokens=self.settings.MAX_TOKENS,
                )
                usage = response.usage
                return Completion(
                    text=response.choices[0].message.content or "",
                    input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                    output_tokens=getattr(usage, "completion_tokens", 0) or 0,
                )
            except Exception as exc:
                logger.error("OpenAI completion failed: %s", exc)

        if self.claude:
            try:
                claude_response = await self.claude.messages.create(
                    model=self.settings.CLAUDE_MODEL,
                    max_tokens=self.settings.MAX_TOKENS,
                    temperature=self.settings.TEMPERATURE,
                    messages=messages,
                )
                text = "".join(block.text for block in claude_response.content if getattr(block, "type", "") == "text")
                usage = claude_response.usage
                return Completion(
                    text=text,
                    input_tokens=getattr(usage, "input_tokens", 0) or 0,
                    output_tokens=getattr(usage, "output_tokens", 0) or 0,
                )
            except Exception as exc:
                logger.error("Claude completion failed: %s", exc)

        raise LLMError("llm_unavailable", "All LLM providers failed")
