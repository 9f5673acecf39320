"""Custom exception hierarchy for grepbase."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class GrepbaseError(Exception):
    """Base class for application specific errors with structured payloads."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class ConfigurationError(GrepbaseError):
    """Raised when the store is created without a usable configuration."""


class InvalidRawContentError(GrepbaseError):
    """Raised when a raw file does not carry a well-formed YAML header."""


class EnrichmentError(GrepbaseError):
    """Raised when the enrichment model produces unusable output."""


class TagSchemaError(GrepbaseError):
    """Raised when a tag schema cannot be loaded, parsed, or generated."""


class LLMError(GrepbaseError):
    """Raised when every configured LLM provider fails."""
