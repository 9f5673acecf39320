"""grepbase: file-backed document store with background LLM enrichment."""

from grepbase.models import EatInput, EatResult, TagField, TagFieldType
from grepbase.processing import LoggingHooks, ProcessingHooks
from grepbase.service import Grepbase
from grepbase.tag_schema import initialize_tag_schema
from grepbase.utils.llm import Completion, CompletionModel, LLMClient

__all__ = [
    "Completion",
    "CompletionModel",
    "EatInput",
    "EatResult",
    "Grepbase",
    "LLMClient",
    "LoggingHooks",
    "ProcessingHooks",
    "TagField",
    "TagFieldType",
    "initialize_tag_schema",
]
