"""One-shot tag schema generation through the enrichment model."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import yaml
from pydantic import ValidationError

from grepbase.core.exceptions import TagSchemaError
from grepbase.models import TagSchema, TagSchemaResponse
from grepbase.utils.llm import CompletionModel, as_completion

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are an expert information architect designing tag schemas that improve text search, discovery, and retrieval within a specific knowledge topic.
Produce a list of 5-10 **tag fields** that are:
1. **Search-relevant**: users or AI agents are likely to query or filter text by these fields.
2. **Domain-relevant**: they reflect concepts, entities, and descriptors naturally present in this topic.
3. **Extractable**: values can be identified directly from text (no scores or inferred metrics such as confidence or relevance).
4. **Reusable**: they support both keyword search (grep/ripgrep) and structured filtering.

Allowed field types: string, string[], number, number[], boolean, enum, enum[], date.
Use array types when multiple values are expected per section. Enum types must list every allowed value.

Respond with JSON only, in this shape:
{{"tag_fields": [{{"name": "snake_case_name", "type": "enum[]", "description": "...", "enumValues": ["a", "b"]}}]}}

**TOPIC**: {topic}
"""

_FENCE = re.compile(r"```(?:json|yaml|yml)?\s*\n(.*?)```", re.DOTALL)


def _extract_payload(text: str) -> Any:
    match = _FENCE.search(text)
    body = match.group(1) if match else text
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        return yaml.safe_load(body)


def parse_tag_schema_response(text: str) -> TagSchema:
    """Parse a model response holding a ``tag_fields`` list (JSON or YAML, optionally fenced)."""

    try:
        payload = _extract_payload(text)
    except yaml.YAMLError as exc:
        raise TagSchemaError("tag_schema_unparsable", "Failed to parse tag schema from LLM response") from exc

    if isinstance(payload, list):
        payload = {"tag_fields": payload}
    try:
        return TagSchemaResponse.model_validate(payload).tag_fields
    except ValidationError as exc:
        raise TagSchemaError(
            "tag_schema_invalid",
            "Failed to parse tag schema from LLM response",
            {"errors": exc.errors(include_url=False)},
        ) from exc


async def generate_tag_schema(topic: str, model: CompletionModel) -> TagSchema:
    completion = as_completion(await model.complete(PROMPT_TEMPLATE.format(topic=topic)))
    if not completion.text.strip():
        raise TagSchemaError("tag_schema_empty", "Failed to generate tag schema: empty LLM response")

    schema = parse_tag_schema_response(completion.text)
    logger.info("Generated tag schema with %d field(s) for topic '%s'", len(schema), topic)
    return schema
