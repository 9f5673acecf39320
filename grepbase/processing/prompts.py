"""Prompt templates for the enrichment step."""

from __future__ import annotations

import re
from typing import Optional, Sequence

import yaml

from grepbase.models import TagField

CONTENT_PLACEHOLDER = "{CONTENT}"
_TEMPLATE_FIELD = re.compile(r"\{(domain|tag_schema|content)\}")

PROCESSING_PROMPT_TEMPLATE = """
# INSTRUCTIONS
Clean, chunk, and tag the raw content for **grep-based search** in the domain: {domain}.

## Core Principle
Optimize for **single-pass grep scanning**: a single grep hit should reveal what a chunk is about without reading other chunks.

## Objectives
- Remove noise and boilerplate: ads, sponsors, intros/outros, calls to action, repetitions, contact or social links, and sign-offs.
- Preserve **all meaning and factual detail exactly** (facts, names, dates, numbers, ranges, uncertainty, conditions, and meaningful URLs).
- Use **minimal wording** while keeping all information.
- Chunk the content into **semantic sections** (prefer fewer, richer sections; do not pad content to reach size targets).

## Output Format (Markdown only)

## 01 Short descriptive title for section 1
field_1=value_1,value_4
field_2=value_2
<cleaned, condensed content>

## 02 Short descriptive title for section 2
field_1=value_1
field_3=value_5,value_6
<cleaned, condensed content>

## Tagging Rules
- Use ONLY fields defined in the TAG SCHEMA; field names must match exactly.
- Do not invent new fields.
- Omit fields with no value.
- One tag field per line, written as field=value directly beneath the section heading.
- Do not repeat a field. For array types, join values with commas.
- For enums, use only the allowed enum values from the schema.
- Use ISO-8601 for dates (YYYY-MM-DD).
- Keep tag values grep-friendly: snake_case where appropriate, tickers, codes and symbols in UPPERCASE.
- Keep tag order as in the schema.

## Content Rules
- Output MUST be plain text or Markdown with simple formatting (headings, lists, bold/italic).
- Rewrite content to be token-efficient and grep-efficient without altering meaning.
- Split content into short paragraphs separated by blank lines, 1-3 declarative sentences each.
- Keep entities and terms explicit; avoid pronouns.
- Normalize numbers (e.g., "1,000,000.00", "24%").
- Preserve uncertainty, ranges, and conditional statements exactly.
- Do not add interpretation, synthesis, or analysis.

# TAG SCHEMA:
{tag_schema}

# RAW CONTENT:
{content}
"""


def render_tag_schema(tag_schema: Sequence[TagField]) -> str:
    """YAML listing of the schema as embedded in prompts."""

    return yaml.safe_dump(
        [field.to_yaml_dict() for field in tag_schema],
        sort_keys=False,
        allow_unicode=True,
        width=200,
    ).strip()


def create_processing_prompt(
    raw_content: str,
    domain: str,
    tag_schema: str,
    custom_prompt: Optional[str] = None,
) -> str:
    """Build the single clean/chunk/tag prompt, honouring a per-source override."""

    if custom_prompt:
        return custom_prompt.replace(CONTENT_PLACEHOLDER, raw_content)

    values = {"domain": domain, "tag_schema": tag_schema, "content": raw_content}
    # One pass so substituted text is never re-expanded.
    return _TEMPLATE_FIELD.sub(lambda match: values[match.group(1)], PROCESSING_PROMPT_TEMPLATE)
