"""Resolution and persistence of the tag schema file."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Sequence

import yaml
from pydantic import TypeAdapter, ValidationError

from grepbase.core.exceptions import TagSchemaError
from grepbase.models import TagField, TagSchema
from grepbase.tag_schema.generate import generate_tag_schema
from grepbase.utils.llm import CompletionModel

logger = logging.getLogger(__name__)

TAG_SCHEMA_FILENAME = "tag-schema.yaml"

_schema_adapter = TypeAdapter(TagSchema)


def get_tag_schema_path(base_dir: str | os.PathLike[str]) -> Path:
    return Path(base_dir) / TAG_SCHEMA_FILENAME


def dump_tag_schema(tag_schema: Sequence[TagField]) -> str:
    return yaml.safe_dump([field.to_yaml_dict() for field in tag_schema], sort_keys=False, allow_unicode=True)


def load_tag_schema(path: Path) -> TagSchema:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        return _schema_adapter.validate_python(data or [])
    except (yaml.YAMLError, ValidationError) as exc:
        raise TagSchemaError("tag_schema_invalid", f"Invalid tag schema file '{path}'", {"reason": str(exc)}) from exc


def persist_tag_schema(path: Path, tag_schema: Sequence[TagField]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_tag_schema(tag_schema), encoding="utf-8")


async def initialize_tag_schema(
    base_dir: str | os.PathLike[str],
    model: Optional[CompletionModel],
    topic: str,
    tag_schema: Optional[Sequence[TagField]] = None,
    *,
    override: bool = False,
) -> TagSchema:
    """
    Resolve the schema the workers will tag against.

    Precedence: the schema on disk, unless ``override`` is set; then the supplied
    schema (persisted); then a freshly generated one (persisted). With ``override``
    and no supplied schema the on-disk file is regenerated. The pool cannot start
    without one of these.
    """

    path = get_tag_schema_path(base_dir)
    exists = await asyncio.to_thread(path.is_file)

    if exists and not override:
        logger.info("Loading tag schema from %s", path)
        return await asyncio.to_thread(load_tag_schema, path)

    if tag_schema:
        schema = list(tag_schema)
        await asyncio.to_thread(persist_tag_schema, path, schema)
        return schema

    if model is None:
        raise TagSchemaError("tag_schema_missing", "No tag schema on disk or supplied, and no model to generate one")

    schema = await generate_tag_schema(topic, model)
    await asyncio.to_thread(persist_tag_schema, path, schema)
    return schema
