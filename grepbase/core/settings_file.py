"""Per-store configuration file recording how a base directory was set up."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from grepbase.models import TagField

CONFIG_DIR_NAME = ".grepbase"
CONFIG_FILENAME = "config.yaml"


class StoreConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain: str
    tag_schema: List[TagField] = Field(default_factory=list, alias="tagSchema")
    custom_processing_prompts: Dict[str, str] = Field(default_factory=dict, alias="customProcessingPrompts")


def get_config_path(base_dir: str | os.PathLike[str]) -> Path:
    return Path(base_dir) / CONFIG_DIR_NAME / CONFIG_FILENAME


async def write_config(base_dir: str | os.PathLike[str], config: StoreConfig) -> Path:
    path = get_config_path(base_dir)
    data = {
        "domain": config.domain,
        "tagSchema": [field.to_yaml_dict() for field in config.tag_schema],
    }
    if config.custom_processing_prompts:
        data["customProcessingPrompts"] = dict(config.custom_processing_prompts)

    def write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")

    await asyncio.to_thread(write)
    return path


async def read_config(base_dir: str | os.PathLike[str]) -> Optional[StoreConfig]:
    path = get_config_path(base_dir)
    if not await asyncio.to_thread(path.is_file):
        return None
    text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    return StoreConfig.model_validate(yaml.safe_load(text) or {})
