"""Tag schema data models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TagFieldType(str, Enum):
    """Data types a tag field may carry."""

    STRING = "string"
    STRING_ARRAY = "string[]"
    NUMBER = "number"
    NUMBER_ARRAY = "number[]"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ENUM_ARRAY = "enum[]"
    DATE = "date"

    @property
    def is_array(self) -> bool:
        return self.value.endswith("[]")

    @property
    def is_enum(self) -> bool:
        return self in (TagFieldType.ENUM, TagFieldType.ENUM_ARRAY)


class TagField(BaseModel):
    """A single field the enrichment step may emit beneath a section heading."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    name: str = Field(..., min_length=1, description="Tag field name in snake_case")
    type: TagFieldType = Field(..., description="Field data type")
    description: str = Field("", description="Purpose and usage of this tag field")
    enum_values: Optional[List[str]] = Field(
        None,
        alias="enumValues",
        description="Full list of enum values for enum types",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tag field name must not be blank")
        return v

    @model_validator(mode="after")
    def check_enum_values(self) -> "TagField":
        if self.type.is_enum and not self.enum_values:
            raise ValueError(f"tag field '{self.name}' of type {self.type.value} requires enum_values")
        return self

    def to_yaml_dict(self) -> dict:
        """Plain mapping used for the on-disk schema and for prompts."""

        data = {"name": self.name, "type": self.type.value, "description": self.description}
        if self.enum_values:
            data["enumValues"] = list(self.enum_values)
        return data


TagSchema = List[TagField]


class TagSchemaResponse(BaseModel):
    """Shape expected back from the one-shot schema generation call."""

    tag_fields: List[TagField] = Field(..., min_length=1)
