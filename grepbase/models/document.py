"""Document ingestion models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DocumentRef = str
"""Relative POSIX path such as ``source/publisher/2025-12/2025-12-06-some-label.md``."""

SUPPORTED_FORMATS = ("text",)

TagValue = Union[str, int, float, bool, date, datetime, List[str], List[int], List[float], List[bool]]
Tags = Dict[str, Any]


class EatInput(BaseModel):
    """A unit of content submitted for ingestion."""

    content: str = Field(..., description="Text body")
    format: str = Field("text", description="Content format; only 'text' is supported")
    label: str = Field(..., min_length=1, description="Human readable title")
    source: str = Field(..., min_length=1, description="Top-level category, e.g. a platform name")
    publisher: Optional[str] = Field(None, description="Optional sub-category")
    id: Optional[str] = Field(None, description="Caller supplied stable identifier")
    creation_date: Optional[datetime] = Field(
        None,
        alias="creationDate",
        description="Creation timestamp; defaults to ingestion time",
    )
    tags: Dict[str, TagValue] = Field(default_factory=dict, description="Free-form caller tags")
    overwrite: bool = Field(False, description="Replace an existing raw file at the same reference")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("label", "source")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("publisher", "id")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class EatResult(BaseModel):
    """Outcome of a synchronous ingestion call."""

    success: bool
    message: str
    ref: Optional[DocumentRef] = None
    duplicate: bool = False


class DocumentAdded(BaseModel):
    type: Literal["added"] = "added"
    ref: DocumentRef


class DocumentDuplicate(BaseModel):
    type: Literal["duplicate"] = "duplicate"
    ref: DocumentRef


class DocumentSaveError(BaseModel):
    type: Literal["error"] = "error"
    message: str


DocumentSaveResult = Union[DocumentAdded, DocumentDuplicate, DocumentSaveError]


@dataclass
class RawContent:
    """Parsed raw record: the YAML header mapping and the body below it."""

    tags: Tags
    content: str


class SourceCounts(BaseModel):
    raw: int = 0
    processed: int = 0

    @property
    def unprocessed(self) -> int:
        return max(self.raw - self.processed, 0)
