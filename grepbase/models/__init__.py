from .document import (
    DocumentAdded,
    DocumentDuplicate,
    DocumentRef,
    DocumentSaveError,
    DocumentSaveResult,
    EatInput,
    EatResult,
    RawContent,
    SourceCounts,
    Tags,
)
from .tags import TagField, TagFieldType, TagSchema, TagSchemaResponse

__all__ = [
    "DocumentAdded",
    "DocumentDuplicate",
    "DocumentRef",
    "DocumentSaveError",
    "DocumentSaveResult",
    "EatInput",
    "EatResult",
    "RawContent",
    "SourceCounts",
    "TagField",
    "TagFieldType",
    "TagSchema",
    "TagSchemaResponse",
    "Tags",
]
