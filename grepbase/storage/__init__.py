"""File-system-as-database storage layer."""

from .file_storage import PROCESSED_DIR_NAME, RAW_DIR_NAME, FileStorage
from .references import derive_document_ref, sanitize

__all__ = [
    "FileStorage",
    "PROCESSED_DIR_NAME",
    "RAW_DIR_NAME",
    "derive_document_ref",
    "sanitize",
]
