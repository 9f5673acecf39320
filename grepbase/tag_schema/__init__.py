"""Tag schema resolution."""

from .generate import generate_tag_schema, parse_tag_schema_response
from .initialize import TAG_SCHEMA_FILENAME, initialize_tag_schema, load_tag_schema

__all__ = [
    "TAG_SCHEMA_FILENAME",
    "generate_tag_schema",
    "initialize_tag_schema",
    "load_tag_schema",
    "parse_tag_schema_response",
]
