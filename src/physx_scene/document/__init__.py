"""Document scanning: scalar fields and the id index."""

from .indexer import (
    IndexEntry,
    SceneIndex,
    find_field,
    index_document,
    is_class_tag,
)
from .scalars import element_text, parse_id, parse_scalars

__all__ = [
    "IndexEntry",
    "SceneIndex",
    "find_field",
    "index_document",
    "is_class_tag",
    "element_text",
    "parse_id",
    "parse_scalars",
]
