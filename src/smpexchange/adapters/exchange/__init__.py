"""JSON exchange document adapter."""

from __future__ import annotations

from .document import (
    DocumentError,
    document_to_payload,
    dump_document,
    load_document,
    parse_document,
)
from .translator import PydanticElementTranslator

__all__ = [
    "DocumentError",
    "PydanticElementTranslator",
    "document_to_payload",
    "dump_document",
    "load_document",
    "parse_document",
]
