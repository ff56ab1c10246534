"""Per-user content entries."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel


class ContentEntry(BaseModel):
    id: str
    content: Any


ContentFilter = Callable[[ContentEntry], bool]


def match_all(entry: ContentEntry) -> bool:
    return True


def valid_content(content: object) -> bool:
    """Structured payloads only: mappings, non-string sequences or pydantic models."""

    if isinstance(content, (str, bytes, bytearray)):
        return False
    return isinstance(content, (Mapping, Sequence, BaseModel))


__all__ = ["ContentEntry", "ContentFilter", "match_all", "valid_content"]
