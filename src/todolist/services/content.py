"""Per-user todo content gated by session validity."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from ..errors import BadRequestException, NotFoundException
from ..models import ContentEntry, unique_id
from ..models.content import ContentFilter, match_all, valid_content
from .identity import IdentityStore

logger = logging.getLogger(__name__)


def _entries(source: Mapping[str, Any] | Iterable[Any]) -> list[ContentEntry]:
    if isinstance(source, Mapping):
        return [ContentEntry(id=key, content=value) for key, value in source.items()]
    return [ContentEntry.model_validate(entry) for entry in source]


class ContentStore:
    """Ordered content entries per owner.

    Content identifiers are unique within one owner's entries only; every
    lookup is keyed by the owner first.
    """

    def __init__(
        self,
        identity: IdentityStore,
        *,
        content: Mapping[str, Mapping[str, Any] | Iterable[Any]] | None = None,
    ) -> None:
        self._identity = identity
        self._content: dict[str, list[ContentEntry]] = {
            owner: _entries(entries) for owner, entries in (content or {}).items()
        }

    async def create_content(self, user_id: str, content: Any) -> str:
        if not self._identity.has_user(user_id):
            raise BadRequestException("Unknown content owner")
        if not valid_content(content):
            raise BadRequestException("Invalid content")
        entries = self._content.setdefault(user_id, [])
        content_id = unique_id({entry.id for entry in entries})
        entries.append(ContentEntry(id=content_id, content=content))
        logger.info("Content created", extra={"user_id": user_id, "content_id": content_id})
        return content_id

    async def get_contents(self, user_id: str, filter: ContentFilter = match_all) -> list[ContentEntry]:
        return [entry.model_copy() for entry in self._content.get(user_id, ()) if filter(entry)]

    async def get_content(self, user_id: str, content_id: str) -> ContentEntry:
        for entry in self._content.get(user_id, ()):
            if entry.id == content_id:
                return entry.model_copy()
        raise NotFoundException("The resource does not exist")

    async def get_available_content(self, session_id: str, user_id: str, content_id: str) -> Any:
        """Return the content ``content_id`` of ``user_id`` through an active session."""

        self._identity.check_active_session(session_id, user_id)
        entry = await self.get_content(user_id, content_id)
        return entry.content


__all__ = ["ContentStore"]
