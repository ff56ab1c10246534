"""Domain service layer package."""

from __future__ import annotations

from .api import ApiService, create_api_service
from .content import ContentStore
from .identity import IdentityStore
from .providers import IdentityProvider, InMemoryIdentityProvider

__all__ = [
    "ApiService",
    "ContentStore",
    "IdentityProvider",
    "IdentityStore",
    "InMemoryIdentityProvider",
    "create_api_service",
]
