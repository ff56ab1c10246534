"""In-memory todo list service with session-gated content storage."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
