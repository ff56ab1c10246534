"""Payloads served outside the todo resources: metadata, heartbeat and errors."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class ServiceMetadata(BaseModel):
    name: str
    environment: str
    version: str
    api_prefix: str


class HealthStatus(BaseModel):
    status: Literal["ok"] = "ok"


class ErrorEnvelope(BaseModel):
    """Body of every error response.

    ``details`` always carries the ``request_id`` when one is bound, plus any
    structured context of the failure (``parameter_name``, ``status_message``).
    """

    code: str
    message: str
    details: Any | None = None
