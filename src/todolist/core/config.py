from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, Sequence

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .. import __version__ as package_version

REPOSITORY_ROOT = Path(__file__).resolve().parents[3]

EnvironmentName = Literal["development", "test", "ci"]

_ENVIRONMENT_ALIASES: dict[str, EnvironmentName] = {
    "development": "development",
    "dev": "development",
    "local": "development",
    "test": "test",
    "testing": "test",
    "ci": "ci",
}

_ENVIRONMENT_PROFILES: dict[EnvironmentName, dict[str, Any]] = {
    "development": {
        "log_level": "DEBUG",
        "reload": True,
        "session_https_only": False,
    },
    "test": {
        "log_level": "WARNING",
        "reload": False,
        "session_https_only": False,
        "crypt_rounds": 1000,
    },
    "ci": {
        "log_level": "INFO",
        "reload": False,
        "crypt_rounds": 1000,
    },
}


class Settings(BaseSettings):
    """Runtime configuration for the todo list service."""

    model_config = SettingsConfigDict(
        env_prefix="TODOLIST_",
        env_file=(REPOSITORY_ROOT / ".env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Todo List Service"
    environment: EnvironmentName = "development"
    api_prefix: str = "/api"
    version: str = package_version
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    app_host: str = "0.0.0.0"
    app_port: int = 3001
    log_level: str = "INFO"
    reload: bool = True

    session_secret_key: str = "change-me-session"
    session_cookie_name: str = "todolist_session"
    session_max_age: int | None = 60 * 60 * 24 * 14
    session_https_only: bool = True
    session_same_site: str = "lax"
    # Server-side session lifetime; ``None`` or 0 keeps sessions open forever.
    session_timeout_ms: int | None = 30 * 60 * 1000

    crypt_algorithm: str = "sha512"
    crypt_length: int = 64
    crypt_method: str = "pbkdf2"
    crypt_rounds: int = 200_000
    crypt_salt_length: int | None = None

    @field_validator("environment", mode="before")
    @classmethod
    def _normalise_environment(cls, value: object) -> EnvironmentName:
        normalized = value.strip().lower() if isinstance(value, str) else ""
        return _ENVIRONMENT_ALIASES.get(normalized or "development", "development")

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _coerce_comma_separated(cls, value: object) -> list[str]:
        """Allow comma separated strings for CORS configuration."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Sequence):
            return [str(item) for item in value if str(item).strip()]
        return []

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        if not isinstance(value, str):
            return "INFO"
        return value.upper()

    @field_validator("session_same_site", mode="before")
    @classmethod
    def _normalize_same_site(cls, value: object) -> str:
        if not isinstance(value, str):
            return "lax"
        normalized = value.lower()
        if normalized not in {"lax", "strict", "none"}:
            return "lax"
        return normalized

    @field_validator("session_timeout_ms", mode="before")
    @classmethod
    def _normalise_session_timeout(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in {"", "none", "never"}:
            return None
        return value

    @model_validator(mode="after")
    def _apply_environment_profile(self) -> "Settings":
        profile = _ENVIRONMENT_PROFILES[self.environment]
        fields_set = set(getattr(self, "model_fields_set", set()))
        for field_name, value in profile.items():
            if field_name not in fields_set:
                setattr(self, field_name, value)
        return self

    @property
    def crypt_options(self) -> dict[str, Any]:
        """Crypt options in the shape accepted by ``check_crypt_options``."""

        options: dict[str, Any] = {
            "algorithm": self.crypt_algorithm,
            "length": self.crypt_length,
            "method": self.crypt_method,
            "rounds": self.crypt_rounds,
        }
        if self.crypt_salt_length is not None:
            options["salt_length"] = self.crypt_salt_length
        return options


@lru_cache()
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    return Settings()


__all__ = ["EnvironmentName", "Settings", "get_settings"]
