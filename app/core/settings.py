from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    function_region: str = Field(
        default="europe-west1",
        validation_alias=AliasChoices("FUNCTION_REGION", "function_region"),
        description="Region the callables are pinned to (reported via X-Function-Region).",
    )

    # LLM integration (OpenAI)
    # The key is a secret: resolved per request, never logged.
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="OpenAI API key (required by generatePanicPlan and dailyCheckIn).",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("OPENAI_MODEL", "openai_model"),
        description="OpenAI model identifier used for every completion.",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
        description="Base URL for OpenAI API (override for proxies/emulators).",
    )
    openai_timeout_seconds: float = Field(
        default=60.0,
        ge=1.0,
        validation_alias=AliasChoices("OPENAI_TIMEOUT_SECONDS", "openai_timeout_seconds"),
        description="Hosting-level request timeout for OpenAI calls (seconds).",
    )

    # Caller authentication (ID tokens issued by the identity provider)
    auth_jwt_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AUTH_JWT_SECRET", "auth_jwt_secret"),
        description="Shared secret used to verify caller ID tokens. Unset means no caller verifies.",
    )
    auth_jwt_algorithms: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["HS256"],
        validation_alias=AliasChoices("AUTH_JWT_ALGORITHMS", "auth_jwt_algorithms"),
        description="Accepted signing algorithms for caller ID tokens. Comma-separated or a JSON list.",
    )
    auth_jwt_audience: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AUTH_JWT_AUDIENCE", "auth_jwt_audience"),
        description="Expected `aud` claim of caller ID tokens (optional).",
    )

    @field_validator("auth_jwt_algorithms", mode="before")
    @classmethod
    def _split_algorithms(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [part.strip() for part in value.split(",") if part.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
