from __future__ import annotations

from app.core.llm.openai_client import OpenAIClient, OpenAIConfig
from app.core.settings import get_settings


def get_openai_client() -> OpenAIClient | None:
    """
    Dependency provider for OpenAIClient.

    The API key is resolved per request. Returns None when it is not configured
    so callables can still reject unauthenticated/invalid calls first and only
    then fail with a safe 502.
    """

    settings = get_settings()
    if not settings.openai_api_key:
        return None

    config = OpenAIConfig(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model,
        timeout_seconds=float(settings.openai_timeout_seconds),
    )
    return OpenAIClient(config=config)
