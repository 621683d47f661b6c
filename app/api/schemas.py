from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Health check response."""

    status: str = Field(
        description="Service status indicator. `ok` means the API process is up and responding.",
        examples=["ok"],
    )


class LLMPingOut(BaseModel):
    """Round-trip check against the model provider."""

    status: str = Field(examples=["ok"])
    model: str = Field(examples=["gpt-4o-mini"])
    result: Any = Field(
        description="Model output for the ping prompt (expected `{\"pong\": true}`).",
        examples=[{"pong": True}],
    )
