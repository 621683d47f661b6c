from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, status

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut, LLMPingOut
from app.core.llm.deps import get_openai_client
from app.core.llm.openai_client import Message, OpenAIError
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.wellness.router import router as wellness_router

setup_logging()
logger = logging.getLogger("app.health")

_PING_MESSAGES = [
    Message(role="system", content='Reply STRICT JSON: {"pong":true}'),
    Message(role="user", content="ping"),
]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Calm Coach API",
        description=(
            "Backend for the calm companion app: personalized panic plans and daily "
            "check-in triage, generated by an LLM.\n\n"
            "Design principles:\n"
            "- Stateless: every call is validated, proxied to the model and relayed; "
            "nothing is stored.\n"
            "- Callables require an authenticated caller and use the callable envelope "
            "(`{\"data\": ...}` in, `{\"result\": ...}` or `{\"error\": ...}` out).\n"
            "- Logs and metrics carry metadata only, never check-in contents or model output."
        ),
        openapi_tags=[
            {
                "name": "health",
                "description": "Uptime checks and a model-provider round trip.",
            },
            {
                "name": "callables",
                "description": (
                    "generatePanicPlan and dailyCheckIn, plus static crisis resources for "
                    "elevated-severity check-ins."
                ),
            },
            {
                "name": "monitoring",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running. Does not call "
            "the model provider."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    @app.get(
        "/health/llm",
        response_model=LLMPingOut,
        tags=["health"],
        summary="Model provider round trip",
        description="Asks the model for `{\"pong\": true}`. Returns 502 when the provider fails.",
    )
    async def health_llm(openai_client=Depends(get_openai_client)) -> LLMPingOut:
        if openai_client is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="LLM service unavailable"
            )
        try:
            result = await openai_client.complete(
                _PING_MESSAGES, response_format="json_object", temperature=0
            )
        except OpenAIError:
            logger.warning("LLM ping failed", extra={"success": False})
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="LLM service failed"
            ) from None
        return LLMPingOut(status="ok", model=openai_client.model, result=result.unwrap())

    app.include_router(metrics_router)
    app.include_router(wellness_router)
    return app


app = create_app()
