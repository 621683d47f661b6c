from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request

from app.core.auth import Caller, get_caller, observe_app_check
from app.core.llm.deps import get_openai_client
from app.core.llm.openai_client import OpenAIError
from app.domain.exceptions import CallableError, InternalError
from app.wellness.crisis import crisis_resources
from app.wellness.schemas import (
    CallableErrorOut,
    CrisisResources,
    DailyCheckInOut,
    PanicPlanOut,
)
from app.wellness.service import CallableOutcome, WellnessService

router = APIRouter(tags=["callables"])
logger = logging.getLogger("app.wellness")

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": CallableErrorOut, "description": "INVALID_ARGUMENT"},
    401: {"model": CallableErrorOut, "description": "UNAUTHENTICATED"},
    502: {"model": CallableErrorOut, "description": "INTERNAL (model provider failed)"},
}


def _callable_data(payload: Any) -> Mapping[str, Any]:
    """Unwrap `{"data": {...}}`. A missing body, missing data or non-object data reads as `{}`."""

    if not isinstance(payload, Mapping):
        return {}
    data = payload.get("data")
    if not isinstance(data, Mapping):
        return {}
    return data


async def _invoke(
    *,
    operation: str,
    failure_message: str,
    request: Request,
    run: Callable[[], Awaitable[CallableOutcome]],
) -> dict[str, Any]:
    request_id = getattr(request.state, "request_id", None)
    observe_app_check(request, operation=operation)

    try:
        outcome = await run()
    except CallableError as exc:
        logger.info(
            "Callable rejected",
            extra={
                "request_id": request_id,
                "operation": operation,
                "error": exc.status,
                "success": False,
            },
        )
        raise
    except OpenAIError as exc:
        logger.info(
            "Callable failed",
            extra={
                "request_id": request_id,
                "operation": operation,
                "error": type(exc).__name__,
                "success": False,
            },
        )
        raise InternalError(failure_message, details=str(exc)) from exc

    logger.info(
        "Callable completed",
        extra={
            "request_id": request_id,
            "operation": operation,
            "llm_calls": outcome.llm_calls,
            "severity": outcome.severity,
            "success": True,
        },
    )
    return {"result": outcome.result}


@router.post(
    "/generatePanicPlan",
    response_model=None,
    responses={200: {"model": PanicPlanOut}, **_ERROR_RESPONSES},
    summary="Generate a personalized panic plan",
)
async def generate_panic_plan(
    request: Request,
    payload: Any = Body(default=None),
    caller: Caller | None = Depends(get_caller),
    openai_client=Depends(get_openai_client),
) -> dict[str, Any]:
    """
    Callable body: `{"data": {"intake"?: object, "systemPrompt"?: string}}`.

    The model output is returned unchanged under `result`. A caller-supplied
    `systemPrompt` fully replaces the default behaviour constraints.
    """

    svc = WellnessService(llm_client=openai_client)
    data = _callable_data(payload)
    return await _invoke(
        operation="generatePanicPlan",
        failure_message="OpenAI call failed",
        request=request,
        run=lambda: svc.generate_panic_plan(caller=caller, data=data),
    )


@router.post(
    "/dailyCheckIn",
    response_model=None,
    responses={200: {"model": DailyCheckInOut}, **_ERROR_RESPONSES},
    summary="Classify a daily check-in and suggest a micro-exercise",
)
async def daily_check_in(
    request: Request,
    payload: Any = Body(default=None),
    caller: Caller | None = Depends(get_caller),
    openai_client=Depends(get_openai_client),
) -> dict[str, Any]:
    """
    Callable body: `{"data": {"checkin": {"mood": number, "tags": [string], "note"?: string}}}`.

    Severity 2 or 3 returns the classification alone; lower severities add an `exercise`.
    """

    svc = WellnessService(llm_client=openai_client)
    data = _callable_data(payload)
    return await _invoke(
        operation="dailyCheckIn",
        failure_message="dailyCheckIn failed",
        request=request,
        run=lambda: svc.daily_check_in(caller=caller, data=data),
    )


@router.get(
    "/crisisResources",
    response_model=CrisisResources,
    summary="Static crisis resources for a locale",
)
async def get_crisis_resources(
    locale: str | None = Query(default=None, max_length=35, examples=["en-US"]),
) -> CrisisResources:
    """Public, static information; the client shows this instead of an exercise at elevated severity."""

    return crisis_resources(locale)
