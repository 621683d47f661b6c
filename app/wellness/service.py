from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from app.core.auth import Caller
from app.core.llm.openai_client import (
    CompletionResult,
    JsonValue,
    Message,
    OpenAIError,
    OpenAIUnavailableError,
    OpenAIUpstreamError,
    ResponseFormat,
)
from app.core.metrics import checkin_severity_total, llm_requests_total, panic_plan_shape_total
from app.wellness.prompts import (
    compose_classification_messages,
    compose_exercise_messages,
    compose_panic_plan_messages,
)
from app.wellness.schemas import ELEVATED_SEVERITY, plan_conforms, read_severity
from app.wellness.validation import require_caller, require_checkin

PANIC_PLAN_TEMPERATURE = 0.2
CLASSIFY_TEMPERATURE = 0.1
EXERCISE_TEMPERATURE = 0.3


class LLMClient(Protocol):
    async def complete(
        self,
        messages: list[Message],
        *,
        response_format: ResponseFormat = "json_object",
        temperature: float = 0.3,
        model: str | None = None,
    ) -> CompletionResult: ...


@dataclass(frozen=True)
class CallableOutcome:
    """Value relayed to the caller plus metadata for logs (never the value itself)."""

    result: Any
    llm_calls: int
    severity: int | None = None


class WellnessService:
    """
    Orchestrates the two callables.

    Each invocation is stateless: validate, compose, call the model once (or twice,
    sequentially, for a low-severity check-in) and relay. Failures abort the whole
    invocation; nothing is retried or synthesized locally. A classification without a
    numeric severity (plain text included) is treated as an upstream failure rather
    than relayed, since the exercise branch depends on it.
    """

    def __init__(self, *, llm_client: LLMClient | None):
        self._llm = llm_client

    async def _complete(
        self, *, operation: str, messages: list[Message], temperature: float
    ) -> CompletionResult:
        if self._llm is None:
            llm_requests_total.labels(operation=operation, outcome="unavailable").inc()
            raise OpenAIUnavailableError("LLM service unavailable")
        try:
            result = await self._llm.complete(
                messages, response_format="json_object", temperature=temperature
            )
        except OpenAIError:
            llm_requests_total.labels(operation=operation, outcome="error").inc()
            raise
        llm_requests_total.labels(operation=operation, outcome="ok").inc()
        return result

    async def generate_panic_plan(
        self, *, caller: Caller | None, data: Mapping[str, Any]
    ) -> CallableOutcome:
        require_caller(caller)

        system_prompt = data.get("systemPrompt")
        messages = compose_panic_plan_messages(
            intake=data.get("intake"),
            system_prompt=system_prompt if isinstance(system_prompt, str) else None,
        )
        result = await self._complete(
            operation="panic_plan", messages=messages, temperature=PANIC_PLAN_TEMPERATURE
        )

        plan = result.unwrap()
        panic_plan_shape_total.labels(conforms=str(plan_conforms(plan)).lower()).inc()
        return CallableOutcome(result=plan, llm_calls=1)

    async def daily_check_in(
        self, *, caller: Caller | None, data: Mapping[str, Any]
    ) -> CallableOutcome:
        require_caller(caller)
        checkin = require_checkin(data)

        classified = await self._complete(
            operation="classify",
            messages=compose_classification_messages(checkin=checkin),
            temperature=CLASSIFY_TEMPERATURE,
        )
        classification = classified.unwrap() if isinstance(classified, JsonValue) else None
        severity = read_severity(classification)
        if severity is None:
            raise OpenAIUpstreamError(
                "Classification was not a JSON object with a numeric severity"
            )
        checkin_severity_total.labels(severity=str(severity)).inc()

        if severity >= ELEVATED_SEVERITY:
            # Elevated risk: the client routes to static crisis resources, not a generated activity.
            return CallableOutcome(result=classification, llm_calls=1, severity=severity)

        exercise = await self._complete(
            operation="exercise",
            messages=compose_exercise_messages(checkin=checkin),
            temperature=EXERCISE_TEMPERATURE,
        )
        return CallableOutcome(
            result={**classification, "exercise": exercise.unwrap()},
            llm_calls=2,
            severity=severity,
        )
