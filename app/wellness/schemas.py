from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

Severity = Literal[0, 1, 2, 3]
SuggestedPath = Literal["rescue", "exercise", "journal"]

# Severity at or above this routes the caller to static crisis resources.
ELEVATED_SEVERITY = 2


class MicroExercise(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    duration_sec: int = Field(ge=30, le=90)
    steps: list[str]
    prompt: str | None = None


class ClassificationResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    severity: Severity
    reason: str
    suggested_path: SuggestedPath


class DailyCheckInResult(ClassificationResult):
    """Classification merged with an exercise; the exercise is absent at elevated severity."""

    exercise: MicroExercise | str | None = None


class _StepBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    seconds: int = Field(gt=0)
    text: str | None = None


class BreathingStep(_StepBase):
    type: Literal["breathing"]
    pattern: str


class GroundingStep(_StepBase):
    type: Literal["grounding"]
    method: str


class MuscleReleaseStep(_StepBase):
    type: Literal["muscle_release"]
    area: str


class AffirmationStep(_StepBase):
    type: Literal["affirmation"]
    text: str


PlanStep = Annotated[
    BreathingStep | GroundingStep | MuscleReleaseStep | AffirmationStep,
    Field(discriminator="type"),
]


class GeneratedPlan(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: str | int
    title: str
    steps: list[PlanStep] = Field(min_length=1)


class PanicPlanOut(BaseModel):
    """Documented success envelope. The model output is relayed as-is and may be a bare string."""

    result: GeneratedPlan | str


class DailyCheckInOut(BaseModel):
    result: DailyCheckInResult


class CrisisResources(BaseModel):
    country_code: str
    emergency_number: str
    crisis_hotline: str
    helpline_directory_url: str
    message: str


class CallableErrorBody(BaseModel):
    status: str = Field(examples=["UNAUTHENTICATED"])
    message: str
    details: Any = None


class CallableErrorOut(BaseModel):
    error: CallableErrorBody


def plan_conforms(value: Any) -> bool:
    """
    Report whether a relayed plan matches the expected plan shape.

    Observational only: a non-conforming plan is still returned to the caller unchanged.
    """

    try:
        GeneratedPlan.model_validate(value)
    except ValidationError:
        return False
    return True


def read_severity(classification: Any) -> int | None:
    """Integer severity of a classification object, or None when it has none."""

    if not isinstance(classification, dict):
        return None
    severity = classification.get("severity")
    if isinstance(severity, bool):
        return None
    if isinstance(severity, int):
        return severity
    if isinstance(severity, float) and severity.is_integer():
        return int(severity)
    if isinstance(severity, str):
        try:
            return int(severity.strip())
        except ValueError:
            return None
    return None
