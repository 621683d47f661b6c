from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from app.core.llm.openai_client import Message

DEFAULT_PLAN_SECONDS = 120

# Intake `duration` labels offered by the client, mapped to total plan seconds.
_DURATION_SECONDS = {
    "short": 90,  # 60-90s
    "medium": 150,  # 2-3 min
    "long": 270,  # 4-5 min
}

CLASSIFY_SYSTEM_PROMPT = "\n".join(
    [
        "Classify {mood,tags,note} for mental-distress triage. Output STRICT JSON:",
        '{ "severity": 0|1|2|3, "reason": "string", "suggested_path": "rescue|exercise|journal" }.',
        "3 = imminent risk; 2 = concerning; 1 = mild; 0 = none. No advice here.",
    ]
)

EXERCISE_SYSTEM_PROMPT = "\n".join(
    [
        "Generate ONE 30–90s micro-exercise as STRICT JSON:",
        '{ "title": string, "duration_sec": number, "steps": [string], "prompt"?: string }.',
        "Match to mood/tags. Keep it practical, non-clinical, no medical advice. JSON only.",
    ]
)


def resolve_plan_duration(intake: Mapping[str, Any]) -> int:
    """Total plan length in seconds requested by the intake `duration` field."""

    duration = intake.get("duration")
    if isinstance(duration, bool):
        return DEFAULT_PLAN_SECONDS
    if isinstance(duration, str):
        return _DURATION_SECONDS.get(duration, DEFAULT_PLAN_SECONDS)
    if isinstance(duration, float) and not math.isfinite(duration):
        return DEFAULT_PLAN_SECONDS
    if isinstance(duration, (int, float)):
        return int(duration)
    return DEFAULT_PLAN_SECONDS


def build_panic_plan_system_prompt(*, total_seconds: int) -> str:
    """
    Default system prompt for panic plan generation.

    Constraints encoded here:
    - JSON-only output in the plan shape.
    - A fixed total duration, 3-6 steps.
    - Only the four allowed step kinds, each with its own attributes.
    - No diagnosis, medication or other clinical content.
    """

    minutes = round(total_seconds / 60)
    return "\n".join(
        [
            "You are a calm, non-clinical coach helping someone through a panic moment.",
            "Generate a personalized, step-by-step plan using evidence-based self-help "
            "techniques (paced breathing, grounding, muscle release, affirmations).",
            "",
            "REQUIREMENTS:",
            f"- Total duration must be exactly {total_seconds} seconds ({minutes} minutes).",
            "- Create 3-6 specific, actionable steps; every step has a duration in seconds.",
            "- Personalize based on the user's triggers, symptoms, preferences and context.",
            "- Do NOT diagnose, mention medication, or give medical or clinical advice.",
            "",
            "OUTPUT FORMAT (STRICT JSON, nothing else):",
            "{",
            '  "version": "1.0",',
            '  "title": "Personalized [Context] Plan",',
            f'  "total_seconds": {total_seconds},',
            '  "personalizedPhrase": "string",',
            '  "steps": [ ... ]',
            "}",
            "",
            "ALLOWED STEPS (no other types):",
            '- breathing {"type": "breathing", "pattern": "box|478|coherence|diaphragmatic", '
            '"text": string, "seconds": number}',
            '- grounding {"type": "grounding", "method": "54321|countback|sensory|temperature", '
            '"text": string, "seconds": number}',
            '- muscle_release {"type": "muscle_release", "area": "shoulders|jaw|hands|neck", '
            '"text": string, "seconds": number}',
            '- affirmation {"type": "affirmation", "text": string, "seconds": number}',
            "",
            "For breathing instructions always write units after numbers "
            '(e.g. "in 4 seconds • hold 4 seconds • out 4 seconds").',
            "If the user provides a personalizedPhrase, use it exactly. Otherwise write a "
            "gentle, reassuring one based on their context.",
        ]
    )


def compose_panic_plan_messages(*, intake: Any, system_prompt: str | None = None) -> list[Message]:
    """Build (system, user) turns for a panic plan. A caller-supplied system prompt replaces the default.

    The intake is opaque: any JSON value is serialized as-is, `None` becomes `{}`.
    """

    if intake is None:
        intake = {}
    system = system_prompt
    if system is None:
        total_seconds = (
            resolve_plan_duration(intake) if isinstance(intake, Mapping) else DEFAULT_PLAN_SECONDS
        )
        system = build_panic_plan_system_prompt(total_seconds=total_seconds)
    return [
        Message(role="system", content=system),
        Message(role="user", content=json.dumps(intake, ensure_ascii=False)),
    ]


def compose_classification_messages(*, checkin: Mapping[str, Any]) -> list[Message]:
    return [
        Message(role="system", content=CLASSIFY_SYSTEM_PROMPT),
        Message(role="user", content=json.dumps(checkin, ensure_ascii=False)),
    ]


def compose_exercise_messages(*, checkin: Mapping[str, Any]) -> list[Message]:
    return [
        Message(role="system", content=EXERCISE_SYSTEM_PROMPT),
        Message(role="user", content=json.dumps(checkin, ensure_ascii=False)),
    ]
