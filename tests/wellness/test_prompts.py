from __future__ import annotations

import json

import pytest

from app.wellness.prompts import (
    CLASSIFY_SYSTEM_PROMPT,
    DEFAULT_PLAN_SECONDS,
    build_panic_plan_system_prompt,
    compose_classification_messages,
    compose_panic_plan_messages,
    resolve_plan_duration,
)


@pytest.mark.parametrize(
    ("intake", "expected"),
    [
        ({"duration": "short"}, 90),
        ({"duration": "medium"}, 150),
        ({"duration": "long"}, 270),
        ({"duration": "forever"}, DEFAULT_PLAN_SECONDS),
        ({"duration": 200}, 200),
        ({"duration": True}, DEFAULT_PLAN_SECONDS),
        ({"duration": float("inf")}, DEFAULT_PLAN_SECONDS),
        ({"duration": float("nan")}, DEFAULT_PLAN_SECONDS),
        ({}, DEFAULT_PLAN_SECONDS),
    ],
)
def test_resolve_plan_duration(intake: dict, expected: int) -> None:
    assert resolve_plan_duration(intake) == expected


def test_default_system_prompt_constrains_output() -> None:
    prompt = build_panic_plan_system_prompt(total_seconds=150)

    assert "150 seconds" in prompt
    assert "STRICT JSON" in prompt
    for kind in ("breathing", "grounding", "muscle_release", "affirmation"):
        assert kind in prompt
    assert "diagnose" in prompt


def test_non_object_intake_is_serialized_with_default_duration() -> None:
    system, user = compose_panic_plan_messages(intake=["crowds"])

    assert f"{DEFAULT_PLAN_SECONDS} seconds" in system.content
    assert json.loads(user.content) == ["crowds"]


def test_classification_turns_are_fixed_system_and_serialized_checkin() -> None:
    checkin = {"mood": 2, "tags": ["anxious"], "note": "café was loud"}
    system, user = compose_classification_messages(checkin=checkin)

    assert system.content == CLASSIFY_SYSTEM_PROMPT
    # Non-ASCII notes are kept readable for the model.
    assert "café" in user.content
    assert json.loads(user.content) == checkin
