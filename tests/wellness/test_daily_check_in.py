from __future__ import annotations

import json

import pytest

from app.core.llm.openai_client import JsonValue, OpenAIUpstreamError, PlainText
from tests.wellness._helpers import FakeLLMClient, auth_headers, callable_client, post_checkin

CHECKIN = {"mood": 4, "tags": ["tired", "overwhelmed"], "note": "slept 4h"}
EXERCISE = {
    "title": "Shoulder drop",
    "duration_sec": 60,
    "steps": ["Lift your shoulders", "Let them fall", "Repeat three times"],
}


def _classification(severity: int) -> dict:
    return {"severity": severity, "reason": "stub", "suggested_path": "exercise"}


@pytest.mark.parametrize("severity", [0, 1])
def test_low_severity_adds_exercise(severity: int) -> None:
    fake = FakeLLMClient(JsonValue(_classification(severity)), JsonValue(EXERCISE))
    with callable_client(fake) as client:
        res = post_checkin(client, CHECKIN)

    assert res.status_code == 200, res.text
    assert res.json() == {"result": {**_classification(severity), "exercise": EXERCISE}}

    assert len(fake.calls) == 2
    classify, exercise = fake.calls
    assert classify["temperature"] == 0.1
    assert exercise["temperature"] == 0.3
    assert json.loads(classify["messages"][1].content) == CHECKIN
    assert "severity" in classify["messages"][0].content
    assert "micro-exercise" in exercise["messages"][0].content


@pytest.mark.parametrize("severity", [2, 3])
def test_elevated_severity_returns_classification_only(severity: int) -> None:
    classification = {"severity": severity, "reason": "stub", "suggested_path": "rescue"}
    fake = FakeLLMClient(JsonValue(classification))
    with callable_client(fake) as client:
        res = post_checkin(client, CHECKIN)

    assert res.status_code == 200
    assert res.json() == {"result": classification}
    assert "exercise" not in res.json()["result"]
    assert len(fake.calls) == 1


def test_plain_text_exercise_is_relayed_as_string() -> None:
    fake = FakeLLMClient(JsonValue(_classification(1)), PlainText("Take three slow breaths."))
    with callable_client(fake) as client:
        res = post_checkin(client, CHECKIN)

    assert res.status_code == 200
    assert res.json()["result"]["exercise"] == "Take three slow breaths."


def test_unauthenticated_call_is_rejected_before_llm_call() -> None:
    fake = FakeLLMClient(JsonValue(_classification(0)))
    with callable_client(fake) as client:
        res = client.post("/dailyCheckIn", json={"data": {"checkin": CHECKIN}})

    assert res.status_code == 401
    assert res.json()["error"]["status"] == "UNAUTHENTICATED"
    assert fake.calls == []


@pytest.mark.parametrize(
    "body",
    [None, {}, {"data": {}}, {"data": {"checkin": None}}, {"data": {"checkin": "mood=3"}}],
)
def test_missing_checkin_is_invalid_argument(body) -> None:
    fake = FakeLLMClient(JsonValue(_classification(0)))
    with callable_client(fake) as client:
        res = client.post("/dailyCheckIn", json=body, headers=auth_headers())

    assert res.status_code == 400
    assert res.json()["error"] == {
        "status": "INVALID_ARGUMENT",
        "message": "Expected data.checkin to be an object.",
    }
    assert fake.calls == []


def test_missing_auth_wins_over_missing_checkin() -> None:
    fake = FakeLLMClient()
    with callable_client(fake) as client:
        res = client.post("/dailyCheckIn", json={"data": {}})

    assert res.status_code == 401


def test_extra_checkin_fields_pass_through() -> None:
    checkin = {**CHECKIN, "energy": "low"}
    fake = FakeLLMClient(JsonValue(_classification(2)))
    with callable_client(fake) as client:
        res = post_checkin(client, checkin)

    assert res.status_code == 200
    assert json.loads(fake.calls[0]["messages"][1].content) == checkin


def test_classification_without_severity_fails() -> None:
    fake = FakeLLMClient(PlainText("all good"))
    with callable_client(fake) as client:
        res = post_checkin(client, CHECKIN)

    assert res.status_code == 502
    assert res.json()["error"]["message"] == "dailyCheckIn failed"
    assert len(fake.calls) == 1


def test_non_numeric_severity_string_fails() -> None:
    fake = FakeLLMClient(JsonValue({"severity": "\u00b2", "reason": "r", "suggested_path": "journal"}))
    with callable_client(fake) as client:
        res = post_checkin(client, CHECKIN)

    assert res.status_code == 502
    assert res.json()["error"]["message"] == "dailyCheckIn failed"
    assert len(fake.calls) == 1


def test_exercise_failure_aborts_whole_call() -> None:
    fake = FakeLLMClient(
        JsonValue(_classification(0)),
        OpenAIUpstreamError("OpenAI 503: overloaded", status_code=503, body="overloaded"),
    )
    with callable_client(fake) as client:
        res = post_checkin(client, CHECKIN)

    assert res.status_code == 502
    error = res.json()["error"]
    assert error["status"] == "INTERNAL"
    assert "503" in error["details"]
    assert "result" not in res.json()
