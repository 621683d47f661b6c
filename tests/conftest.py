from __future__ import annotations

import os

import pytest

from tests.wellness._helpers import TEST_JWT_SECRET


@pytest.fixture(autouse=True)
def _test_settings() -> None:
    os.environ["AUTH_JWT_SECRET"] = TEST_JWT_SECRET
    # No real provider calls from tests; routes get a fake client via dependency overrides.
    os.environ.pop("OPENAI_API_KEY", None)
    # Settings are cached via @lru_cache; clear so each test sees its own environment.
    from app.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from app.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
