from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend.app import app
from backend.dependencies import get_model, get_store
from backend.recommendations.models import MenuItem
from backend.tests.fakes import SAMPLE_MENU, ScriptedModel


@pytest.fixture
def menu() -> list[MenuItem]:
    return [MenuItem.model_validate(r) for r in SAMPLE_MENU]


@pytest.fixture
def api():
    """Build a TestClient with the given store and model injected."""

    def _build(store: Any, model: Any = None) -> TestClient:
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_model] = lambda: model or ScriptedModel()
        return TestClient(app)

    yield _build
    app.dependency_overrides.clear()
