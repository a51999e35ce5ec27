"""
- Give every test a fresh in-memory GameStore and override FastAPI's get_store.
- Override get_guess_provider with a seeded heuristic so the opponent is repeatable.
- Provide a client fixture (TestClient(app)) that already has the overrides applied.
"""
import os
import random
import pytest

from fastapi.testclient import TestClient

# Ensure the app does NOT run dev-only startup hooks and never picks the remote brain
os.environ.setdefault("APP_ENV", "test")
os.environ["OPPONENT_STRATEGY"] = "heuristic"

from mindmatch.main import app, get_store, get_guess_provider
from mindmatch.store import GameStore
from mindmatch.strategy import HeuristicGuessProvider


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def store() -> GameStore:
    return GameStore()


@pytest.fixture
def provider(rng) -> HeuristicGuessProvider:
    return HeuristicGuessProvider(rng)


@pytest.fixture(autouse=True)
def override_dep(store, provider):
    """Force the app to use our per-test store and seeded opponent for every request."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_guess_provider] = lambda: provider
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    # This client talks to the FastAPI app in-process. Because we've overridden the
    # dependencies, every request uses the test store instead of the process-wide one.
    return TestClient(app)
