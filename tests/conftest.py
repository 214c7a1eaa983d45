"""Shared fixtures for the ChemKG Explorer test suite."""

import pytest

from config import Config
from plots import clear_plot_cache


def _literal(value):
    return {"type": "literal", "value": str(value)}


@pytest.fixture
def row():
    """Factory for SPARQL JSON result rows.

    ``row(target_identifier="B", step_count=1)`` returns a binding mapping each
    keyword to a literal term. ``None`` values are left unbound.
    """
    def make(**values):
        return {name: _literal(value) for name, value in values.items() if value is not None}

    return make


@pytest.fixture(autouse=True)
def fresh_plot_cache():
    clear_plot_cache()
    yield
    clear_plot_cache()


@pytest.fixture
def mock_fallback(monkeypatch):
    monkeypatch.setattr(Config, "ENABLE_MOCK_FALLBACK", True)


@pytest.fixture
def no_mock_fallback(monkeypatch):
    monkeypatch.setattr(Config, "ENABLE_MOCK_FALLBACK", False)


@pytest.fixture
def client():
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
