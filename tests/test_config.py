"""Tests for configuration validation."""

from config import Config


def test_defaults_are_valid():
    assert Config.validate_config() is True


def test_repository_endpoint(monkeypatch):
    monkeypatch.setattr(Config, "GRAPHDB_BASE_URL", "http://graphdb:7200")
    monkeypatch.setattr(Config, "GRAPHDB_REPOSITORY", "chemkg")

    assert Config.repository_endpoint() == "http://graphdb:7200/repositories/chemkg"
    assert Config.repository_endpoint("other") == "http://graphdb:7200/repositories/other"


def test_invalid_base_url(monkeypatch):
    monkeypatch.setattr(Config, "GRAPHDB_BASE_URL", "graphdb:7200")

    assert Config.validate_config() is False


def test_invalid_timeout(monkeypatch):
    monkeypatch.setattr(Config, "PATHWAY_TIMEOUT_MS", 0)

    assert Config.validate_config() is False


def test_unknown_log_level(monkeypatch):
    monkeypatch.setattr(Config, "LOG_LEVEL", "CHATTY")

    assert Config.validate_config() is False


def test_config_dict():
    settings = Config.get_config_dict()

    assert settings["GRAPHDB_REPOSITORY"] == Config.GRAPHDB_REPOSITORY
    assert "ENABLE_MOCK_FALLBACK" in settings
    assert not any(key.startswith("_") for key in settings)
