"""Tests for environment-driven settings."""

import logging

from mindmap_backend.config import Settings


def test_defaults_without_environment():
    settings = Settings.from_env({})
    assert settings.port == 8765
    assert settings.spawn_radius == 250.0
    assert settings.log_level == "INFO"


def test_values_from_environment():
    settings = Settings.from_env({
        "MINDMAP_PORT": "9000",
        "MINDMAP_SPAWN_RADIUS": "100.5",
        "MINDMAP_CORS_ORIGINS": "http://a, http://b",
        "MINDMAP_LOG_LEVEL": "debug",
    })
    assert settings.port == 9000
    assert settings.spawn_radius == 100.5
    assert settings.cors_origins == ["http://a", "http://b"]
    assert settings.log_level == "DEBUG"


def test_malformed_numbers_fall_back_to_defaults(caplog):
    """Invalid numeric values are logged and ignored instead of raising."""
    with caplog.at_level(logging.WARNING, logger="mindmap_backend.config"):
        settings = Settings.from_env({"MINDMAP_PORT": "eighty", "MINDMAP_SPAWN_RADIUS": "wide"})

    assert settings.port == 8765
    assert settings.spawn_radius == 250.0
    assert "MINDMAP_PORT" in caplog.text
    assert "MINDMAP_SPAWN_RADIUS" in caplog.text
