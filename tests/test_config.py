# tests/test_config.py

"""
Tests for startup configuration validation.
"""

import pytest

from core.config import settings
from core.config_validator import validate_config_on_startup, validate_required_config
from main import build_cache


def test_defaults_pass(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", "secret")

    assert validate_required_config() == []
    validate_config_on_startup()


def test_missing_secret_is_fatal_in_production(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "production")
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", None)

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        validate_config_on_startup()


def test_missing_secret_is_a_warning_in_development(monkeypatch, caplog):
    monkeypatch.setattr(settings, "ENV", "development")
    monkeypatch.setattr(settings, "JWT_SECRET_KEY", None)

    validate_config_on_startup()

    assert "JWT_SECRET_KEY" in caplog.text


@pytest.mark.parametrize(
    "name, value",
    [
        ("CACHE_DEFAULT_TTL_SECONDS", 0),
        ("CACHE_SWEEP_INTERVAL_SECONDS", -1),
        ("CACHE_MAX_ENTRIES", -5),
    ],
)
def test_bad_cache_settings_are_fatal(monkeypatch, name, value):
    monkeypatch.setattr(settings, name, value)

    with pytest.raises(RuntimeError, match=name):
        validate_config_on_startup()


def test_build_cache_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "CACHE_DEFAULT_TTL_SECONDS", 30)
    monkeypatch.setattr(settings, "CACHE_MAX_ENTRIES", 0)

    cache = build_cache()

    assert cache.default_ttl_seconds == 30
    assert cache.max_entries is None
