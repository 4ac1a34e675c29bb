"""Settings parsing for keys, origins and environment selection."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


@pytest.fixture
def clean_key_env(monkeypatch):
    for name in ("GEMINI_API_KEYS", "GEMINI_API_KEY", "GEMINI_API_KEY_1", "GEMINI_API_KEY_2", "GEMINI_API_KEY_3"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)  # type: ignore[call-arg]


def test_keys_from_csv(clean_key_env) -> None:
    settings = _settings(GEMINI_API_KEYS=" k1, k2 ,,k3")

    assert settings.gemini_keys == ["k1", "k2", "k3"]


def test_keys_from_json_env(clean_key_env) -> None:
    clean_key_env.setenv("GEMINI_API_KEYS", '["k1", "k2"]')

    assert _settings().gemini_keys == ["k1", "k2"]


def test_keys_from_csv_env(clean_key_env) -> None:
    clean_key_env.setenv("GEMINI_API_KEYS", "k1,k2")

    assert _settings().gemini_keys == ["k1", "k2"]


def test_legacy_numbered_keys(clean_key_env) -> None:
    clean_key_env.setenv("GEMINI_API_KEY_1", "one")
    clean_key_env.setenv("GEMINI_API_KEY_2", "two")
    clean_key_env.setenv("GEMINI_API_KEY_3", "one")

    assert _settings().gemini_keys == ["one", "two"]


def test_no_keys_configured(clean_key_env) -> None:
    assert _settings().gemini_keys == []


def test_invalid_json_keys_rejected(clean_key_env) -> None:
    with pytest.raises(ValidationError):
        _settings(GEMINI_API_KEYS='["unterminated"')


def test_defaults(clean_key_env) -> None:
    settings = _settings()

    assert settings.FAST_MODEL == "gemini-2.5-flash"
    assert settings.PRIORITY_MODEL == "gemini-2.5-pro"
    assert settings.KEY_ROTATION == "round_robin"
    assert settings.RESPONSE_STRATEGY == "heuristic_text"
    assert settings.DAILY_USAGE_LIMIT == 3
    assert settings.DEVICE_ACCOUNT_LIMIT == 3


def test_unknown_rotation_rejected(clean_key_env) -> None:
    with pytest.raises(ValidationError):
        _settings(KEY_ROTATION="random")


def test_unknown_environment_rejected(monkeypatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")
    get_settings.cache_clear()
    try:
        with pytest.raises(ValueError, match="ENVIRONMENT must be"):
            get_settings()
    finally:
        monkeypatch.setenv("ENVIRONMENT", "test")
        get_settings.cache_clear()
