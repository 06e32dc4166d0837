"""Configuration — tests for environment-driven settings."""

from minuscule.config import Settings, get_settings


def test_defaults_are_development():
    settings = Settings(_env_file=None, env="development")
    assert settings.production is False
    assert settings.log_format == "json"
    assert settings.port == 8000


def test_env_variable_selects_production(monkeypatch):
    monkeypatch.setenv("ENV", "Production")
    settings = get_settings()
    assert settings.env == "production"
    assert settings.production is True


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("ENV", "staging")
    assert get_settings() is get_settings()
    assert get_settings().production is False
