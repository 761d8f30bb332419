"""
Tests for environment-driven settings.
"""
import pytest

from aquachem.config import DEFAULT_DATABASE_URL, Settings


def test_defaults(monkeypatch):
    for name in (
        "DATABASE_URL",
        "AQUACHEM_MIN_DATA_POINTS",
        "AQUACHEM_MAX_HISTORY_DAYS",
        "AQUACHEM_MAX_DAYS_AHEAD",
        "AQUACHEM_DEFAULT_DAYS_AHEAD",
        "AQUACHEM_HISTORY_LIMIT",
        "AQUACHEM_MATCH_WINDOW_DAYS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings == Settings()
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.minimum_data_points == 10
    assert settings.max_history_days == 90
    assert settings.max_days_ahead == 30
    assert settings.default_days_ahead == 7
    assert settings.history_limit == 50
    assert settings.match_window_days == 1


def test_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:pass@db:5432/aquachem")
    monkeypatch.setenv("AQUACHEM_MIN_DATA_POINTS", "5")
    monkeypatch.setenv("AQUACHEM_MATCH_WINDOW_DAYS", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.database_url == "postgresql://user:pass@db:5432/aquachem"
    assert settings.minimum_data_points == 5
    assert settings.match_window_days == 2
    assert settings.log_level == "DEBUG"


def test_blank_value_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("AQUACHEM_HISTORY_LIMIT", "  ")

    assert Settings.from_env().history_limit == 50


def test_invalid_integer(monkeypatch):
    monkeypatch.setenv("AQUACHEM_MAX_DAYS_AHEAD", "thirty")

    with pytest.raises(ValueError, match="AQUACHEM_MAX_DAYS_AHEAD must be an integer"):
        Settings.from_env()
