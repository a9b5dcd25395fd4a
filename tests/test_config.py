"""
Unit tests for environment-backed settings.

Run with: python -m pytest tests/test_config.py -v
"""

import logging

import pytest

from planetary_defense.config import Settings, configure_logging, get_settings


class TestSettings:
    """Tests for Settings.from_env and get_settings."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings == Settings()
        assert settings.log_level == "WARNING"
        assert settings.seed is None
        assert settings.time_budget_s == 30.0
        assert settings.intercept_threshold == 0.3
        assert settings.earth_radius == 0.5
        assert settings.tick_hz == 60.0
        assert settings.tick_seconds == pytest.approx(1 / 60)

    def test_reads_overrides(self):
        settings = Settings.from_env({
            "PLANETARY_DEFENSE_LOG_LEVEL": "debug",
            "PLANETARY_DEFENSE_SEED": "42",
            "PLANETARY_DEFENSE_TIME_BUDGET_S": "45",
            "PLANETARY_DEFENSE_INTERCEPT_THRESHOLD": "0.25",
            "PLANETARY_DEFENSE_EARTH_RADIUS": "1.0",
            "PLANETARY_DEFENSE_TICK_HZ": "120",
        })
        assert settings.log_level == "DEBUG"
        assert settings.seed == 42
        assert settings.time_budget_s == 45.0
        assert settings.intercept_threshold == 0.25
        assert settings.earth_radius == 1.0
        assert settings.tick_seconds == pytest.approx(1 / 120)

    def test_blank_values_use_defaults(self):
        settings = Settings.from_env({"PLANETARY_DEFENSE_SEED": "", "PLANETARY_DEFENSE_TICK_HZ": " "})
        assert settings.seed is None
        assert settings.tick_hz == 60.0

    @pytest.mark.parametrize("name,value", [
        ("PLANETARY_DEFENSE_SEED", "abc"),
        ("PLANETARY_DEFENSE_SEED", "1.5"),
        ("PLANETARY_DEFENSE_TIME_BUDGET_S", "soon"),
        ("PLANETARY_DEFENSE_INTERCEPT_THRESHOLD", "-0.3"),
        ("PLANETARY_DEFENSE_EARTH_RADIUS", "0"),
        ("PLANETARY_DEFENSE_TICK_HZ", "nan"),
        ("PLANETARY_DEFENSE_LOG_LEVEL", "CHATTY"),
    ])
    def test_malformed_values_raise(self, name, value):
        with pytest.raises(ValueError):
            Settings.from_env({name: value})

    def test_get_settings_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PLANETARY_DEFENSE_SEED", "7")
        monkeypatch.setenv("PLANETARY_DEFENSE_TIME_BUDGET_S", "12")
        settings = get_settings()
        assert settings.seed == 7
        assert settings.time_budget_s == 12.0

    def test_settings_are_frozen(self):
        with pytest.raises(AttributeError):
            Settings().seed = 3


class TestConfigureLogging:
    """Tests for the script logging helper."""

    def test_accepts_level_names(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
        configure_logging("info")
        assert captured["level"] == "INFO"
