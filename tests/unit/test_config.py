"""
Unit Tests - Configuration and Logging
"""
import json

import pytest
import structlog
from pydantic import ValidationError

from faithstats.aggregation.periods import BucketCalendar
from faithstats.config import Settings, get_settings
from faithstats.config.logging import configure_logging
from faithstats.config.settings import AnkiSettings, TimeSettings


class TestSettings:
    """Tests for pydantic settings"""

    def test_defaults(self):
        settings = Settings()

        assert settings.app_name == "faithstats"
        assert settings.time.timezone == "America/Chicago"
        assert settings.time.rollover_hour == 4
        assert settings.time.week_start_day == 6
        assert settings.time.daily_window == 30
        assert settings.time.weekly_window == 12
        assert settings.anki.deck_name == "Bible::Verses"
        assert settings.arc.church_place_name == "Martin Luther Church"
        assert settings.arc.top_places_days == 182

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("STATS_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("STATS_ROLLOVER_HOUR", "3")
        monkeypatch.setenv("ANKI_NOTE_TYPE", "Scripture")

        assert TimeSettings().timezone == "Europe/Berlin"
        assert TimeSettings().rollover_hour == 3
        assert AnkiSettings().note_type == "Scripture"

    def test_invalid_timezone(self):
        with pytest.raises(ValidationError):
            TimeSettings(timezone="Nowhere/Special")

    def test_invalid_rollover(self):
        with pytest.raises(ValidationError):
            TimeSettings(rollover_hour=25)

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "moon")

        with pytest.raises(ValidationError):
            Settings()

    def test_calendar_from_settings(self):
        calendar = BucketCalendar.from_settings(TimeSettings(timezone="UTC", rollover_hour=0, week_start_day=0))

        assert calendar == BucketCalendar("UTC", 0, 0)

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    def test_json_events_carry_app_name(self, capsys):
        configure_logging(log_level="INFO", log_format="json")
        structlog.get_logger("faithstats.test").info("configured", check=True)

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["event"] == "configured"
        assert event["app"] == "faithstats"
        assert event["check"] is True

    def test_text_format_respects_level(self, capsys):
        configure_logging(log_level="WARNING", log_format="text")
        structlog.get_logger("faithstats.test").info("hidden")

        assert "hidden" not in capsys.readouterr().err
