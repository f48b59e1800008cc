"""Tests for config loading."""

import pytest

from calclock.config import Config, GcalAccount, load_config


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "calclock.conf"
        path.write_text(text)
        return path
    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.conf")
        assert config == Config()
        assert config.event_interval == 60
        assert config.current_weather_interval == 3600
        assert config.forecast_interval == 7200

    def test_parses_values(self, write_config):
        path = write_config(
            "# comment\n"
            "TIMEZONE=America/Toronto\n"
            'CLOCK_FORMAT="%H:%M"  # short clock\n'
            "OPENWEATHERMAP_API_KEY=abc123 # key\n"
            "LATITUDE=43.65\n"
            "LONGITUDE=-79.38\n"
            "EVENT_INTERVAL=30\n"
            "CALENDAR_SOURCES=icalpal, Google\n"
        )
        config = load_config(path)

        assert config.timezone == "America/Toronto"
        assert config.clock_format == "%H:%M"
        assert config.openweathermap_api_key == "abc123"
        assert config.latitude == 43.65
        assert config.longitude == -79.38
        assert config.event_interval == 30
        assert config.calendar_sources == ["icalpal", "google"]

    def test_invalid_number_keeps_default(self, write_config):
        config = load_config(write_config("EVENT_INTERVAL=soon\nLATITUDE=north\n"))
        assert config.event_interval == 60
        assert config.latitude is None

    def test_gcal_accounts_json(self, write_config):
        path = write_config(
            'GCAL_ACCOUNTS=[{"config_folder": "~/.gcal/work", "label": "Work", "calendars": ["Team"]}]\n'
        )
        config = load_config(path)
        assert config.gcal_accounts == [GcalAccount("~/.gcal/work", "Work", ["Team"])]

    def test_gcal_accounts_simple(self, write_config):
        config = load_config(write_config("GCAL_ACCOUNTS=~/.gcal/work:Work,~/.gcal/home\n"))
        assert config.gcal_accounts == [
            GcalAccount("~/.gcal/work", "Work"),
            GcalAccount("~/.gcal/home"),
        ]

    def test_gcal_accounts_bad_json(self, write_config):
        config = load_config(write_config("GCAL_ACCOUNTS=[{broken\n"))
        assert config.gcal_accounts == []

    def test_ignores_unknown_keys_and_junk(self, write_config):
        config = load_config(write_config("SOMETHING=else\nnot a setting\n"))
        assert config == Config()
