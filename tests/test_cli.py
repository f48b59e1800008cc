"""Tests for the calclock CLI."""

import json
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from calclock.adapters.json_settings import JsonSettingsStore
from calclock.adapters.location import StaticLocationResolver
from calclock.cli import main
from calclock.config import Config
from calclock.core.events import Calendar, Event
from calclock.core.weather import Weather
from calclock.reactor import ViewReactor
from calclock.signals import Signal


class StubCalendarStore:
    def __init__(self):
        self.changed = Signal(0)
        now = datetime.now().astimezone()
        self.events = [Event("Review", now, now + timedelta(hours=1))]

    def authorize(self):
        return True

    def list_calendars(self):
        return [
            Calendar("iCloud", "Home", "iCloud/Home"),
            Calendar("Google", "Work", "Google/Work"),
        ]

    def fetch_events(self, start, end, identifiers=None):
        return list(self.events)


class StubWeatherSource:
    def fetch_current(self, location):
        return Weather("clear sky", "01d", 20.2)

    def fetch_forecast(self, location):
        return [Weather("rain", "10d", 14.0, "15:00"), Weather("unlabelled", "10d", 13.0)]


@pytest.fixture
def reactor(tmp_path):
    reactor = ViewReactor(
        calendar_store=StubCalendarStore(),
        weather_source=StubWeatherSource(),
        locator=StaticLocationResolver(43.65, -79.38),
        settings_store=JsonSettingsStore(tmp_path / "calendars.json"),
    )
    with patch("calclock.cli.build_reactor", return_value=reactor), \
            patch("calclock.cli.load_config", return_value=Config()):
        yield reactor


@pytest.fixture
def runner():
    return CliRunner()


class TestCalendarsCommand:
    def test_list_groups_by_account(self, runner, reactor):
        result = runner.invoke(main, ["calendars", "list"])

        assert result.exit_code == 0
        assert "### Google" in result.output
        assert "### iCloud" in result.output
        assert "[x] Home  (iCloud/Home)" in result.output

    def test_bare_group_lists(self, runner, reactor):
        result = runner.invoke(main, ["calendars"])
        assert result.exit_code == 0
        assert "Work" in result.output

    def test_deselect_persists(self, runner, reactor):
        result = runner.invoke(main, ["calendars", "deselect", "Google/Work"])
        assert result.exit_code == 0
        assert "Deselected Google/Work" in result.output

        result = runner.invoke(main, ["events"])
        assert result.exit_code == 0
        assert reactor.selected_calendars.value == ["iCloud/Home"]

        result = runner.invoke(main, ["calendars", "list"])
        assert "[ ] Work" in result.output

    def test_unknown_identifier(self, runner, reactor):
        result = runner.invoke(main, ["calendars", "select", "nope"])
        assert result.exit_code == 1
        assert "no calendar with identifier" in result.output


class TestEventsCommand:
    def test_json_output(self, runner, reactor):
        result = runner.invoke(main, ["events", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [e["title"] for e in data] == ["Review"]
        assert data[0]["period"].count(":") == 2

    def test_text_output(self, runner, reactor):
        result = runner.invoke(main, ["events"])
        assert result.exit_code == 0
        assert "Review" in result.output


class TestWeatherCommand:
    def test_json_output(self, runner, reactor):
        result = runner.invoke(main, ["weather", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["current"]["description"] == "clear sky"
        assert [w["time"] for w in data["forecast"]] == ["15:00"]

    def test_text_output(self, runner, reactor):
        result = runner.invoke(main, ["weather"])
        assert result.exit_code == 0
        assert "20°" in result.output
        assert "Forecast" in result.output
