"""Tests for terminal rendering."""

from datetime import datetime, timedelta, timezone

from calclock.core.events import Event
from calclock.core.sections import Section
from calclock.core.state import State
from calclock.core.weather import Weather
from calclock.render import format_event, format_weather, progress_bar, render_state

UTC = timezone.utc
START = datetime(2025, 1, 15, 10, 0, tzinfo=UTC)


class TestProgressBar:
    def test_half(self):
        assert progress_bar(0.5) == "[#####-----]"

    def test_clamps(self):
        assert progress_bar(-0.5) == "[----------]"
        assert progress_bar(1.7) == "[##########]"


class TestFormatting:
    def test_format_event(self):
        event = Event("Standup", START, START + timedelta(hours=1))
        line = format_event(event, UTC, now=START + timedelta(minutes=30))
        assert "10:00 ~ 11:00" in line
        assert "[#####-----]" in line
        assert line.endswith("Standup")

    def test_format_forecast_weather(self):
        line = format_weather(Weather("light rain", "10d", 11.6, "15:00"))
        assert "15:00" in line
        assert "12°" in line
        assert "light rain" in line

    def test_format_temperature_rounds(self):
        assert Weather("", "", -0.4).format_temperature() == "0°"
        assert Weather("", "", 21.5).format_temperature() == "22°"


class TestRenderState:
    def test_initial_state_shows_placeholders(self):
        text = render_state(State())
        assert "--:--:--" in text
        assert "loading" in text
        assert "Weather: unavailable" in text

    def test_full_state(self):
        state = State(
            current_time="10:30:00",
            events=(Section("Today", [Event("Standup", START, START + timedelta(hours=1))]),),
            weathers=Weather("clear sky", "01d", 20.0),
            futures=(Section("Forecast", [Weather("rain", "10d", 14.0, "15:00")]),),
        )
        text = render_state(state, UTC, now=START)

        assert text.splitlines()[0].strip() == "10:30:00"
        assert "Standup" in text
        assert "clear sky" in text
        assert "Forecast" in text
        assert "15:00" in text

    def test_no_events_left(self):
        state = State(events=(Section("Today", ()),))
        assert "No more events today." in render_state(state)
