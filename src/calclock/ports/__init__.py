"""Ports - interfaces/protocols for external dependencies."""

from .calendar_store import CalendarStore
from .settings_store import SettingsStore
from .weather_source import LocationResolver, WeatherSource


class FetchError(Exception):
    """Raised by an adapter when a backend read fails."""

    pass


__all__ = [
    "CalendarStore",
    "SettingsStore",
    "WeatherSource",
    "LocationResolver",
    "FetchError",
]
