"""Weather and location interfaces."""

from typing import Protocol

from calclock.core.weather import Location, Weather


class WeatherSource(Protocol):
    """Interface for fetching conditions at a location."""

    def fetch_current(self, location: Location) -> Weather:
        """Fetch the current conditions."""
        ...

    def fetch_forecast(self, location: Location) -> list[Weather]:
        """Fetch upcoming forecast slots, earliest first."""
        ...


class LocationResolver(Protocol):
    """Interface for finding where the clock is."""

    def resolve_location(self) -> Location | None:
        """Return (latitude, longitude), or None if it can't be determined."""
        ...
