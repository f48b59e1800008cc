"""OpenWeatherMap API client."""

import logging
from datetime import datetime, tzinfo

import requests

from calclock.core.weather import Location, Weather
from calclock.ports import FetchError

logger = logging.getLogger(__name__)

API_BASE = "https://api.openweathermap.org/data/2.5"


class OpenWeatherMapAdapter:
    """
    Current conditions and 3-hourly forecast from OpenWeatherMap.

    Implements WeatherSource protocol.
    """

    def __init__(
        self,
        api_key: str,
        units: str = "metric",
        tz: tzinfo | None = None,
        timeout: int = 30,
    ):
        self.api_key = api_key
        self.units = units
        self.tz = tz
        self.timeout = timeout
        self._session = requests.Session()

    def _api_request(self, endpoint: str, location: Location) -> dict:
        """Make an API request for a location."""
        if not self.api_key:
            raise FetchError("No OpenWeatherMap API key. Add OPENWEATHERMAP_API_KEY to calclock.conf")

        lat, lon = location
        try:
            resp = self._session.get(
                f"{API_BASE}{endpoint}",
                params={"lat": lat, "lon": lon, "appid": self.api_key, "units": self.units},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise FetchError(f"OpenWeatherMap request failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"Failed to parse OpenWeatherMap response: {e}") from e

    def fetch_current(self, location: Location) -> Weather:
        data = self._api_request("/weather", location)
        try:
            return self._parse(data, with_time=False)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise FetchError(f"Unexpected OpenWeatherMap payload: {e}") from e

    def fetch_forecast(self, location: Location) -> list[Weather]:
        data = self._api_request("/forecast", location)
        weathers = []
        for item in data.get("list", []):
            try:
                weathers.append(self._parse(item, with_time=True))
            except (KeyError, IndexError, TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed forecast entry: {e}")
        return weathers

    def _parse(self, item: dict, with_time: bool) -> Weather:
        condition = item["weather"][0]
        label = None
        if with_time and item.get("dt") is not None:
            label = datetime.fromtimestamp(item["dt"], self.tz).strftime("%H:%M")
        return Weather(
            description=condition.get("description", ""),
            icon=condition.get("icon", ""),
            temperature=float(item["main"]["temp"]),
            time=label,
        )
