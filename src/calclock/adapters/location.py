"""Location resolvers."""

import logging

import requests

from calclock.core.weather import Location

logger = logging.getLogger(__name__)

IP_LOOKUP_URL = "http://ip-api.com/json/"


class StaticLocationResolver:
    """Coordinates taken from configuration. Implements LocationResolver protocol."""

    def __init__(self, latitude: float, longitude: float):
        self.location = (latitude, longitude)

    def resolve_location(self) -> Location | None:
        return self.location


class IpLocationResolver:
    """
    Approximate location from the machine's public IP address.

    Implements LocationResolver protocol.
    """

    def __init__(self, url: str = IP_LOOKUP_URL, timeout: int = 10):
        self.url = url
        self.timeout = timeout

    def resolve_location(self) -> Location | None:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"IP location lookup failed: {e}")
            return None

        if data.get("status", "success") != "success":
            logger.warning(f"IP location lookup refused: {data.get('message', 'unknown error')}")
            return None

        try:
            return (float(data["lat"]), float(data["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"IP location lookup returned no coordinates: {e}")
            return None
