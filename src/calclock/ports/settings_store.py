"""Calendar selection storage interface."""

from typing import Protocol

from calclock.core.events import CalendarSetting
from calclock.core.sections import Section


class SettingsStore(Protocol):
    """Interface for persisting which calendars are selected."""

    def save(self, sections: list[Section[CalendarSetting]]) -> None:
        """Write the sectioned settings, replacing what was stored."""
        ...

    def load(self) -> list[Section[CalendarSetting]]:
        """Read the sectioned settings. Returns [] if none are stored or they can't be read."""
        ...
