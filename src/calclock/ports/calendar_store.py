"""Calendar store interface."""

from datetime import datetime
from typing import Protocol

from calclock.core.events import Calendar, Event
from calclock.signals import Signal


class CalendarStore(Protocol):
    """Interface for reading calendars and events from any backend."""

    changed: Signal[int]
    """Bumped whenever the backend reports that its data changed."""

    def authorize(self) -> bool:
        """Ask for access to the backend. Returns True if granted."""
        ...

    def list_calendars(self) -> list[Calendar]:
        """List the calendars the backend knows about."""
        ...

    def fetch_events(
        self,
        start: datetime,
        end: datetime,
        identifiers: list[str] | None = None,
    ) -> list[Event]:
        """Fetch events overlapping [start, end) from the given calendars (all if None)."""
        ...
