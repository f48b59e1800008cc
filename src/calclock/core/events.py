"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo

from .sections import Section

ALL_DAY_MINUTES = 1439


@dataclass(eq=False)
class Event:
    """A calendar event as shown on the clock.

    Equality includes progress() evaluated at comparison time, so two copies of
    the same event stop comparing equal once the clock has moved on.
    """

    title: str
    start: datetime
    end: datetime

    def __eq__(self, other):
        if not isinstance(other, Event):
            return NotImplemented
        return (
            self.title == other.title
            and self.start == other.start
            and self.end == other.end
            and self.progress() == other.progress()
        )

    __hash__ = None

    def duration_minutes(self) -> int:
        """Whole minutes from start to end, truncated."""
        return int((self.end - self.start).total_seconds() // 60)

    def period(self, tz: tzinfo | None = None) -> str:
        """Format the event time span for display."""
        if self.duration_minutes() >= ALL_DAY_MINUTES:
            return "all day"
        start = _localize(self.start, tz)
        end = _localize(self.end, tz)
        return f"{start:%H:%M} ~ {end:%H:%M}"

    def progress(self, now: datetime | None = None) -> float:
        """Elapsed fraction of the event at `now` (defaults to the current time).

        Not clamped: events that haven't started are negative, finished ones
        exceed 1. A zero-length event is 0.0 before its start and 1.0 after.
        """
        if now is None:
            now = datetime.now(self.end.tzinfo)
        total = (self.end - self.start).total_seconds()
        if total == 0:
            return 1.0 if now >= self.start else 0.0
        remaining = (self.end - now).total_seconds()
        return 1 - remaining / total


@dataclass(frozen=True)
class Calendar:
    """A calendar as listed by a calendar store."""

    owner: str
    name: str
    identifier: str


@dataclass
class CalendarSetting:
    """Whether a calendar's events show up on the clock.

    Two settings are the same calendar when their identifiers match; owner,
    name and the selected flag are ignored for equality.
    """

    owner: str = ""
    name: str = ""
    identifier: str = ""
    is_selected: bool = True

    def __eq__(self, other):
        if not isinstance(other, CalendarSetting):
            return NotImplemented
        return self.identifier == other.identifier

    def __hash__(self):
        return hash(self.identifier)

    @classmethod
    def from_calendar(cls, calendar: Calendar, is_selected: bool = True) -> "CalendarSetting":
        return cls(
            owner=calendar.owner,
            name=calendar.name,
            identifier=calendar.identifier,
            is_selected=is_selected,
        )


def sort_events_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start)


def today_range(now: datetime) -> tuple[datetime, datetime]:
    """From `now` up to the start of the next day, in now's time zone."""
    start_of_day = datetime.combine(now.date(), time(0, 0), tzinfo=now.tzinfo)
    return now, start_of_day + timedelta(days=1)


def selected_identifiers(sections: list[Section[CalendarSetting]]) -> list[str]:
    """Identifiers of selected calendars, in section then item order."""
    identifiers = []
    for section in sections:
        for item in section.items:
            if item.is_selected:
                identifiers.append(item.identifier)
    return identifiers


def group_by_owner(settings: list[CalendarSetting]) -> list[Section[CalendarSetting]]:
    """One section per owner, owners in the order they first appear."""
    groups: dict[str, list[CalendarSetting]] = {}
    for setting in settings:
        groups.setdefault(setting.owner, []).append(setting)
    return [Section(header=owner, items=items) for owner, items in groups.items()]


def merge_settings(
    saved: list[Section[CalendarSetting]],
    calendars: list[Calendar],
) -> list[Section[CalendarSetting]]:
    """
    Build settings for the calendars a store lists right now.

    Calendars already present in `saved` keep their selected flag; new ones
    start selected. Calendars missing from the store are dropped.

    Pure function - no I/O.
    """
    known = {item.identifier: item.is_selected for section in saved for item in section.items}
    settings = [
        CalendarSetting.from_calendar(calendar, known.get(calendar.identifier, True))
        for calendar in calendars
    ]
    return group_by_owner(settings)


def set_selected(
    sections: list[Section[CalendarSetting]],
    identifier: str,
    is_selected: bool,
) -> list[Section[CalendarSetting]]:
    """Copy of `sections` with one calendar's selected flag changed.

    Raises KeyError if no setting has that identifier.
    """
    found = False
    updated = []
    for section in sections:
        items = []
        for item in section.items:
            if item.identifier == identifier:
                found = True
                item = CalendarSetting(item.owner, item.name, item.identifier, is_selected)
            items.append(item)
        updated.append(section.with_items(items))
    if not found:
        raise KeyError(identifier)
    return updated


def _localize(dt: datetime, tz: tzinfo | None) -> datetime:
    # Naive datetimes are already wall-clock time
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz)
