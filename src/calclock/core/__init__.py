"""Functional core - pure business logic with no I/O."""

from .sections import Section
from .events import (
    Calendar,
    CalendarSetting,
    Event,
    group_by_owner,
    merge_settings,
    selected_identifiers,
    sort_events_by_start,
)
from .weather import Location, Weather
from .state import (
    Action,
    ClockTicked,
    CurrentWeatherReceived,
    EventsReceived,
    ForecastReceived,
    Mutation,
    State,
    reduce,
)

__all__ = [
    "Section",
    # Calendar
    "Calendar",
    "CalendarSetting",
    "Event",
    "group_by_owner",
    "merge_settings",
    "selected_identifiers",
    "sort_events_by_start",
    # Weather
    "Location",
    "Weather",
    # State
    "Action",
    "ClockTicked",
    "CurrentWeatherReceived",
    "EventsReceived",
    "ForecastReceived",
    "Mutation",
    "State",
    "reduce",
]
