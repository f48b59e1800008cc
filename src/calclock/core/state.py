"""View state, the actions that feed it and the pure fold over mutations."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from .events import Event
from .sections import Section
from .weather import Weather, drop_unlabelled

DEFAULT_CLOCK_FORMAT = "%H:%M:%S"
EVENTS_HEADER = "Today"
FORECAST_HEADER = "Forecast"


class Action(Enum):
    """Activities started once when the clock comes up."""

    START_CLICKING = "start_clicking"
    FETCH_EVENTS = "fetch_events"
    OBSERVE_EVENTS = "observe_events"
    FETCH_CURRENT_WEATHER = "fetch_current_weather"
    FETCH_FUTURE_WEATHER = "fetch_future_weather"
    OBSERVE_FIRST_CURRENT_WEATHER = "observe_first_current_weather"
    OBSERVE_FIRST_FUTURE_WEATHER = "observe_first_future_weather"


@dataclass(frozen=True)
class ClockTicked:
    now: datetime


@dataclass(frozen=True)
class EventsReceived:
    events: tuple[Event, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CurrentWeatherReceived:
    weather: Weather


@dataclass(frozen=True)
class ForecastReceived:
    weathers: tuple[Weather, ...] = field(default_factory=tuple)


Mutation = ClockTicked | EventsReceived | CurrentWeatherReceived | ForecastReceived


@dataclass(frozen=True)
class State:
    """Everything the clock face renders. Fields stay None until first filled."""

    current_time: str | None = None
    events: tuple[Section[Event], ...] | None = None
    weathers: Weather | None = None
    futures: tuple[Section[Weather], ...] | None = None


def reduce(state: State, mutation: Mutation, clock_format: str = DEFAULT_CLOCK_FORMAT) -> State:
    """
    Fold one mutation into the state.

    Pure function - no I/O. Only the field the mutation is about changes.
    """
    match mutation:
        case ClockTicked(now=now):
            return replace(state, current_time=now.strftime(clock_format))
        case EventsReceived(events=events):
            return replace(state, events=(Section(EVENTS_HEADER, events),))
        case CurrentWeatherReceived(weather=weather):
            return replace(state, weathers=weather)
        case ForecastReceived(weathers=weathers):
            section = Section(FORECAST_HEADER, drop_unlabelled(list(weathers)))
            return replace(state, futures=(section,))
    return state
