"""Adapters - I/O implementations of ports."""

from .icalpal import IcalPalAdapter
from .google_calendar import GoogleCalendarAdapter
from .composite_calendar import CompositeCalendarStore, build_calendar_store
from .json_settings import JsonSettingsStore
from .openweathermap import OpenWeatherMapAdapter
from .location import IpLocationResolver, StaticLocationResolver

__all__ = [
    "IcalPalAdapter",
    "GoogleCalendarAdapter",
    "CompositeCalendarStore",
    "build_calendar_store",
    "JsonSettingsStore",
    "OpenWeatherMapAdapter",
    "IpLocationResolver",
    "StaticLocationResolver",
]
