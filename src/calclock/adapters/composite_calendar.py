"""Composite calendar adapter - combines multiple calendar sources."""

import logging
from datetime import datetime

from calclock.config import Config
from calclock.core.events import Calendar, Event, sort_events_by_start
from calclock.ports import CalendarStore, FetchError
from calclock.signals import Signal

from .google_calendar import GoogleCalendarAdapter
from .icalpal import IcalPalAdapter

logger = logging.getLogger(__name__)


class CompositeCalendarStore:
    """
    Calendar store that combines several backends.

    Implements CalendarStore protocol. Calendar identifiers are routed back to
    the store that listed them; a change in any store bumps `changed`.
    """

    def __init__(self, stores: list[CalendarStore]):
        self.stores = stores
        self.changed: Signal[int] = Signal(0)
        self._owners: dict[str, CalendarStore] = {}
        self._authorized: list[CalendarStore] = []
        for store in stores:
            store.changed.subscribe(self._bump)

    def _bump(self, _value: int) -> None:
        self.changed.set(self.changed.value + 1)

    def watch(self) -> None:
        """Let every backend that can detect changes check for them."""
        for store in self.stores:
            watch = getattr(store, "watch", None)
            if watch is not None:
                watch()

    def authorize(self) -> bool:
        """Authorized if at least one backend grants access."""
        self._authorized = [store for store in self.stores if store.authorize()]
        return bool(self._authorized)

    def list_calendars(self) -> list[Calendar]:
        calendars = []
        owners = {}
        for store in self._authorized or self.stores:
            try:
                listed = store.list_calendars()
            except FetchError as e:
                logger.warning(f"Skipping calendar source: {e}")
                continue
            for calendar in listed:
                owners[calendar.identifier] = store
            calendars.extend(listed)
        self._owners = owners
        return calendars

    def fetch_events(
        self,
        start: datetime,
        end: datetime,
        identifiers: list[str] | None = None,
    ) -> list[Event]:
        """Fetch events from every backend that owns one of the identifiers."""
        if not self._owners:
            self.list_calendars()

        if identifiers:
            wanted: dict[int, tuple[CalendarStore, list[str]]] = {}
            for identifier in identifiers:
                store = self._owners.get(identifier)
                if store is None:
                    continue
                wanted.setdefault(id(store), (store, []))[1].append(identifier)
            requests = list(wanted.values())
        else:
            requests = [(store, None) for store in self._authorized or self.stores]

        events = []
        failures = 0
        for store, ids in requests:
            try:
                events.extend(store.fetch_events(start, end, ids))
            except FetchError as e:
                logger.warning(f"Skipping calendar source: {e}")
                failures += 1
        if requests and failures == len(requests):
            raise FetchError("All calendar sources failed")

        return sort_events_by_start(events)


def build_calendar_store(config: Config) -> CalendarStore:
    """Construct the calendar store described by the configuration."""
    stores: list[CalendarStore] = []
    for source in config.calendar_sources:
        match source:
            case "icalpal":
                stores.append(IcalPalAdapter(database=config.icalpal_database))
            case "google":
                for account in config.gcal_accounts:
                    stores.append(
                        GoogleCalendarAdapter(
                            config_folder=account.config_folder,
                            label=account.label,
                            calendars=account.calendars or None,
                            client_secret_file=config.google_client_secret_file,
                            timezone=config.timezone,
                        )
                    )
            case _:
                logger.warning(f"Unknown calendar source: {source}")

    if len(stores) == 1:
        return stores[0]
    return CompositeCalendarStore(stores)
