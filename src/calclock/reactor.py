"""View reactor - runs the clock's data pipelines and folds their output into state.

Each Action is a pipeline: a trigger (an interval job or a signal) and a side
effect that produces zero or more Mutations. Every firing posts its mutations
onto one queue, and run() folds them into State one at a time in the order
they arrived.
"""

import asyncio
import logging
from datetime import datetime, tzinfo
from typing import AsyncIterator, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config
from .core.events import (
    Calendar,
    Event,
    merge_settings,
    selected_identifiers,
    sort_events_by_start,
    today_range,
)
from .core.state import (
    Action,
    ClockTicked,
    CurrentWeatherReceived,
    EventsReceived,
    ForecastReceived,
    Mutation,
    State,
    reduce,
)
from .core.weather import Location
from .ports import CalendarStore, LocationResolver, SettingsStore, WeatherSource
from .signals import Signal

logger = logging.getLogger(__name__)

Observer = Callable[[State], None]


class ViewReactor:
    """Owns the clock's State and the pipelines that update it."""

    def __init__(
        self,
        calendar_store: CalendarStore,
        weather_source: WeatherSource,
        locator: LocationResolver,
        settings_store: SettingsStore,
        config: Config | None = None,
        tz: tzinfo | None = None,
    ):
        self.calendar_store = calendar_store
        self.weather_source = weather_source
        self.locator = locator
        self.settings_store = settings_store
        self.config = config or Config()
        self.tz = tz

        self.initial_state = State()
        self.state = self.initial_state

        # Written by exactly one step each, read by the pipelines
        self.authorized: Signal[bool] = Signal(False)
        self.selected_calendars: Signal[list[str]] = Signal([])
        self.location: Signal[Location | None] = Signal(None)

        self._queue: asyncio.Queue[Mutation] = asyncio.Queue()
        self._observers: list[Observer] = []
        self._tasks: set[asyncio.Task] = set()
        self._known_calendars: list[Calendar] | None = None

    def now(self) -> datetime:
        if self.tz is not None:
            return datetime.now(self.tz)
        return datetime.now().astimezone()

    # ============== Authorization & selection ==============

    async def request_event_authorization(self) -> bool:
        """Ask the calendar store for access and publish the result."""
        try:
            granted = await asyncio.to_thread(self.calendar_store.authorize)
        except Exception as e:
            logger.warning(f"Calendar authorization failed: {e}")
            granted = False

        if granted:
            self.authorized.set(True)
            logger.info("Calendar access granted")
        else:
            logger.warning("Calendar access denied - events will not be shown")
        return granted

    async def request_location_authorization(self) -> Location | None:
        """Resolve the location once and publish it."""
        try:
            location = await asyncio.to_thread(self.locator.resolve_location)
        except Exception as e:
            logger.warning(f"Location lookup failed: {e}")
            location = None

        if location is None:
            logger.warning("Location unknown - weather will not be shown")
            return None
        self.location.set(location)
        logger.info(f"Location resolved: {location[0]:.4f}, {location[1]:.4f}")
        return location

    def current_selection(self) -> list[str]:
        """Selected identifiers among the calendars last listed by the store.

        Saved settings are merged with the listed calendars, so a calendar the
        settings don't mention yet counts as selected. Blocking; reads the
        settings store.
        """
        sections = merge_settings(self.settings_store.load(), self._known_calendars or [])
        return selected_identifiers(sections)

    # ============== Pipelines ==============

    async def handle(self, action: Action) -> AsyncIterator[Mutation]:
        """Run one firing of an action's pipeline, yielding what it produced.

        Gated pipelines yield nothing while their prerequisite is missing, and
        a failed fetch yields nothing; the next firing tries again.
        """
        match action:
            case Action.START_CLICKING:
                yield ClockTicked(self.now())

            case Action.FETCH_EVENTS:
                if not self.authorized.value:
                    logger.debug("Skipping event fetch: calendar access not authorized")
                    return
                events = await self._fetch_events(refresh_calendars=True)
                if events is not None:
                    yield EventsReceived(tuple(events))

            case Action.OBSERVE_EVENTS:
                events = await self._fetch_events(refresh_calendars=False)
                if events is not None:
                    yield EventsReceived(tuple(events))

            case Action.FETCH_CURRENT_WEATHER | Action.OBSERVE_FIRST_CURRENT_WEATHER:
                location = self.location.value
                if location is None:
                    logger.debug("Skipping current weather: location unknown")
                    return
                weather = await self._call("Current weather", self.weather_source.fetch_current, location)
                if weather is not None:
                    yield CurrentWeatherReceived(weather)

            case Action.FETCH_FUTURE_WEATHER | Action.OBSERVE_FIRST_FUTURE_WEATHER:
                location = self.location.value
                if location is None:
                    logger.debug("Skipping forecast: location unknown")
                    return
                weathers = await self._call("Forecast", self.weather_source.fetch_forecast, location)
                if weathers is not None:
                    yield ForecastReceived(tuple(weathers))

    async def _call(self, what: str, func, *args):
        # Blocking backends run off the loop so the clock keeps ticking
        try:
            return await asyncio.to_thread(func, *args)
        except Exception as e:
            logger.warning(f"{what} failed: {e}")
            return None

    async def _fetch_events(self, refresh_calendars: bool) -> list[Event] | None:
        read = await self._call("Event fetch", self._read_events, refresh_calendars)
        if read is None:
            return None
        identifiers, events = read
        if identifiers != self.selected_calendars.value:
            self.selected_calendars.set(identifiers)
        return events

    def _read_events(self, refresh_calendars: bool) -> tuple[list[str], list[Event]]:
        """The current selection and today's events from it (all calendars when empty)."""
        if refresh_calendars or self._known_calendars is None:
            self._known_calendars = self.calendar_store.list_calendars()

        identifiers = self.current_selection()
        start, end = today_range(self.now())
        events = self.calendar_store.fetch_events(start, end, identifiers or None)
        return identifiers, sort_events_by_start(events)

    async def fire(self, action: Action) -> None:
        """Run one firing of `action` and queue whatever it produced."""
        async for mutation in self.handle(action):
            self._queue.put_nowait(mutation)

    def _spawn(self, action: Action) -> None:
        task = asyncio.get_running_loop().create_task(self.fire(action))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # ============== Wiring ==============

    def start(self, scheduler: AsyncIOScheduler) -> None:
        """Activate every action once."""
        for action in Action:
            self.activate(action, scheduler)

    def activate(self, action: Action, scheduler: AsyncIOScheduler) -> None:
        """Hook an action's pipeline up to its trigger."""
        immediately = datetime.now().astimezone()
        match action:
            case Action.START_CLICKING:
                self._every(scheduler, action, 1)
            case Action.FETCH_EVENTS:
                self._every(scheduler, action, self.config.event_interval, immediately)
            case Action.OBSERVE_EVENTS:
                self.calendar_store.changed.subscribe(lambda _: self._spawn(action))
            case Action.FETCH_CURRENT_WEATHER:
                self._every(scheduler, action, self.config.current_weather_interval, immediately)
            case Action.FETCH_FUTURE_WEATHER:
                self._every(scheduler, action, self.config.forecast_interval, immediately)
            case Action.OBSERVE_FIRST_CURRENT_WEATHER | Action.OBSERVE_FIRST_FUTURE_WEATHER:
                self.location.subscribe_first(
                    lambda _: self._spawn(action),
                    lambda location: location is not None,
                )

    def _every(
        self,
        scheduler: AsyncIOScheduler,
        action: Action,
        seconds: int,
        first_run: datetime | None = None,
    ) -> None:
        kwargs = {"next_run_time": first_run} if first_run else {}
        scheduler.add_job(
            self.fire,
            IntervalTrigger(seconds=seconds),
            args=[action],
            id=action.value,
            coalesce=True,
            **kwargs,
        )
        logger.info(f"Scheduled {action.value} every {seconds}s")

    # ============== Folding ==============

    def subscribe(self, observer: Observer) -> None:
        """Call `observer` with every new State."""
        self._observers.append(observer)

    def apply(self, mutation: Mutation) -> State:
        """Fold one mutation into the current state and notify observers."""
        self.state = reduce(self.state, mutation, self.config.clock_format)
        for observer in list(self._observers):
            try:
                observer(self.state)
            except Exception:
                logger.exception("State observer failed")
        return self.state

    def process_pending(self) -> int:
        """Fold everything already queued. Returns how many mutations were applied."""
        count = 0
        while not self._queue.empty():
            self.apply(self._queue.get_nowait())
            count += 1
        return count

    async def run(self) -> None:
        """Fold mutations as they arrive, forever."""
        while True:
            mutation = await self._queue.get()
            self.apply(mutation)
