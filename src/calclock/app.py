"""Composition root - builds the reactor and its collaborators from config."""

import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .adapters import (
    IpLocationResolver,
    JsonSettingsStore,
    OpenWeatherMapAdapter,
    StaticLocationResolver,
    build_calendar_store,
)
from .config import SETTINGS_FILE, Config
from .ports import LocationResolver
from .reactor import ViewReactor

logger = logging.getLogger(__name__)


def resolve_timezone(config: Config) -> tzinfo | None:
    """Configured zone, or None for the system's local zone."""
    if not config.timezone:
        return None
    try:
        return ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {config.timezone!r}, using local time")
        return None


def build_locator(config: Config) -> LocationResolver:
    if config.latitude is not None and config.longitude is not None:
        return StaticLocationResolver(config.latitude, config.longitude)
    return IpLocationResolver()


def build_reactor(config: Config) -> ViewReactor:
    """Wire adapters into a reactor. Nothing is started yet."""
    tz = resolve_timezone(config)
    return ViewReactor(
        calendar_store=build_calendar_store(config),
        weather_source=OpenWeatherMapAdapter(
            api_key=config.openweathermap_api_key,
            units=config.weather_units,
            tz=tz,
        ),
        locator=build_locator(config),
        settings_store=JsonSettingsStore(SETTINGS_FILE),
        config=config,
        tz=tz,
    )


def setup_scheduler(reactor: ViewReactor, config: Config) -> AsyncIOScheduler:
    """Schedule the reactor's pipelines, plus calendar change detection if the store supports it."""
    scheduler = AsyncIOScheduler(timezone=reactor.tz) if reactor.tz else AsyncIOScheduler()

    watch = getattr(reactor.calendar_store, "watch", None)
    if watch is not None:

        async def watch_calendars() -> None:
            # Runs on the loop so change notifications reach the reactor there
            watch()

        scheduler.add_job(
            watch_calendars,
            "interval",
            seconds=config.calendar_watch_interval,
            id="calendar_watch",
            coalesce=True,
        )

    reactor.start(scheduler)
    return scheduler


async def run_clock(reactor: ViewReactor, config: Config) -> None:
    """Authorize, start every pipeline and fold mutations until cancelled."""
    # Calendar access first so the immediate event poll isn't skipped
    await reactor.request_event_authorization()

    scheduler = setup_scheduler(reactor, config)
    scheduler.start()
    logger.info("Scheduler started")

    # The first location fix triggers its own weather fetches
    await reactor.request_location_authorization()
    await reactor.run()
