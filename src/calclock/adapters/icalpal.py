"""icalPal adapter - subprocess wrapper for macOS Calendar."""

import json
import logging
import subprocess
from datetime import datetime, timedelta
from pathlib import Path

from calclock.core.events import Calendar, Event
from calclock.ports import FetchError
from calclock.signals import Signal

logger = logging.getLogger(__name__)

DEFAULT_DATABASES = [
    "~/Library/Group Containers/group.com.apple.calendar/Calendar.sqlitedb",
    "~/Library/Calendars/Calendar.sqlitedb",
]


def calendar_identifier(account: str, name: str) -> str:
    """icalPal has no stable calendar ID in its output, so key on account/name."""
    return f"{account}/{name}"


class IcalPalAdapter:
    """
    icalPal subprocess adapter.

    Reads calendars and events from macOS Calendar via the icalPal CLI tool.
    Implements CalendarStore protocol.
    """

    def __init__(self, database: str = "", timeout: int = 30):
        self.database = database
        self.timeout = timeout
        self.changed: Signal[int] = Signal(0)
        self._last_mtime: float | None = None

    def _run(self, *args: str) -> list[dict]:
        cmd = ["icalPal", *args, "-o", "json"]
        if self.database:
            cmd += ["--db", str(Path(self.database).expanduser())]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            return json.loads(result.stdout) if result.stdout.strip() else []
        except subprocess.CalledProcessError as e:
            raise FetchError(f"icalPal command failed: {e}") from e
        except FileNotFoundError as e:
            raise FetchError("icalPal not found - install with 'brew install icalpal'") from e
        except subprocess.TimeoutExpired as e:
            raise FetchError(f"icalPal timed out after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            raise FetchError(f"Failed to parse icalPal output: {e}") from e

    def authorize(self) -> bool:
        """icalPal reads the Calendar database directly; access works if it runs."""
        try:
            self._run("calendars")
        except FetchError as e:
            logger.warning(f"Calendar access unavailable: {e}")
            return False
        return True

    def list_calendars(self) -> list[Calendar]:
        calendars = []
        for item in self._run("calendars"):
            account = item.get("account", "")
            name = item.get("calendar", "")
            if not name:
                continue
            calendars.append(
                Calendar(owner=account, name=name, identifier=calendar_identifier(account, name))
            )
        return calendars

    def fetch_events(
        self,
        start: datetime,
        end: datetime,
        identifiers: list[str] | None = None,
    ) -> list[Event]:
        """Fetch events overlapping [start, end).

        icalPal only counts whole days from today, so fetch enough days and filter.
        """
        days = max((end.date() - datetime.now().date()).days, 1)
        command = "eventsToday" if days <= 1 else f"eventsToday+{days}"
        data = self._run(command)

        wanted = set(identifiers) if identifiers else None
        events = []
        for item in data:
            identifier = calendar_identifier(item.get("account", ""), item.get("calendar", ""))
            if wanted is not None and identifier not in wanted:
                continue
            try:
                event = self._parse_event(item)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed event: {e}")
                continue
            if event and _overlaps(event, start, end):
                events.append(event)
        return events

    def _parse_event(self, item: dict) -> Event | None:
        """Parse a single event from icalPal data."""
        # Use sctime/ectime strings - they have correct dates for recurring events.
        # They are local wall time; astimezone() attaches the local zone.
        sctime = item.get("sctime", "")
        ectime = item.get("ectime", "")

        if sctime:
            start = datetime.strptime(sctime[:19], "%Y-%m-%d %H:%M:%S").astimezone()
        elif item.get("sseconds"):
            start = datetime.fromtimestamp(item["sseconds"]).astimezone()
        else:
            return None

        if ectime:
            end = datetime.strptime(ectime[:19], "%Y-%m-%d %H:%M:%S").astimezone()
        elif item.get("eseconds"):
            end = datetime.fromtimestamp(item["eseconds"]).astimezone()
        elif item.get("all_day") == 1:
            end = start + timedelta(days=1)
        else:
            end = start

        return Event(title=item.get("title", "Untitled"), start=start, end=end)

    def database_path(self) -> Path | None:
        if self.database:
            return Path(self.database).expanduser()
        for candidate in DEFAULT_DATABASES:
            path = Path(candidate).expanduser()
            if path.exists():
                return path
        return None

    def watch(self) -> None:
        """Bump `changed` if the Calendar database was modified since the last call."""
        path = self.database_path()
        if path is None:
            return
        try:
            mtime = path.stat().st_mtime
        except OSError as e:
            logger.debug(f"Can't stat calendar database {path}: {e}")
            return
        if self._last_mtime is not None and mtime != self._last_mtime:
            logger.info("Calendar database changed")
            self.changed.set(self.changed.value + 1)
        self._last_mtime = mtime


def _overlaps(event: Event, start: datetime, end: datetime) -> bool:
    # Parsed events carry the local zone; naive bounds are local wall time too
    if start.tzinfo is None:
        start = start.astimezone()
    if end.tzinfo is None:
        end = end.astimezone()
    return event.start < end and event.end > start
