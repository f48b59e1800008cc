"""Google Calendar API adapter."""

import logging
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from calclock.core.events import Calendar, Event
from calclock.ports import FetchError
from calclock.signals import Signal

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


class GoogleCalendarAdapter:
    """Reads calendars and events from Google Calendar via the API.

    Implements CalendarStore protocol.
    """

    def __init__(
        self,
        config_folder: str,
        label: str | None = None,
        calendars: list[str] | None = None,
        client_secret_file: str = "",
        timezone: str = "",
    ):
        self.config_folder = config_folder
        self.label = label or Path(config_folder).name
        self.calendars = calendars
        self.client_secret_file = client_secret_file
        self.timezone = timezone
        self.changed: Signal[int] = Signal(0)
        self._token_path = Path(config_folder).expanduser() / "token.json"
        self._service = None

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            logger.warning(f"No token.json for {self.label}, run 'calclock cal-auth'")
            return None

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                self._token_path.write_text(creds.to_json())
                self._token_path.chmod(0o600)
            except Exception as e:
                logger.warning(f"Failed to refresh token for {self.label}: {e}")
                return None

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        if not creds:
            return None
        return build("calendar", "v3", credentials=creds)

    def _require_service(self):
        if self._service is None:
            self._service = self._build_service()
        if self._service is None:
            raise FetchError(f"Google Calendar not authorized for {self.label}")
        return self._service

    def authenticate(self) -> bool:
        """Run OAuth flow for this account. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)

        token_dir = self._token_path.parent
        token_dir.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)
        return True

    def authorize(self) -> bool:
        """True if stored credentials are usable."""
        try:
            self._service = self._build_service()
        except Exception as e:
            logger.warning(f"Google Calendar authorization failed for {self.label}: {e}")
            return False
        return self._service is not None

    def list_calendars(self) -> list[Calendar]:
        """List calendars, narrowed to the configured display names if any."""
        service = self._require_service()
        try:
            result = service.calendarList().list().execute()
        except Exception as e:
            raise FetchError(f"Google Calendar API error for {self.label}: {e}") from e

        calendars = []
        for entry in result.get("items", []):
            name = entry.get("summary", "")
            if self.calendars and name not in self.calendars:
                continue
            calendars.append(Calendar(owner=self.label, name=name, identifier=entry["id"]))
        return calendars

    def fetch_events(
        self,
        start: datetime,
        end: datetime,
        identifiers: list[str] | None = None,
    ) -> list[Event]:
        """Fetch events overlapping [start, end)."""
        service = self._require_service()
        cal_ids = identifiers or [c.identifier for c in self.list_calendars()] or ["primary"]

        events = []
        for cal_id in cal_ids:
            try:
                result = (
                    service.events()
                    .list(
                        calendarId=cal_id,
                        timeMin=_rfc3339(start),
                        timeMax=_rfc3339(end),
                        singleEvents=True,
                        orderBy="startTime",
                        timeZone=self.timezone or None,
                    )
                    .execute()
                )
            except Exception as e:
                raise FetchError(f"Google Calendar API error for {self.label}: {e}") from e

            for item in result.get("items", []):
                if _declined(item):
                    continue
                event = self._parse_event(item)
                if event:
                    events.append(event)

        return events

    def _parse_event(self, item: dict) -> Event | None:
        start_raw = item.get("start", {})
        end_raw = item.get("end", {})

        if "date" in start_raw:
            # All-day event: attach timezone so sorting with timed events works
            tz = ZoneInfo(self.timezone) if self.timezone else datetime.now().astimezone().tzinfo
            start_dt = datetime.fromisoformat(start_raw["date"]).replace(tzinfo=tz)
            end_dt = datetime.fromisoformat(end_raw.get("date", start_raw["date"])).replace(tzinfo=tz)
        elif "dateTime" in start_raw:
            start_dt = datetime.fromisoformat(start_raw["dateTime"])
            end_dt = datetime.fromisoformat(end_raw.get("dateTime", start_raw["dateTime"]))
        else:
            return None

        return Event(title=item.get("summary", "Untitled"), start=start_dt, end=end_dt)


def _declined(item: dict) -> bool:
    for attendee in item.get("attendees", []):
        if attendee.get("self") and attendee.get("responseStatus") == "declined":
            return True
    return False


def _rfc3339(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.isoformat()
