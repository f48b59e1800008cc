"""Configuration management for calclock."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CALCLOCK_HOME = Path(os.environ.get("CALCLOCK_HOME", Path.home() / "calclock"))
CONFIG_FILE = CALCLOCK_HOME / "config" / "calclock.conf"
SETTINGS_FILE = CALCLOCK_HOME / "config" / "calendars.json"
LOG_DIR = CALCLOCK_HOME / "logs"


@dataclass
class GcalAccount:
    """A Google Calendar account configuration."""

    config_folder: str
    label: str | None = None
    calendars: list[str] = field(default_factory=list)


@dataclass
class Config:
    """calclock configuration."""

    timezone: str = ""
    clock_format: str = "%H:%M:%S"
    calendar_sources: list[str] = field(default_factory=lambda: ["icalpal"])
    gcal_accounts: list[GcalAccount] = field(default_factory=list)
    google_client_secret_file: str = ""
    icalpal_database: str = ""
    openweathermap_api_key: str = ""
    weather_units: str = "metric"
    latitude: float | None = None
    longitude: float | None = None
    # Poll intervals, in seconds
    event_interval: int = 60
    current_weather_interval: int = 3600
    forecast_interval: int = 7200
    calendar_watch_interval: int = 5


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_accounts(value: str) -> list[GcalAccount]:
    # JSON format: [{"config_folder": "...", "label": "...", "calendars": [...]}]
    # Simple format: "path1:label1,path2:label2"
    accounts = []
    if value.startswith("["):
        try:
            data = json.loads(value)
            for item in data:
                accounts.append(
                    GcalAccount(
                        config_folder=item["config_folder"],
                        label=item.get("label"),
                        calendars=item.get("calendars", []),
                    )
                )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Failed to parse GCAL_ACCOUNTS JSON: {e}")
        return accounts

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" in entry:
            folder, label = entry.split(":", 1)
            accounts.append(GcalAccount(folder.strip(), label.strip()))
        else:
            accounts.append(GcalAccount(entry))
    return accounts


def _parse_number(key: str, value: str, kind, default):
    try:
        return kind(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value: {value!r}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from calclock.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "clock_format":
                config.clock_format = value
            case "calendar_sources":
                config.calendar_sources = [s.strip().lower() for s in value.split(",") if s.strip()]
            case "gcal_accounts":
                config.gcal_accounts = _parse_accounts(value)
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "icalpal_database":
                config.icalpal_database = value
            case "openweathermap_api_key":
                config.openweathermap_api_key = value
            case "weather_units":
                config.weather_units = value
            case "latitude":
                config.latitude = _parse_number(key, value, float, None)
            case "longitude":
                config.longitude = _parse_number(key, value, float, None)
            case "event_interval":
                config.event_interval = _parse_number(key, value, int, config.event_interval)
            case "current_weather_interval":
                config.current_weather_interval = _parse_number(
                    key, value, int, config.current_weather_interval
                )
            case "forecast_interval":
                config.forecast_interval = _parse_number(key, value, int, config.forecast_interval)
            case "calendar_watch_interval":
                config.calendar_watch_interval = _parse_number(
                    key, value, int, config.calendar_watch_interval
                )

    return config
