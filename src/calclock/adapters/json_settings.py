"""File-based calendar selection storage adapter."""

import json
import logging
from pathlib import Path

from calclock.core.events import CalendarSetting
from calclock.core.sections import Section

logger = logging.getLogger(__name__)


class JsonSettingsStore:
    """
    JSON file storage for the calendar selection.

    Implements SettingsStore protocol. The file holds a list of
    {"header", "items": [{"owner", "name", "identifier", "isSelected"}]}.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def save(self, sections: list[Section[CalendarSetting]]) -> None:
        """Write the sectioned settings, replacing what was stored."""
        data = [
            {
                "header": section.header,
                "items": [
                    {
                        "owner": item.owner,
                        "name": item.name,
                        "identifier": item.identifier,
                        "isSelected": item.is_selected,
                    }
                    for item in section.items
                ],
            }
            for section in sections
        ]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))

    def load(self) -> list[Section[CalendarSetting]]:
        """Read the sectioned settings. Returns [] if missing or unreadable."""
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
            return [
                Section(
                    header=section["header"],
                    items=[
                        CalendarSetting(
                            owner=item.get("owner", ""),
                            name=item.get("name", ""),
                            identifier=item["identifier"],
                            is_selected=bool(item.get("isSelected", True)),
                        )
                        for item in section["items"]
                    ],
                )
                for section in data
            ]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable calendar settings in {self.path}: {e}")
            return []
