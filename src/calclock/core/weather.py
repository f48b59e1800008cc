"""Weather display values."""

from dataclasses import dataclass

Location = tuple[float, float]


@dataclass(frozen=True)
class Weather:
    """Conditions for now or for one forecast slot."""

    description: str
    icon: str
    temperature: float
    time: str | None = None

    def format_temperature(self) -> str:
        return f"{round(self.temperature)}°"


def drop_unlabelled(weathers: list[Weather]) -> list[Weather]:
    """Keep only forecast entries that carry a time label."""
    return [w for w in weathers if w.time is not None]
