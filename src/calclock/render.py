"""Plain-text rendering of the clock state."""

from datetime import datetime, tzinfo

from .core.events import Event
from .core.state import State
from .core.weather import Weather

BAR_WIDTH = 10


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """Fixed-width bar, clamped to empty/full outside [0, 1]."""
    fraction = min(max(fraction, 0.0), 1.0)
    filled = round(fraction * width)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def format_event(event: Event, tz: tzinfo | None = None, now: datetime | None = None) -> str:
    return f"  {event.period(tz):13}  {progress_bar(event.progress(now))}  {event.title}"


def format_weather(weather: Weather) -> str:
    label = f"{weather.time:5}  " if weather.time else ""
    return f"  {label}{weather.format_temperature():>4}  {weather.description}"


def render_state(state: State, tz: tzinfo | None = None, now: datetime | None = None) -> str:
    """Render the whole clock face. Parts not fetched yet show as placeholders."""
    lines = [f"  {state.current_time or '--:--:--'}", ""]

    if state.events is None:
        lines.append("Events: loading...")
    else:
        for section in state.events:
            lines.append(section.header)
            if not section.items:
                lines.append("  No more events today.")
            for event in section.items:
                lines.append(format_event(event, tz, now))
    lines.append("")

    if state.weathers is None:
        lines.append("Weather: unavailable")
    else:
        lines.append("Now")
        lines.append(format_weather(state.weathers))

    if state.futures is not None:
        for section in state.futures:
            lines.append(section.header)
            for weather in section.items:
                lines.append(format_weather(weather))

    return "\n".join(lines)
