"""calclock CLI - desktop calendar clock."""

import asyncio
import json
import logging
import sys

import click

from .app import build_reactor, run_clock
from .config import LOG_DIR, load_config
from .core.events import merge_settings, set_selected
from .core.state import Action, State
from .ports import FetchError
from .reactor import ViewReactor
from .render import format_event, format_weather, render_state

logger = logging.getLogger(__name__)


@click.group()
@click.version_option()
def main():
    """calclock - the time, today's events and the weather."""
    pass


@main.command()
@click.option("--verbose", is_flag=True, help="Log at DEBUG level")
def run(verbose: bool):
    """Run the clock in the terminal."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=LOG_DIR / "calclock.log",
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.INFO,
    )

    config = load_config()
    reactor = build_reactor(config)

    def show(state: State) -> None:
        click.clear()
        click.echo(render_state(state, reactor.tz))

    reactor.subscribe(show)
    logger.info("Starting calclock...")
    try:
        asyncio.run(run_clock(reactor, config))
    except KeyboardInterrupt:
        logger.info("Stopped")


async def _fire_once(reactor: ViewReactor, *actions: Action) -> State:
    """Run single firings of `actions` and fold the results."""
    for action in actions:
        await reactor.fire(action)
    reactor.process_pending()
    return reactor.state


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def events(as_json: bool):
    """Show the rest of today's events."""
    config = load_config()
    reactor = build_reactor(config)

    async def fetch() -> State:
        if not await reactor.request_event_authorization():
            return reactor.state
        return await _fire_once(reactor, Action.FETCH_EVENTS)

    state = asyncio.run(fetch())
    if state.events is None:
        click.echo("Error: calendar unavailable (see log for details)", err=True)
        sys.exit(1)

    items = [e for section in state.events for e in section.items]
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "title": e.title,
                        "start": e.start.isoformat(),
                        "end": e.end.isoformat(),
                        "period": e.period(reactor.tz),
                        "progress": round(e.progress(), 4),
                    }
                    for e in items
                ],
                indent=2,
            )
        )
        return

    if not items:
        click.echo("No more events today.")
        return
    for event in items:
        click.echo(format_event(event, reactor.tz))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def weather(as_json: bool):
    """Show current weather and the forecast."""
    config = load_config()
    reactor = build_reactor(config)

    async def fetch() -> State:
        if await reactor.request_location_authorization() is None:
            return reactor.state
        return await _fire_once(reactor, Action.FETCH_CURRENT_WEATHER, Action.FETCH_FUTURE_WEATHER)

    state = asyncio.run(fetch())
    if state.weathers is None and state.futures is None:
        click.echo("Error: weather unavailable (see log for details)", err=True)
        sys.exit(1)

    forecast = [w for section in state.futures or () for w in section.items]
    if as_json:

        def as_dict(w):
            return {
                "description": w.description,
                "icon": w.icon,
                "temperature": w.temperature,
                "time": w.time,
            }

        click.echo(
            json.dumps(
                {
                    "current": as_dict(state.weathers) if state.weathers else None,
                    "forecast": [as_dict(w) for w in forecast],
                },
                indent=2,
            )
        )
        return

    if state.weathers:
        click.echo("Now")
        click.echo(format_weather(state.weathers))
    if forecast:
        click.echo("Forecast")
        for w in forecast:
            click.echo(format_weather(w))


@main.group(invoke_without_command=True)
@click.pass_context
def calendars(ctx):
    """Show and choose which calendars appear on the clock."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(calendars_list)


def _current_settings(reactor: ViewReactor):
    """Saved selection merged with the calendars the store lists right now."""
    if not reactor.calendar_store.authorize():
        click.echo("Error: calendar access denied", err=True)
        sys.exit(1)
    try:
        listed = reactor.calendar_store.list_calendars()
    except FetchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return merge_settings(reactor.settings_store.load(), listed)


@calendars.command("list")
def calendars_list():
    """List calendars grouped by account."""
    reactor = build_reactor(load_config())
    sections = _current_settings(reactor)
    if not sections:
        click.echo("No calendars found.")
        return

    for section in sections:
        click.echo(f"### {section.header or '(no account)'}")
        for item in section.items:
            mark = "x" if item.is_selected else " "
            click.echo(f"  [{mark}] {item.name}  ({item.identifier})")


def _update_selection(identifier: str, is_selected: bool) -> None:
    reactor = build_reactor(load_config())
    sections = _current_settings(reactor)
    try:
        sections = set_selected(sections, identifier, is_selected)
    except KeyError:
        click.echo(f"Error: no calendar with identifier {identifier!r}", err=True)
        sys.exit(1)
    reactor.settings_store.save(sections)
    click.echo(f"{'Selected' if is_selected else 'Deselected'} {identifier}")


@calendars.command("select")
@click.argument("identifier")
def calendars_select(identifier: str):
    """Show a calendar's events on the clock."""
    _update_selection(identifier, True)


@calendars.command("deselect")
@click.argument("identifier")
def calendars_deselect(identifier: str):
    """Hide a calendar's events from the clock."""
    _update_selection(identifier, False)


@main.command("cal-auth")
@click.option("--account", default=None, help="Label of account to authenticate (default: all)")
def cal_auth(account: str | None):
    """Authenticate with Google Calendar."""
    config = load_config()

    if not config.gcal_accounts:
        click.echo("No Google Calendar accounts configured in calclock.conf", err=True)
        sys.exit(1)

    if not config.google_client_secret_file:
        click.echo("GOOGLE_CLIENT_SECRET_FILE not set in calclock.conf", err=True)
        sys.exit(1)

    from calclock.adapters.google_calendar import GoogleCalendarAdapter

    for acct in config.gcal_accounts:
        if account and acct.label != account:
            continue

        click.echo(f"\nAuthenticating: {acct.label or acct.config_folder}")
        adapter = GoogleCalendarAdapter(
            config_folder=acct.config_folder,
            label=acct.label,
            client_secret_file=config.google_client_secret_file,
            timezone=config.timezone,
        )
        if adapter.authenticate():
            click.echo(f"  ✓ Token saved to {adapter._token_path}")
        else:
            click.echo("  ✗ Authentication failed", err=True)
