"""Tests for the composite calendar store."""

from datetime import datetime, timedelta, timezone

import pytest

from calclock.adapters.composite_calendar import CompositeCalendarStore, build_calendar_store
from calclock.adapters.google_calendar import GoogleCalendarAdapter
from calclock.adapters.icalpal import IcalPalAdapter
from calclock.config import Config, GcalAccount
from calclock.core.events import Calendar, Event
from calclock.ports import FetchError
from calclock.signals import Signal

START = datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc)
END = START + timedelta(days=1)


class StubStore:
    def __init__(self, owner, calendars, events=None, fail=False, authorized=True):
        self.owner = owner
        self.calendars = [Calendar(owner, name, f"{owner}/{name}") for name in calendars]
        self.events = events or []
        self.fail = fail
        self.authorized = authorized
        self.changed = Signal(0)
        self.requests = []

    def authorize(self):
        return self.authorized

    def list_calendars(self):
        return list(self.calendars)

    def fetch_events(self, start, end, identifiers=None):
        self.requests.append(identifiers)
        if self.fail:
            raise FetchError(f"{self.owner} is down")
        return list(self.events)


def event(title, hour):
    start = START + timedelta(hours=hour)
    return Event(title, start, start + timedelta(hours=1))


class TestCompositeCalendarStore:
    def test_authorized_if_any_store_is(self):
        store = CompositeCalendarStore([
            StubStore("a", [], authorized=False),
            StubStore("b", []),
        ])
        assert store.authorize() is True

    def test_not_authorized_if_none_are(self):
        store = CompositeCalendarStore([StubStore("a", [], authorized=False)])
        assert store.authorize() is False

    def test_lists_calendars_from_all_stores(self):
        store = CompositeCalendarStore([StubStore("a", ["x"]), StubStore("b", ["y", "z"])])
        assert [c.identifier for c in store.list_calendars()] == ["a/x", "b/y", "b/z"]

    def test_routes_identifiers_and_sorts(self):
        a = StubStore("a", ["x"], events=[event("late", 15)])
        b = StubStore("b", ["y", "z"], events=[event("early", 9)])
        store = CompositeCalendarStore([a, b])
        store.list_calendars()

        events = store.fetch_events(START, END, ["b/z", "a/x", "unknown"])

        assert [e.title for e in events] == ["early", "late"]
        assert a.requests == [["a/x"]]
        assert b.requests == [["b/z"]]

    def test_skips_stores_without_selected_calendars(self):
        a = StubStore("a", ["x"])
        b = StubStore("b", ["y"])
        store = CompositeCalendarStore([a, b])
        store.fetch_events(START, END, ["a/x"])
        assert b.requests == []

    def test_partial_failure_keeps_other_sources(self):
        a = StubStore("a", ["x"], fail=True)
        b = StubStore("b", ["y"], events=[event("ok", 9)])
        store = CompositeCalendarStore([a, b])

        events = store.fetch_events(START, END)

        assert [e.title for e in events] == ["ok"]

    def test_all_sources_failing_raises(self):
        store = CompositeCalendarStore([StubStore("a", ["x"], fail=True)])
        with pytest.raises(FetchError):
            store.fetch_events(START, END)

    def test_change_in_any_store_bumps_changed(self):
        a = StubStore("a", [])
        b = StubStore("b", [])
        store = CompositeCalendarStore([a, b])

        a.changed.set(1)
        b.changed.set(1)

        assert store.changed.value == 2


class TestBuildCalendarStore:
    def test_single_icalpal_source(self):
        store = build_calendar_store(Config(icalpal_database="/tmp/db"))
        assert isinstance(store, IcalPalAdapter)
        assert store.database == "/tmp/db"

    def test_multiple_sources(self):
        config = Config(
            calendar_sources=["icalpal", "google", "outlook"],
            gcal_accounts=[GcalAccount("/tmp/work", "Work", ["Team"])],
            timezone="America/Toronto",
        )
        store = build_calendar_store(config)

        assert isinstance(store, CompositeCalendarStore)
        google = store.stores[1]
        assert isinstance(google, GoogleCalendarAdapter)
        assert google.label == "Work"
        assert google.calendars == ["Team"]
        assert google.timezone == "America/Toronto"
