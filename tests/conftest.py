"""Shared fixtures for Planbook tests."""

import io
from datetime import datetime

import pytest

from planbook.calendar_store import CalendarStore
from planbook.commands import CommandInterpreter
from planbook.event import EventRecord, SeriesTemplate, Weekday
from planbook.registry import CalendarRegistry
from planbook.text_view import TextView


NEW_YORK = "America/New_York"
LOS_ANGELES = "America/Los_Angeles"


def dt(text: str) -> datetime:
    """Parse a YYYY-MM-DDTHH:MM literal."""
    return datetime.strptime(text, "%Y-%m-%dT%H:%M")


def make_event(subject="Meeting", start="2025-05-05T10:00", end="2025-05-05T11:00", **kwargs) -> EventRecord:
    return EventRecord(subject=subject, start=dt(start), end=dt(end), **kwargs)


@pytest.fixture
def store() -> CalendarStore:
    return CalendarStore("Work", NEW_YORK)


@pytest.fixture
def weekly_series(store: CalendarStore):
    """Ten MON/WED/THU occurrences starting Monday 2025-05-05, 09:00-09:30."""
    template = SeriesTemplate(
        subject="Standup",
        start=dt("2025-05-05T09:00"),
        end=dt("2025-05-05T09:30"),
        weekdays=frozenset({Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.THURSDAY}),
        repeat_count=10,
        location="Room A",
    )
    return store.add_series(template)


@pytest.fixture
def registry() -> CalendarRegistry:
    registry = CalendarRegistry()
    registry.create_calendar("Work", NEW_YORK)
    registry.create_calendar("Home", LOS_ANGELES)
    return registry


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def interpreter(output, tmp_path) -> CommandInterpreter:
    return CommandInterpreter(CalendarRegistry(), TextView(output), export_dir=tmp_path)
