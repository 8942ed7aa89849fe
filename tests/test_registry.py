"""Tests for the calendar registry and cross-calendar copies."""

from datetime import date

import pytest

from planbook.calendar_store import EditScope
from planbook.errors import (
    AmbiguousMatch, DuplicateCalendar, DuplicateEvent, InvalidInput, NoActiveCalendar, NotFound
)
from planbook.event import SeriesTemplate, Weekday
from planbook.registry import CalendarRegistry

from .conftest import LOS_ANGELES, NEW_YORK, dt, make_event


class TestCalendarManagement:
    def test_create_and_get(self, registry):
        assert registry.calendar_names() == ["Work", "Home"]
        assert registry.get_calendar("Home").timezone == LOS_ANGELES

    def test_duplicate_name(self, registry):
        with pytest.raises(DuplicateCalendar):
            registry.create_calendar("Work", "Europe/London")

    def test_names_are_case_sensitive(self, registry):
        registry.create_calendar("work", NEW_YORK)
        assert registry.has_calendar("work")
        assert registry.has_calendar("Work")

    @pytest.mark.parametrize("name, timezone", [
        ("", NEW_YORK),
        ("  ", NEW_YORK),
        ("School", None),
        ("School", "Nowhere/Special"),
    ])
    def test_invalid_create(self, name, timezone):
        registry = CalendarRegistry()
        with pytest.raises(InvalidInput):
            registry.create_calendar(name, timezone)
        assert registry.calendar_names() == []

    def test_get_unknown(self, registry):
        with pytest.raises(NotFound):
            registry.get_calendar("Gym")
        with pytest.raises(NotFound):
            registry.use_calendar("Gym")

    def test_rename_keeps_events_and_active_selection(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event())
        registry.edit_calendar("Work", "name", "Office")
        assert registry.calendar_names() == ["Office", "Home"]
        assert not registry.has_calendar("Work")
        assert registry.get_current_calendar().name == "Office"
        assert len(registry.get_events_on(date(2025, 5, 5))) == 1

    def test_rename_to_existing_name(self, registry):
        with pytest.raises(DuplicateCalendar):
            registry.edit_calendar("Work", "name", "Home")

    def test_timezone_edit_keeps_wall_clock(self, registry):
        registry.use_calendar("Work")
        event = registry.add_event(make_event())
        registry.edit_calendar("Work", "TimeZone", "Asia/Tokyo")
        assert registry.get_calendar("Work").timezone == "Asia/Tokyo"
        assert registry.get_events_on(date(2025, 5, 5))[0].start == event.start

    def test_timezone_edit_rejects_unknown_zone(self, registry):
        with pytest.raises(InvalidInput):
            registry.edit_calendar("Work", "timezone", "Atlantis/Capital")
        assert registry.get_calendar("Work").timezone == NEW_YORK

    def test_unknown_calendar_property(self, registry):
        with pytest.raises(InvalidInput):
            registry.edit_calendar("Work", "colour", "blue")


class TestActiveCalendar:
    def test_no_calendar_in_use(self, registry):
        assert registry.get_current_calendar() is None
        with pytest.raises(NoActiveCalendar):
            registry.add_event(make_event())
        with pytest.raises(NoActiveCalendar):
            registry.is_busy(dt("2025-05-05T10:00"))

    def test_operations_target_active_calendar(self, registry):
        registry.use_calendar("Home")
        registry.add_event(make_event())
        assert len(registry.get_calendar("Home")) == 1
        assert len(registry.get_calendar("Work")) == 0
        assert registry.is_busy(dt("2025-05-05T10:30"))

    def test_scoped_edit_through_registry(self, registry):
        registry.use_calendar("Work")
        registry.add_series(SeriesTemplate(
            subject="Yoga",
            start=dt("2025-05-06T18:00"),
            end=dt("2025-05-06T19:00"),
            weekdays=frozenset({Weekday.TUESDAY}),
            repeat_count=4,
        ))
        updated = registry.edit(EditScope.FROM, "Yoga", dt("2025-05-13T18:00"), "location", "Park")
        assert len(updated) == 3


class TestCopyEvent:
    def test_copy_uses_target_start_without_conversion(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event(subject="Review", location="Room 4"))
        copy = registry.copy_event("Review", dt("2025-05-05T10:00"), "Home", dt("2025-05-09T15:00"))
        assert copy.start == dt("2025-05-09T15:00")
        assert copy.end == dt("2025-05-09T16:00")
        assert copy.location == "Room 4"
        assert registry.get_calendar("Home").all_events() == [copy]
        assert len(registry.get_calendar("Work")) == 1

    def test_copy_within_same_calendar(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event())
        registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Work", dt("2025-05-06T10:00"))
        assert len(registry.get_calendar("Work")) == 2

    def test_copy_duplicate_fails(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event())
        with pytest.raises(DuplicateEvent):
            registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Work", dt("2025-05-05T10:00"))

    def test_copy_errors(self, registry):
        with pytest.raises(NoActiveCalendar):
            registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Home", dt("2025-05-06T10:00"))
        registry.use_calendar("Work")
        with pytest.raises(NotFound):
            registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Gym", dt("2025-05-06T10:00"))
        with pytest.raises(NotFound):
            registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Home", dt("2025-05-06T10:00"))

    def test_copy_ambiguous_needs_end(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event(end="2025-05-05T11:00"))
        registry.add_event(make_event(end="2025-05-05T12:00"))
        with pytest.raises(AmbiguousMatch):
            registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Home", dt("2025-05-06T10:00"))
        copy = registry.copy_event("Meeting", dt("2025-05-05T10:00"), "Home", dt("2025-05-06T10:00"),
                                   end=dt("2025-05-05T12:00"))
        assert copy.end == dt("2025-05-06T12:00")


class TestCopyOnDate:
    def test_converts_wall_clock_between_zones(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event(subject="Call", start="2025-05-05T14:00", end="2025-05-05T15:30"))
        copied = registry.copy_events_on_date(date(2025, 5, 5), "Home", date(2025, 5, 12))
        assert copied == 1
        [copy] = registry.get_calendar("Home").all_events()
        assert copy.start == dt("2025-05-12T11:00")
        assert copy.end == dt("2025-05-12T12:30")

    def test_same_zone_keeps_times(self, registry):
        registry.create_calendar("Backup", NEW_YORK)
        registry.use_calendar("Work")
        registry.add_event(make_event())
        registry.copy_events_on_date(date(2025, 5, 5), "Backup", date(2025, 6, 1))
        assert registry.get_calendar("Backup").all_events()[0].start == dt("2025-06-01T10:00")

    def test_duplicates_are_skipped(self, registry):
        registry.create_calendar("Backup", NEW_YORK)
        registry.use_calendar("Work")
        registry.add_event(make_event(subject="A"))
        registry.add_event(make_event(subject="B"))
        registry.get_calendar("Backup").add_event(make_event(subject="A", start="2025-05-06T10:00",
                                                             end="2025-05-06T11:00"))
        copied = registry.copy_events_on_date(date(2025, 5, 5), "Backup", date(2025, 5, 6))
        assert copied == 1
        assert len(registry.get_calendar("Backup")) == 2

    def test_nothing_on_source_date(self, registry):
        registry.use_calendar("Work")
        assert registry.copy_events_on_date(date(2025, 5, 5), "Home", date(2025, 5, 6)) == 0

    def test_conversion_follows_daylight_saving(self, registry):
        # US clocks change on 2025-03-09, UK clocks on 2025-03-30
        registry.create_calendar("London", "Europe/London")
        registry.use_calendar("Work")
        registry.add_event(make_event(subject="Sync", start="2025-03-05T14:00", end="2025-03-05T15:00"))
        registry.copy_events_on_date(date(2025, 3, 5), "London", date(2025, 3, 20))
        [copy] = registry.get_calendar("London").all_events()
        assert copy.start == dt("2025-03-20T18:00")


class TestCopyBetween:
    def test_keeps_day_offsets_and_series(self, registry):
        registry.use_calendar("Work")
        occurrences = registry.add_series(SeriesTemplate(
            subject="Lecture",
            start=dt("2025-05-05T14:00"),
            end=dt("2025-05-05T15:00"),
            weekdays=frozenset({Weekday.MONDAY, Weekday.WEDNESDAY}),
            repeat_count=6,
        ))
        copied = registry.copy_events_between(date(2025, 5, 5), date(2025, 5, 12), "Home", date(2025, 9, 1))
        assert copied == 3
        copies = registry.get_calendar("Home").all_events()
        assert [c.start for c in copies] == [
            dt("2025-09-01T11:00"), dt("2025-09-03T11:00"), dt("2025-09-08T11:00"),
        ]
        assert {c.series_id for c in copies} == {occurrences[0].series_id}

    def test_interval_is_inclusive(self, registry):
        registry.use_calendar("Work")
        registry.add_event(make_event(subject="First", start="2025-05-05T09:00", end="2025-05-05T10:00"))
        registry.add_event(make_event(subject="Last", start="2025-05-07T23:00", end="2025-05-07T23:30"))
        registry.add_event(make_event(subject="After", start="2025-05-08T00:00", end="2025-05-08T01:00"))
        copied = registry.copy_events_between(date(2025, 5, 5), date(2025, 5, 7), "Home", date(2025, 5, 5))
        assert copied == 2
        assert [e.subject for e in registry.get_calendar("Home")] == ["First", "Last"]

    def test_reversed_interval(self, registry):
        registry.use_calendar("Work")
        with pytest.raises(InvalidInput):
            registry.copy_events_between(date(2025, 5, 7), date(2025, 5, 5), "Home", date(2025, 5, 5))
