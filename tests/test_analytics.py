"""Tests for the calendar dashboard analytics."""

from datetime import date

import pytest

from planbook.analytics import generate_analytics
from planbook.errors import InvalidInput
from planbook.event import Weekday

from .conftest import make_event


@pytest.fixture
def busy_store(store):
    store.add_event(make_event(subject="Gym", start="2025-05-05T07:00", end="2025-05-05T08:00"))
    store.add_event(make_event(subject="Standup", start="2025-05-05T09:00", end="2025-05-05T09:15",
                               location="Online"))
    store.add_event(make_event(subject="Standup", start="2025-05-06T09:00", end="2025-05-06T09:15",
                               location=" online "))
    store.add_event(make_event(subject="Review", start="2025-05-13T15:00", end="2025-05-13T16:00",
                               location="Room 1"))
    store.add_event(make_event(subject="Trip", start="2025-06-02T08:00", end="2025-06-02T17:00"))
    return store


class TestGenerateAnalytics:
    def test_totals_and_groupings(self, busy_store):
        summary = generate_analytics(busy_store, date(2025, 5, 5), date(2025, 5, 18))
        assert summary.total_events == 4
        assert summary.events_by_subject == {"Gym": 1, "Standup": 2, "Review": 1}
        assert summary.events_by_weekday == {Weekday.MONDAY: 2, Weekday.TUESDAY: 2}
        assert summary.events_by_week_index == {1: 3, 2: 1}
        assert summary.events_by_month == {(2025, 5): 4}

    def test_average_uses_inclusive_span(self, busy_store):
        summary = generate_analytics(busy_store, date(2025, 5, 5), date(2025, 5, 12))
        assert summary.average_events_per_day == pytest.approx(3 / 8)

    def test_busiest_and_least_busy(self, busy_store):
        summary = generate_analytics(busy_store, date(2025, 5, 5), date(2025, 5, 31))
        assert summary.busiest_day == date(2025, 5, 5)
        assert summary.least_busy_day == date(2025, 5, 6)

    def test_online_counts(self, busy_store):
        summary = generate_analytics(busy_store, date(2025, 5, 1), date(2025, 6, 30))
        assert summary.online_events == 2
        assert summary.offline_events == 3
        assert summary.events_by_month == {(2025, 5): 4, (2025, 6): 1}

    def test_empty_range(self, busy_store):
        summary = generate_analytics(busy_store, date(2025, 7, 1), date(2025, 7, 31))
        assert summary.total_events == 0
        assert summary.busiest_day is None
        assert summary.least_busy_day is None
        assert summary.average_events_per_day == 0.0

    def test_invalid_range(self, store):
        with pytest.raises(InvalidInput):
            generate_analytics(store, date(2025, 5, 10), date(2025, 5, 1))
        with pytest.raises(InvalidInput):
            generate_analytics(store, None, date(2025, 5, 1))

    def test_event_running_into_range_counts_on_first_day(self, store):
        store.add_event(make_event(subject="Late", start="2025-05-04T23:00", end="2025-05-05T01:00"))
        summary = generate_analytics(store, date(2025, 5, 5), date(2025, 5, 11))
        assert summary.total_events == 1
        assert summary.events_by_week_index == {1: 1}
        assert summary.events_by_weekday == {Weekday.MONDAY: 1}
        assert summary.busiest_day == date(2025, 5, 5)
