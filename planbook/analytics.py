"""
Calendar dashboard analytics.

Aggregates the events of one calendar over an inclusive date interval.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, date, timedelta
from typing import Optional

from .calendar_store import CalendarStore
from .errors import InvalidInput
from .event import Weekday


@dataclass(frozen=True)
class AnalyticsSummary:
    """Aggregated counts for the dashboard view."""
    start_date: date
    end_date: date
    total_events: int = 0
    events_by_subject: dict[str, int] = field(default_factory=dict)
    events_by_weekday: dict[Weekday, int] = field(default_factory=dict)
    events_by_week_index: dict[int, int] = field(default_factory=dict)
    events_by_month: dict[tuple[int, int], int] = field(default_factory=dict)  # (year, month)
    average_events_per_day: float = 0.0
    busiest_day: Optional[date] = None
    least_busy_day: Optional[date] = None
    online_events: int = 0
    offline_events: int = 0


def _is_online(location: str) -> bool:
    return (location or "").strip().lower() == "online"


def generate_analytics(calendar: CalendarStore, start_date: date, end_date: date) -> AnalyticsSummary:
    """
    Summarize the events that overlap [start_date, end_date].

    Events are attributed to the date they start on, or to start_date for
    events already running when the interval begins. Ties for busiest and
    least busy day go to the earliest date.

    Raises:
        InvalidInput: if a date is missing or end_date is before start_date.
    """
    if start_date is None or end_date is None:
        raise InvalidInput("Start date and end date must not be null")
    if end_date < start_date:
        raise InvalidInput("End date must not be before start date")

    range_start = datetime.combine(start_date, datetime.min.time())
    range_end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
    events = calendar.get_events_in_range(range_start, range_end)

    by_subject: Counter = Counter()
    by_weekday: Counter = Counter()
    by_week: Counter = Counter()
    by_month: Counter = Counter()
    per_day: Counter = Counter()
    online = 0

    for event in events:
        day = max(event.start.date(), start_date)
        subject = event.subject.strip() or "(no subject)"
        by_subject[subject] += 1
        by_weekday[Weekday.of(day)] += 1
        by_week[(day - start_date).days // 7 + 1] += 1
        by_month[(day.year, day.month)] += 1
        per_day[day] += 1
        if _is_online(event.location):
            online += 1

    busiest = least_busy = None
    if per_day:
        days = sorted(per_day)
        busiest = max(days, key=lambda d: per_day[d])
        least_busy = min(days, key=lambda d: per_day[d])

    span = (end_date - start_date).days + 1
    return AnalyticsSummary(
        start_date=start_date,
        end_date=end_date,
        total_events=len(events),
        events_by_subject=dict(by_subject),
        events_by_weekday=dict(by_weekday),
        events_by_week_index=dict(by_week),
        events_by_month=dict(by_month),
        average_events_per_day=len(events) / span,
        busiest_day=busiest,
        least_busy_day=least_busy,
        online_events=online,
        offline_events=len(events) - online,
    )
