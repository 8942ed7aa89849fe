"""
Recurrence expansion for Planbook.

Turns a SeriesTemplate into the concrete occurrences of the series. Only
weekly patterns are supported: a set of weekdays terminated either by an
occurrence count or by an inclusive end date.
"""

from datetime import datetime, date, timedelta
import uuid

from .debug import debug_print
from .errors import InvalidTemplate
from .event import EventRecord, SeriesTemplate, Weekday, all_day_bounds


_WEEKDAY_VALUES = frozenset(d.value for d in Weekday)


def _debug_print(message: str) -> None:
    debug_print("RECUR", message)


def new_series_id() -> str:
    """Generate a fresh opaque series identifier."""
    return str(uuid.uuid4())


def resolve_bounds(template: SeriesTemplate) -> tuple[datetime, datetime]:
    """
    Get the first occurrence's start and end for a template.

    Templates without an end use the 08:00-17:00 all-day window of the
    start date.
    """
    if template.end is None:
        return all_day_bounds(template.start.date())
    return template.start, template.end


def validate_template(template: SeriesTemplate) -> None:
    """
    Check a template before expansion.

    Raises:
        InvalidTemplate: describing the first problem found.
    """
    if not template.subject or not template.subject.strip():
        raise InvalidTemplate("Series subject cannot be empty")
    if template.start is None:
        raise InvalidTemplate("Series start is required")
    if not template.weekdays:
        raise InvalidTemplate("Series must repeat on at least one weekday")
    for day in template.weekdays:
        if isinstance(day, bool) or day not in _WEEKDAY_VALUES:
            raise InvalidTemplate(f"Not a weekday: {day!r}")

    has_count = template.repeat_count is not None
    has_until = template.repeat_until is not None
    if has_count == has_until:
        raise InvalidTemplate("Series needs exactly one of a repeat count or a repeat-until date")
    if has_count and template.repeat_count <= 0:
        raise InvalidTemplate(f"Repeat count must be positive, got {template.repeat_count}")
    if has_until and template.repeat_until <= template.start.date():
        raise InvalidTemplate(
            f"Repeat-until date {template.repeat_until} must be after the start date {template.start.date()}"
        )

    if template.end is not None and template.end <= template.start:
        raise InvalidTemplate("Series end time must be after its start time")


def _candidate_dates(first: date):
    day = first
    while True:
        yield day
        day += timedelta(days=1)


def generate(template: SeriesTemplate) -> list[EventRecord]:
    """
    Expand a template into its occurrences.

    Scans forward one day at a time from the start date (inclusive) and
    emits one occurrence per selected weekday, stopping after repeat_count
    occurrences or after the repeat_until date (inclusive).

    Returns:
        Occurrences in strictly increasing start order, all sharing one
        newly generated series_id.
    """
    validate_template(template)

    first_start, first_end = resolve_bounds(template)
    start_time = first_start.time()
    duration = first_end - first_start
    series_id = new_series_id()

    occurrences: list[EventRecord] = []
    for day in _candidate_dates(first_start.date()):
        if template.repeat_count is not None and len(occurrences) >= template.repeat_count:
            break
        if template.repeat_until is not None and day > template.repeat_until:
            break
        if day.weekday() not in template.weekdays:
            continue

        start = datetime.combine(day, start_time)
        occurrences.append(EventRecord(
            subject=template.subject,
            start=start,
            end=start + duration,
            description=template.description or "",
            location=template.location or "",
            status=template.status,
            series_id=series_id,
        ))

    _debug_print(f"generated {len(occurrences)} occurrences of {template.subject!r} (series {series_id})")
    return occurrences
