"""
CSV and iCalendar export for Planbook.

The engine itself never touches files; these functions turn a list of
EventRecords plus the calendar's timezone into CSV or iCalendar text,
and export_calendar() writes one of them to disk.
"""

import csv
import io
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Union
import pytz
from icalendar import Calendar as ICalCalendar, Event as ICalEvent
from icalendar import Timezone as ICalTimezone, TimezoneStandard

from .calendar_store import CalendarStore
from .debug import debug_print
from .errors import InvalidInput
from .event import EventRecord, Status
from .timezone_utils import get_timezone, utc_offset


PRODID = '-//Planbook Calendar//planbook//EN'

CSV_HEADER = [
    "Subject", "Start Date", "Start Time", "End Date", "End Time",
    "All Day Event", "Description", "Location", "Private",
]

CSV_SUFFIXES = {'.csv'}
ICAL_SUFFIXES = {'.ics', '.ical'}


def _debug_print(message: str) -> None:
    debug_print("EXPORT", message)


def _sorted(events: list[EventRecord]) -> list[EventRecord]:
    return sorted(events, key=lambda e: (e.start, e.end, e.subject))


# ==================== CSV ====================

def _csv_row(event: EventRecord) -> list[str]:
    return [
        event.subject,
        event.start.strftime("%m/%d/%Y"),
        event.start.strftime("%I:%M %p"),
        event.end.strftime("%m/%d/%Y"),
        event.end.strftime("%I:%M %p"),
        "True" if event.is_all_day else "False",
        event.description,
        event.location,
        "True" if event.status == Status.PRIVATE else "False",
    ]


def events_to_csv(events: list[EventRecord]) -> str:
    """
    Render events as CSV with a header row, in start order.

    Fields containing commas, quotes or newlines are quoted by the csv module.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for event in _sorted(events):
        writer.writerow(_csv_row(event))
    return buffer.getvalue()


# ==================== iCalendar ====================

def _event_uid(event: EventRecord) -> str:
    base = f"{event.subject}-{event.start.isoformat()}-{event.end.isoformat()}"
    return re.sub(r"[^a-zA-Z0-9-]", "", base) + "@planbook"


def _build_timezone(timezone_name: str, reference: Optional[datetime]) -> ICalTimezone:
    """Build a VTIMEZONE with one STANDARD block carrying the zone's offset."""
    offset = utc_offset(timezone_name, reference)
    standard = TimezoneStandard()
    standard.add('dtstart', datetime(1970, 1, 1))
    standard.add('tzoffsetfrom', offset)
    standard.add('tzoffsetto', offset)

    vtimezone = ICalTimezone()
    vtimezone.add('tzid', timezone_name)
    vtimezone.add_component(standard)
    return vtimezone


def _build_event(event: EventRecord, tz, stamp: datetime) -> ICalEvent:
    vevent = ICalEvent()
    vevent.add('uid', _event_uid(event))
    vevent.add('dtstamp', stamp)

    if event.is_all_day:
        # All-day events are whole dates; DTEND is exclusive
        vevent.add('dtstart', event.start.date())
        vevent.add('dtend', event.end.date() + timedelta(days=1))
    else:
        vevent.add('dtstart', tz.localize(event.start))
        vevent.add('dtend', tz.localize(event.end))

    vevent.add('summary', event.subject)
    if event.description:
        vevent.add('description', event.description)
    if event.location:
        vevent.add('location', event.location)
    vevent.add('class', event.status.value)
    return vevent


def events_to_ical(events: list[EventRecord], timezone_name: str,
                   reference: Optional[datetime] = None) -> str:
    """
    Render events as an iCalendar document.

    Args:
        events: Events in the calendar's wall clock.
        timezone_name: IANA id of the calendar's zone.
        reference: Instant at which the VTIMEZONE offset is taken (default: now).

    Returns:
        VCALENDAR text with one VTIMEZONE and one VEVENT per event.
    """
    tz = get_timezone(timezone_name)

    vcal = ICalCalendar()
    vcal.add('prodid', PRODID)
    vcal.add('version', '2.0')
    vcal.add('calscale', 'GREGORIAN')
    vcal.add('method', 'PUBLISH')
    vcal.add_component(_build_timezone(timezone_name, reference))

    stamp = datetime.now(pytz.UTC).replace(microsecond=0)
    for event in _sorted(events):
        vcal.add_component(_build_event(event, tz, stamp))

    return vcal.to_ical().decode('utf-8')


# ==================== Files ====================

def export_calendar(calendar: CalendarStore, path: Union[str, Path],
                    export_dir: Optional[Path] = None) -> Path:
    """
    Write a calendar's events to a CSV or iCalendar file.

    The format is chosen from the file suffix. Relative paths are resolved
    under export_dir when one is given.

    Returns:
        Absolute path of the written file.

    Raises:
        InvalidInput: if the suffix is unsupported or the file cannot be written.
    """
    path = Path(path)
    if not path.is_absolute() and export_dir is not None:
        path = Path(export_dir) / path

    suffix = path.suffix.lower()
    events = calendar.all_events()
    if suffix in CSV_SUFFIXES:
        content = events_to_csv(events)
    elif suffix in ICAL_SUFFIXES:
        content = events_to_ical(events, calendar.timezone)
    else:
        raise InvalidInput(f"Unsupported export format: {path.name}. Use .csv or .ics")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
    except OSError as e:
        raise InvalidInput(f"Cannot write {path}: {e.strerror or e}") from e

    _debug_print(f"exported {len(events)} events from {calendar.name!r} to {path}")
    return path.resolve()
