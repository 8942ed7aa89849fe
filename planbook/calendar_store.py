"""
Single-calendar event store for Planbook.

Holds one calendar's EventRecords and implements the series-aware
mutation rules: duplicate rejection, scoped removal and scoped edits.
Every mutation is validated in full before the stored events change, so
a failed call leaves the calendar as it was.
"""

from datetime import datetime, date, timedelta
from enum import Enum
from typing import Callable, Iterator, Optional

from .debug import debug_print
from .errors import AmbiguousMatch, DuplicateEvent, InvalidInput, InvalidProperty, NotFound
from .event import EventRecord, SeriesTemplate, Status
from .recurrence import generate, new_series_id
from .timezone_utils import get_timezone


def _debug_print(message: str) -> None:
    debug_print("STORE", message)


EventKey = tuple[str, datetime, datetime]


class EditScope(Enum):
    """Which events an edit applies to."""
    SINGLE = "single"   # exactly one occurrence
    FROM = "from"       # the anchor and later occurrences of its series
    ALL = "all"         # every occurrence of the anchor's series


class DeleteScope(Enum):
    """Which events a removal applies to."""
    THIS = "this"
    THIS_AND_FUTURE = "this_and_future"
    ALL = "all"


class EventProperty(Enum):
    """Event properties that can be changed through an edit."""
    SUBJECT = "subject"
    DESCRIPTION = "description"
    LOCATION = "location"
    STATUS = "status"
    START = "startdatetime"
    END = "enddatetime"

    @classmethod
    def parse(cls, name) -> 'EventProperty':
        if isinstance(name, EventProperty):
            return name
        normalized = str(name or "").strip().lower()
        normalized = _PROPERTY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidProperty(
                f"Unknown property: {name}. Valid properties are: "
                + ", ".join(p.value for p in cls)
            )

    @property
    def is_time(self) -> bool:
        """Editing a time property detaches an occurrence from its series pattern."""
        return self in (EventProperty.START, EventProperty.END)


_PROPERTY_ALIASES = {
    'start': 'startdatetime',
    'end': 'enddatetime',
}


# ==================== Property Edits ====================
# Each edit takes (event, value, relative) and returns the replacement
# record. "relative" is set for series edits: time values then keep each
# occurrence's own date and only contribute their time-of-day.

def _edit_subject(event: EventRecord, value, relative: bool) -> EventRecord:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Subject must be a non-empty string")
    return event.with_changes(subject=value)


def _edit_description(event: EventRecord, value, relative: bool) -> EventRecord:
    return event.with_changes(description="" if value is None else str(value))


def _edit_location(event: EventRecord, value, relative: bool) -> EventRecord:
    return event.with_changes(location="" if value is None else str(value))


def _edit_status(event: EventRecord, value, relative: bool) -> EventRecord:
    return event.with_changes(status=Status.parse(value))


def _require_datetime(value) -> datetime:
    if not isinstance(value, datetime):
        raise InvalidInput(f"Expected a date-time value, got {value!r}")
    return value


def _edit_start(event: EventRecord, value, relative: bool) -> EventRecord:
    new_start = _require_datetime(value)
    if relative:
        new_start = datetime.combine(event.start.date(), new_start.time())
    # Moving the start keeps the event's duration
    return event.with_changes(start=new_start, end=new_start + event.duration)


def _edit_end(event: EventRecord, value, relative: bool) -> EventRecord:
    new_end = _require_datetime(value)
    if relative:
        new_end = datetime.combine(event.end.date(), new_end.time())
    return event.with_changes(end=new_end)


_PROPERTY_EDITS: dict[EventProperty, Callable[[EventRecord, object, bool], EventRecord]] = {
    EventProperty.SUBJECT: _edit_subject,
    EventProperty.DESCRIPTION: _edit_description,
    EventProperty.LOCATION: _edit_location,
    EventProperty.STATUS: _edit_status,
    EventProperty.START: _edit_start,
    EventProperty.END: _edit_end,
}


def apply_property(event: EventRecord, prop: EventProperty, value, relative: bool = False) -> EventRecord:
    """Return the record that results from setting prop to value on event."""
    return _PROPERTY_EDITS[prop](event, value, relative)


class CalendarStore:
    """
    One named calendar and the events it owns.

    Events are keyed by (subject, start, end), which makes exact
    duplicates impossible to store. Scans are linear; calendars are
    expected to be small.
    """

    def __init__(self, name: str, timezone: str):
        if not name or not name.strip():
            raise InvalidInput("Calendar name cannot be null or empty")
        get_timezone(timezone)
        self._name = name
        self._timezone = timezone
        self._events: dict[EventKey, EventRecord] = {}

    # ==================== Calendar Properties ====================

    @property
    def name(self) -> str:
        return self._name

    @property
    def timezone(self) -> str:
        """IANA zone id of the calendar's wall clock."""
        return self._timezone

    @property
    def tzinfo(self):
        return get_timezone(self._timezone)

    def rename(self, new_name: str) -> None:
        if not new_name or not new_name.strip():
            raise InvalidInput("Calendar name cannot be null or empty")
        self._name = new_name

    def set_timezone(self, timezone: str) -> None:
        """Change the calendar's zone. Stored wall-clock values are not touched."""
        get_timezone(timezone)
        self._timezone = timezone

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(self.all_events())

    def __contains__(self, event: EventRecord) -> bool:
        return event.key in self._events

    def __repr__(self):
        return f"CalendarStore(name={self._name!r}, timezone={self._timezone!r}, events={len(self._events)})"

    # ==================== Insertion ====================

    def add_event(self, event: EventRecord) -> EventRecord:
        """
        Insert one event.

        Raises:
            DuplicateEvent: if an event with the same subject, start and end exists.
        """
        if event.key in self._events:
            raise DuplicateEvent(
                "Event with same subject, startDateTime and endDateTime already exists"
            )
        self._events[event.key] = event
        _debug_print(f"{self._name}: added {event!r}")
        return event

    def add_series(self, template: SeriesTemplate) -> list[EventRecord]:
        """
        Expand a recurrence template and insert every occurrence.

        Nothing is inserted if any occurrence duplicates an existing event.

        Returns:
            The inserted occurrences in chronological order.
        """
        occurrences = generate(template)
        for occurrence in occurrences:
            if occurrence.key in self._events:
                raise DuplicateEvent(
                    f"Series occurrence on {occurrence.start:%Y-%m-%d} duplicates an existing event"
                )
        for occurrence in occurrences:
            self._events[occurrence.key] = occurrence
        _debug_print(f"{self._name}: added series {template.subject!r} ({len(occurrences)} occurrences)")
        return occurrences

    # ==================== Removal ====================

    def remove_event(self, event: EventRecord) -> None:
        """Remove the event if present; absent events are ignored."""
        if self._events.pop(event.key, None) is not None:
            _debug_print(f"{self._name}: removed {event!r}")

    def remove_from_series(self, event: EventRecord) -> None:
        """Remove the event and every later occurrence of its series."""
        if not event.series_id:
            self.remove_event(event)
            return
        for e in self._series_events(event.series_id):
            if e.start >= event.start:
                self.remove_event(e)

    def remove_all_in_series(self, event: EventRecord) -> None:
        """Remove every occurrence of the event's series."""
        if not event.series_id:
            self.remove_event(event)
            return
        for e in self._series_events(event.series_id):
            self.remove_event(e)

    def remove(self, event: EventRecord, scope: DeleteScope = DeleteScope.THIS) -> None:
        """Remove events according to a delete scope."""
        _REMOVALS[scope](self, event)

    # ==================== Lookup ====================

    def find_event(self, subject: str, start: datetime, end: datetime) -> EventRecord:
        """
        Find the event with exactly this subject, start and end.

        Raises:
            NotFound: if there is no such event.
        """
        event = self._events.get((subject, start, end))
        if event is None:
            raise NotFound(
                "Event with given subject, startDateTime and endDateTime not found"
            )
        return event

    def find_anchor(self, subject: str, start: datetime, end: Optional[datetime] = None) -> EventRecord:
        """
        Find the unique event with this subject and start.

        When end is given it is used to narrow the matches. Ambiguous
        lookups fail rather than guess.

        Raises:
            NotFound: if no event matches.
            AmbiguousMatch: if more than one event matches.
        """
        matches = [
            e for e in self._events.values()
            if e.subject == subject and e.start == start
        ]
        if end is not None:
            matches = [e for e in matches if e.end == end]
        if not matches:
            raise NotFound(f"Event not found: {subject} at {start:%Y-%m-%dT%H:%M}")
        if len(matches) > 1:
            raise AmbiguousMatch(
                f"There exist multiple events with subject {subject!r} starting at {start:%Y-%m-%dT%H:%M}"
            )
        return matches[0]

    def _series_events(self, series_id: str) -> list[EventRecord]:
        return [e for e in self._events.values() if e.series_id == series_id]

    def get_series(self, series_id: str) -> list[EventRecord]:
        """All occurrences of a series in this calendar, in start order."""
        return sorted(self._series_events(series_id), key=lambda e: e.start)

    # ==================== Editing ====================

    def edit_single(self, subject: str, start: datetime, end: datetime, property, value) -> EventRecord:
        """
        Edit exactly one event identified by subject, start and end.

        Changing the start or end detaches the event from its series.

        Returns:
            The replacement record.
        """
        prop = EventProperty.parse(property)
        target = self.find_event(subject, start, end)
        return self._edit_one(target, prop, value)

    def _edit_one(self, target: EventRecord, prop: EventProperty, value) -> EventRecord:
        updated = apply_property(target, prop, value, relative=False)
        if prop.is_time:
            updated = updated.detached()
        self._replace_events([target], [updated])
        return updated

    def edit_from(self, subject: str, start: datetime, property, value,
                  end: Optional[datetime] = None) -> list[EventRecord]:
        """
        Edit the anchor event and every later occurrence of its series.

        Time values keep each occurrence's own date. A time edit moves the
        edited occurrences into a new series so the earlier ones are left
        in a separate series.

        Returns:
            The replacement records in start order.
        """
        prop = EventProperty.parse(property)
        anchor = self.find_anchor(subject, start, end)
        if not anchor.series_id:
            return [self._edit_one(anchor, prop, value)]

        targets = [e for e in self._series_events(anchor.series_id) if e.start >= anchor.start]
        series_id = new_series_id() if prop.is_time else anchor.series_id
        return self._edit_many(targets, prop, value, series_id)

    def edit_all_in_series(self, subject: str, start: datetime, property, value,
                           end: Optional[datetime] = None) -> list[EventRecord]:
        """Edit every occurrence of the anchor event's series, earlier ones included."""
        prop = EventProperty.parse(property)
        anchor = self.find_anchor(subject, start, end)
        if not anchor.series_id:
            return [self._edit_one(anchor, prop, value)]

        targets = self._series_events(anchor.series_id)
        return self._edit_many(targets, prop, value, anchor.series_id)

    def edit(self, scope: EditScope, subject: str, start: datetime, property, value,
             end: Optional[datetime] = None) -> list[EventRecord]:
        """Edit events according to an edit scope."""
        return _EDITS[scope](self, subject, start, property, value, end)

    def _edit_many(self, targets: list[EventRecord], prop: EventProperty, value,
                   series_id: str) -> list[EventRecord]:
        updated = [
            apply_property(e, prop, value, relative=True).with_changes(series_id=series_id)
            for e in targets
        ]
        self._replace_events(targets, updated)
        _debug_print(f"{self._name}: edited {prop.value} on {len(updated)} events")
        return sorted(updated, key=lambda e: e.start)

    def _replace_events(self, old: list[EventRecord], new: list[EventRecord]) -> None:
        """
        Swap a set of events for their replacements atomically.

        Raises:
            DuplicateEvent: if a replacement collides with an untouched event
                or with another replacement. Nothing changes in that case.
        """
        old_keys = {e.key for e in old}
        seen: set[EventKey] = set()
        for event in new:
            if event.key in seen or (event.key in self._events and event.key not in old_keys):
                raise DuplicateEvent("Edit causes duplicate event")
            seen.add(event.key)

        for key in old_keys:
            del self._events[key]
        for event in new:
            self._events[event.key] = event

    # ==================== Queries ====================

    def all_events(self) -> list[EventRecord]:
        """Every event in the calendar, sorted by start."""
        return sorted(self._events.values(), key=lambda e: (e.start, e.end, e.subject))

    def get_events_in_range(self, start: datetime, end: datetime) -> list[EventRecord]:
        """Events overlapping [start, end), sorted by start."""
        return [e for e in self.all_events() if e.overlaps(start, end)]

    def get_events_on(self, day: date) -> list[EventRecord]:
        """Events overlapping the given calendar day, sorted by start."""
        day_start = datetime.combine(day, datetime.min.time())
        return self.get_events_in_range(day_start, day_start + timedelta(days=1))

    def is_busy(self, instant: datetime) -> bool:
        """True if some event covers the instant; an event ending at it does not."""
        return any(e.contains(instant) for e in self._events.values())


_REMOVALS: dict[DeleteScope, Callable[[CalendarStore, EventRecord], None]] = {
    DeleteScope.THIS: CalendarStore.remove_event,
    DeleteScope.THIS_AND_FUTURE: CalendarStore.remove_from_series,
    DeleteScope.ALL: CalendarStore.remove_all_in_series,
}


def _edit_single_scope(store: CalendarStore, subject, start, property, value, end) -> list[EventRecord]:
    if end is None:
        raise InvalidInput("Editing a single event requires its end date-time")
    return [store.edit_single(subject, start, end, property, value)]


_EDITS = {
    EditScope.SINGLE: _edit_single_scope,
    EditScope.FROM: CalendarStore.edit_from,
    EditScope.ALL: CalendarStore.edit_all_in_series,
}
