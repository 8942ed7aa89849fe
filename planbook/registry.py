"""
Multi-calendar registry for Planbook.

Keeps named CalendarStores, tracks which one is in use, and copies events
between calendars. Copies between calendars in different zones keep the
instant and move the wall clock (14:00 New York becomes 11:00 Los Angeles).
"""

from datetime import datetime, date, timedelta
from typing import Optional

from .calendar_store import CalendarStore, DeleteScope, EditScope
from .debug import debug_print
from .errors import (
    DuplicateCalendar, DuplicateEvent, InvalidInput, NoActiveCalendar, NotFound
)
from .event import EventRecord, SeriesTemplate
from .timezone_utils import convert_wall_clock, get_timezone


def _debug_print(message: str) -> None:
    debug_print("REGISTRY", message)


class CalendarRegistry:
    """
    Named calendars plus the active-calendar selector.

    Calendars are created and renamed but never removed. Event operations
    without an explicit calendar act on the active one and raise
    NoActiveCalendar when none has been selected.
    """

    def __init__(self):
        self._calendars: dict[str, CalendarStore] = {}
        self._current: Optional[CalendarStore] = None

    # ==================== Calendar Management ====================

    def create_calendar(self, name: str, timezone: str) -> CalendarStore:
        """
        Create an empty calendar.

        Raises:
            InvalidInput: if the name is empty or the timezone missing/unknown.
            DuplicateCalendar: if the name is already used (case-sensitive).
        """
        if name is None or not name.strip():
            raise InvalidInput("Calendar name cannot be null or empty")
        if timezone is None:
            raise InvalidInput("Timezone cannot be null")
        if name in self._calendars:
            raise DuplicateCalendar(f"Calendar with name '{name}' already exists")

        calendar = CalendarStore(name, timezone)
        self._calendars[name] = calendar
        _debug_print(f"created calendar {name!r} ({timezone})")
        return calendar

    def edit_calendar(self, name: str, property: str, value) -> CalendarStore:
        """
        Rename a calendar or change its timezone.

        Events survive both edits unchanged; a timezone change does not
        shift any wall-clock value.
        """
        calendar = self.get_calendar(name)
        if property is None or not property.strip():
            raise InvalidInput("Property cannot be null or empty")

        prop = property.strip().lower()
        if prop == "name":
            if not isinstance(value, str) or not value.strip():
                raise InvalidInput("Name must be a non-empty string")
            if value == name:
                return calendar
            if value in self._calendars:
                raise DuplicateCalendar(f"Calendar with name '{value}' already exists")
            calendar.rename(value)
            # Re-insert under the new name, keeping creation order
            self._calendars = {
                (value if key == name else key): cal
                for key, cal in self._calendars.items()
            }
            _debug_print(f"renamed calendar {name!r} to {value!r}")
        elif prop == "timezone":
            if not isinstance(value, str):
                raise InvalidInput("Timezone must be a string")
            get_timezone(value)
            calendar.set_timezone(value)
            _debug_print(f"calendar {name!r} timezone set to {value}")
        else:
            raise InvalidInput(
                f"Unknown property: {property}. Valid properties are: name, timezone"
            )
        return calendar

    def get_calendar(self, name: str) -> CalendarStore:
        """
        Raises:
            NotFound: if no calendar has this name.
        """
        calendar = self._calendars.get(name)
        if calendar is None:
            raise NotFound(f"Calendar '{name}' does not exist")
        return calendar

    def has_calendar(self, name: str) -> bool:
        return name in self._calendars

    def calendar_names(self) -> list[str]:
        return list(self._calendars)

    def use_calendar(self, name: str) -> CalendarStore:
        self._current = self.get_calendar(name)
        return self._current

    def get_current_calendar(self) -> Optional[CalendarStore]:
        return self._current

    def require_current_calendar(self) -> CalendarStore:
        if self._current is None:
            raise NoActiveCalendar("No calendar is currently in use")
        return self._current

    # ==================== Active Calendar Operations ====================

    def add_event(self, event: EventRecord) -> EventRecord:
        return self.require_current_calendar().add_event(event)

    def add_series(self, template: SeriesTemplate) -> list[EventRecord]:
        return self.require_current_calendar().add_series(template)

    def remove_event(self, event: EventRecord) -> None:
        self.require_current_calendar().remove_event(event)

    def remove_from_series(self, event: EventRecord) -> None:
        self.require_current_calendar().remove_from_series(event)

    def remove_all_in_series(self, event: EventRecord) -> None:
        self.require_current_calendar().remove_all_in_series(event)

    def edit_single(self, subject: str, start: datetime, end: datetime, property, value) -> EventRecord:
        return self.require_current_calendar().edit_single(subject, start, end, property, value)

    def edit_from(self, subject: str, start: datetime, property, value,
                  end: Optional[datetime] = None) -> list[EventRecord]:
        return self.require_current_calendar().edit_from(subject, start, property, value, end)

    def edit_all_in_series(self, subject: str, start: datetime, property, value,
                           end: Optional[datetime] = None) -> list[EventRecord]:
        return self.require_current_calendar().edit_all_in_series(subject, start, property, value, end)

    def edit(self, scope: EditScope, subject: str, start: datetime, property, value,
             end: Optional[datetime] = None) -> list[EventRecord]:
        return self.require_current_calendar().edit(scope, subject, start, property, value, end)

    def remove(self, event: EventRecord, scope: DeleteScope = DeleteScope.THIS) -> None:
        self.require_current_calendar().remove(event, scope)

    def get_events_on(self, day: date) -> list[EventRecord]:
        return self.require_current_calendar().get_events_on(day)

    def get_events_in_range(self, start: datetime, end: datetime) -> list[EventRecord]:
        return self.require_current_calendar().get_events_in_range(start, end)

    def is_busy(self, instant: datetime) -> bool:
        return self.require_current_calendar().is_busy(instant)

    # ==================== Copying ====================

    def copy_event(self, subject: str, source_start: datetime, target_name: str,
                   target_start: datetime, end: Optional[datetime] = None) -> EventRecord:
        """
        Copy one event from the active calendar to another calendar.

        target_start is read as a wall-clock time of the target calendar,
        so no zone conversion is applied. The copy keeps the event's
        duration, details and series id.

        Raises:
            NoActiveCalendar: if no calendar is in use.
            NotFound: if the target calendar or the event does not exist.
            AmbiguousMatch: if several events match subject and start.
            DuplicateEvent: if the target already holds the same event.
        """
        source = self.require_current_calendar()
        target = self.get_calendar(target_name)
        event = source.find_anchor(subject, source_start, end)

        copy = event.with_changes(start=target_start, end=target_start + event.duration)
        target.add_event(copy)
        _debug_print(f"copied {event!r} to {target.name!r} at {target_start}")
        return copy

    def copy_events_on_date(self, source_date: date, target_name: str, target_date: date) -> int:
        """
        Copy every event overlapping source_date into another calendar on target_date.

        Events already present in the target are skipped.

        Returns:
            Number of events copied.
        """
        source = self.require_current_calendar()
        target = self.get_calendar(target_name)
        events = source.get_events_on(source_date)
        return self._copy_shifted(source, target, events, source_date, target_date)

    def copy_events_between(self, source_start: date, source_end: date, target_name: str,
                            target_start: date) -> int:
        """
        Copy every event overlapping the inclusive date interval into another calendar.

        Each event keeps its offset in days from source_start relative to
        target_start. Series ids are kept, so partially copied series still
        show as series in the target.

        Returns:
            Number of events copied.
        """
        source = self.require_current_calendar()
        target = self.get_calendar(target_name)
        if source_end < source_start:
            raise InvalidInput("End date must not be before start date")
        range_start = datetime.combine(source_start, datetime.min.time())
        range_end = datetime.combine(source_end + timedelta(days=1), datetime.min.time())
        events = source.get_events_in_range(range_start, range_end)
        return self._copy_shifted(source, target, events, source_start, target_start)

    def _copy_shifted(self, source: CalendarStore, target: CalendarStore,
                      events: list[EventRecord], source_anchor: date, target_anchor: date) -> int:
        shift = target_anchor - source_anchor
        copied = 0
        for event in events:
            new_start = convert_wall_clock(event.start + shift, source.timezone, target.timezone)
            copy = event.with_changes(start=new_start, end=new_start + event.duration)
            try:
                target.add_event(copy)
            except DuplicateEvent:
                _debug_print(f"skipping duplicate {copy!r} in {target.name!r}")
                continue
            copied += 1
        _debug_print(f"copied {copied}/{len(events)} events from {source.name!r} to {target.name!r}")
        return copied
