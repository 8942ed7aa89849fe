"""
Event value types for Planbook.

EventRecord is the shared currency between the recurrence generator, the
calendar stores and the registry. Records are frozen; every edit produces
a new record through dataclasses.replace().
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date, time, timedelta
from enum import Enum, IntEnum
from typing import Optional

from .errors import InvalidInput


ALL_DAY_START = time(8, 0)
ALL_DAY_END = time(17, 0)


class Status(Enum):
    """Visibility of an event."""
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"

    @classmethod
    def parse(cls, value) -> 'Status':
        if isinstance(value, Status):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise InvalidInput(f"Invalid status: {value}. Expected public or private")


class Weekday(IntEnum):
    """Days of the week, numbered like date.weekday()."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: date) -> 'Weekday':
        return cls(day.weekday())

    @classmethod
    def from_code(cls, code: str) -> 'Weekday':
        """Map one letter of the M,T,W,R,F,S,U notation to a weekday."""
        try:
            return _WEEKDAY_CODES[code]
        except KeyError:
            raise InvalidInput(f"Invalid day character: {code}")

    @property
    def code(self) -> str:
        return "MTWRFSU"[self.value]


_WEEKDAY_CODES = {
    'M': Weekday.MONDAY,
    'T': Weekday.TUESDAY,
    'W': Weekday.WEDNESDAY,
    'R': Weekday.THURSDAY,
    'F': Weekday.FRIDAY,
    'S': Weekday.SATURDAY,
    'U': Weekday.SUNDAY,
}


def parse_weekdays(codes: str) -> frozenset[Weekday]:
    """Parse a weekday string such as 'MWF' into a set of weekdays."""
    if not codes:
        raise InvalidInput("Weekday list cannot be empty")
    return frozenset(Weekday.from_code(c) for c in codes)


def all_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Start and end of the 08:00-17:00 window used for all-day events."""
    return datetime.combine(day, ALL_DAY_START), datetime.combine(day, ALL_DAY_END)


@dataclass(frozen=True, eq=False)
class EventRecord:
    """
    One calendar occurrence.

    start and end are naive wall-clock datetimes; the owning calendar
    supplies the timezone. Two records are the same event when subject,
    start and end match, regardless of the other fields.
    """
    subject: str
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    status: Status = Status.PUBLIC
    series_id: Optional[str] = field(default=None)

    def __post_init__(self):
        if not self.subject or not self.subject.strip():
            raise InvalidInput("Event subject cannot be empty")
        if self.start is None or self.end is None:
            raise InvalidInput("Event start and end are required")
        if self.end <= self.start:
            raise InvalidInput(
                f"Event end {self.end:%Y-%m-%dT%H:%M} must be after start {self.start:%Y-%m-%dT%H:%M}"
            )
        # Normalize optional text so it is never None
        if self.description is None:
            object.__setattr__(self, 'description', "")
        if self.location is None:
            object.__setattr__(self, 'location', "")
        if not isinstance(self.status, Status):
            object.__setattr__(self, 'status', Status.parse(self.status))
        if self.series_id == "":
            object.__setattr__(self, 'series_id', None)

    @classmethod
    def all_day(cls, subject: str, day: date, **kwargs) -> 'EventRecord':
        """Create an event using the 08:00-17:00 all-day convention."""
        start, end = all_day_bounds(day)
        return cls(subject=subject, start=start, end=end, **kwargs)

    # ==================== Derived Properties ====================

    @property
    def key(self) -> tuple[str, datetime, datetime]:
        """The (subject, start, end) triple that identifies duplicates."""
        return (self.subject, self.start, self.end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_all_day(self) -> bool:
        return (
            self.start.time() == ALL_DAY_START
            and self.end.time() == ALL_DAY_END
            and self.start.date() == self.end.date()
        )

    @property
    def is_recurring(self) -> bool:
        """Check if this event belongs to a series."""
        return bool(self.series_id)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check if the event's [start, end) interval overlaps [start, end)."""
        return self.start < end and self.end > start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    # ==================== Replacement ====================

    def with_changes(self, **changes) -> 'EventRecord':
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **changes)

    def detached(self) -> 'EventRecord':
        """Return a copy that no longer belongs to any series."""
        return replace(self, series_id=None)

    def __eq__(self, other):
        if isinstance(other, EventRecord):
            return self.key == other.key
        return NotImplemented

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return f"EventRecord(subject={self.subject!r}, start={self.start}, end={self.end})"


@dataclass(frozen=True)
class SeriesTemplate:
    """
    Description of a recurring series before it is expanded.

    Exactly one of repeat_count and repeat_until must be given. When end
    is omitted the series uses the all-day convention on every date.
    """
    subject: str
    start: datetime
    weekdays: frozenset[Weekday]
    end: Optional[datetime] = None
    repeat_count: Optional[int] = None
    repeat_until: Optional[date] = None
    description: str = ""
    location: str = ""
    status: Status = Status.PUBLIC
