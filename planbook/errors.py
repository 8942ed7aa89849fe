"""
Error kinds raised by the calendar engine.

Every failure is reported by raising one of these; the command layer is
the only place that turns them into user-visible text.
"""


class CalendarError(Exception):
    """Base class for all calendar engine errors."""


class InvalidTemplate(CalendarError, ValueError):
    """A recurrence template is malformed."""


class InvalidInput(CalendarError, ValueError):
    """A calendar name, timezone, value or command is malformed."""


class InvalidProperty(CalendarError, ValueError):
    """An unknown event property name was given to an edit."""


class DuplicateEvent(CalendarError):
    """An event with the same subject, start and end already exists."""


class DuplicateCalendar(CalendarError):
    """A calendar with the requested name already exists."""


class NotFound(CalendarError, LookupError):
    """No event or calendar matches a lookup."""


class AmbiguousMatch(CalendarError):
    """A lookup matches more than one event."""


class NoActiveCalendar(CalendarError):
    """The operation needs a selected calendar and none is in use."""
