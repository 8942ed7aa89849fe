"""
Planbook Calendar Engine

This package provides the core functionality for calendar operations:
- Event values and recurrence templates (event.py)
- Weekly recurrence expansion (recurrence.py)
- Single-calendar store with scoped edits (calendar_store.py)
- Multi-calendar registry with timezone-aware copy (registry.py)
- CSV and iCalendar export (exporters.py)
- Dashboard analytics (analytics.py)
- Text command language (commands.py)
"""

from .errors import (
    CalendarError, InvalidTemplate, InvalidInput, InvalidProperty, DuplicateEvent,
    DuplicateCalendar, NotFound, AmbiguousMatch, NoActiveCalendar,
)
from .event import EventRecord, SeriesTemplate, Status, Weekday, parse_weekdays
from .recurrence import generate
from .calendar_store import CalendarStore, EditScope, DeleteScope, EventProperty
from .registry import CalendarRegistry
from .config import Config

__all__ = [
    'CalendarError',
    'InvalidTemplate',
    'InvalidInput',
    'InvalidProperty',
    'DuplicateEvent',
    'DuplicateCalendar',
    'NotFound',
    'AmbiguousMatch',
    'NoActiveCalendar',
    'EventRecord',
    'SeriesTemplate',
    'Status',
    'Weekday',
    'parse_weekdays',
    'generate',
    'CalendarStore',
    'EditScope',
    'DeleteScope',
    'EventProperty',
    'CalendarRegistry',
    'Config',
]
