"""
Text command language for Planbook.

Commands are recognized by a flat, ordered table of (predicate, parser)
pairs. The first entry whose predicate accepts a line parses it into a
Command: a callable that runs against the registry and reports through
the text view. Dates are YYYY-MM-DD and date-times YYYY-MM-DDTHH:mm;
subjects are a single word or double-quoted.
"""

import re
from dataclasses import dataclass
from datetime import datetime, date
from pathlib import Path
from typing import Callable, Iterable, Optional, TextIO

from .analytics import generate_analytics
from .calendar_store import EditScope, EventProperty
from .debug import debug_print
from .errors import CalendarError, InvalidInput
from .event import EventRecord, SeriesTemplate, all_day_bounds, parse_weekdays
from .exporters import export_calendar
from .registry import CalendarRegistry
from .text_view import TextView


def _debug_print(message: str) -> None:
    debug_print("COMMAND", message)


SUBJECT = r'(?:"([^"]+)"|(\S+))'

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M"


@dataclass
class CommandContext:
    """What a command needs to run."""
    registry: CalendarRegistry
    view: TextView
    export_dir: Optional[Path] = None


Command = Callable[[CommandContext], None]


# ==================== Value Parsing ====================

def parse_date(text: str) -> date:
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise InvalidInput(f"Invalid date format: {text}. Expected YYYY-MM-DD")


def parse_datetime(text: str) -> datetime:
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError:
        raise InvalidInput(f"Invalid date/time format: {text}. Expected YYYY-MM-DDTHH:mm")


def _subject(match: re.Match, quoted: int) -> str:
    return match.group(quoted) if match.group(quoted) is not None else match.group(quoted + 1)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) > 1 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def _property_value(prop: EventProperty, raw: str):
    """Convert the text after 'with' into the value an edit expects."""
    value = _unquote(raw)
    if prop.is_time:
        return parse_datetime(value)
    return value


def _fullmatch(pattern: str, line: str) -> Optional[re.Match]:
    return re.fullmatch(pattern, line)


# ==================== Calendar Management ====================

def parse_create_calendar(line: str) -> Command:
    m = _fullmatch(r'create calendar --name (\S+) --timezone (\S+)', line)
    if not m:
        raise InvalidInput("Invalid create calendar syntax")
    name, timezone = m.group(1), m.group(2)

    def run(ctx: CommandContext) -> None:
        ctx.registry.create_calendar(name, timezone)
        ctx.view.display_message(f"Calendar '{name}' created with timezone {timezone}")
    return run


def parse_edit_calendar(line: str) -> Command:
    m = _fullmatch(r'edit calendar --name (\S+) --property (\w+) (.+)', line)
    if not m:
        raise InvalidInput("Invalid edit calendar syntax")
    name, prop, value = m.group(1), m.group(2), _unquote(m.group(3))

    def run(ctx: CommandContext) -> None:
        ctx.registry.edit_calendar(name, prop, value)
        ctx.view.display_message(f"Calendar '{name}' updated: {prop.lower()} = {value}")
    return run


def parse_use_calendar(line: str) -> Command:
    m = _fullmatch(r'use calendar --name (\S+)', line)
    if not m:
        raise InvalidInput("Invalid use calendar syntax")
    name = m.group(1)

    def run(ctx: CommandContext) -> None:
        ctx.registry.use_calendar(name)
        ctx.view.display_message(f"Using calendar '{name}'")
    return run


# ==================== Event Creation ====================

def _create_single(subject: str, start: datetime, end: datetime) -> Command:
    def run(ctx: CommandContext) -> None:
        ctx.registry.add_event(EventRecord(subject=subject, start=start, end=end))
        ctx.view.display_message("Event created successfully")
    return run


def _create_series(subject: str, start: datetime, end: Optional[datetime], days: str,
                   count: Optional[str], until: Optional[str]) -> Command:
    template = SeriesTemplate(
        subject=subject,
        start=start,
        end=end,
        weekdays=parse_weekdays(days),
        repeat_count=int(count) if count is not None else None,
        repeat_until=parse_date(until) if until is not None else None,
    )

    def run(ctx: CommandContext) -> None:
        occurrences = ctx.registry.add_series(template)
        ctx.view.display_message(f"Event series created with {len(occurrences)} events")
    return run


_TIMED_SERIES = (
    'create event ' + SUBJECT + r' from (\S+) to (\S+) repeats ([A-Z]+)'
    r'(?: for (\d+) times| until (\S+))'
)
_TIMED_SINGLE = 'create event ' + SUBJECT + r' from (\S+) to (\S+)'
_ALL_DAY_SERIES = (
    'create event ' + SUBJECT + r' on (\S+) repeats ([A-Z]+)'
    r'(?: for (\d+) times| until (\S+))'
)
_ALL_DAY_SINGLE = 'create event ' + SUBJECT + r' on (\S+)'


def parse_create_event(line: str) -> Command:
    m = _fullmatch(_TIMED_SERIES, line)
    if m:
        return _create_series(_subject(m, 1), parse_datetime(m.group(3)),
                              parse_datetime(m.group(4)), m.group(5), m.group(6), m.group(7))

    m = _fullmatch(_TIMED_SINGLE, line)
    if m:
        return _create_single(_subject(m, 1), parse_datetime(m.group(3)), parse_datetime(m.group(4)))

    m = _fullmatch(_ALL_DAY_SERIES, line)
    if m:
        start, _ = all_day_bounds(parse_date(m.group(3)))
        return _create_series(_subject(m, 1), start, None, m.group(4), m.group(5), m.group(6))

    m = _fullmatch(_ALL_DAY_SINGLE, line)
    if m:
        start, end = all_day_bounds(parse_date(m.group(3)))
        return _create_single(_subject(m, 1), start, end)

    raise InvalidInput("Invalid create event syntax")


# ==================== Editing ====================

def parse_edit_event(line: str) -> Command:
    m = _fullmatch(r'edit event (\w+) ' + SUBJECT + r' from (\S+) to (\S+) with (.+)', line)
    if not m:
        raise InvalidInput("Invalid edit event syntax")
    prop = EventProperty.parse(m.group(1))
    subject = _subject(m, 2)
    start, end = parse_datetime(m.group(4)), parse_datetime(m.group(5))
    value = _property_value(prop, m.group(6))

    def run(ctx: CommandContext) -> None:
        ctx.registry.edit_single(subject, start, end, prop, value)
        ctx.view.display_message("Event updated successfully")
    return run


def _parse_scoped_edit(line: str, keyword: str, scope: EditScope) -> Command:
    m = _fullmatch(f'edit {keyword} ' + r'(\w+) ' + SUBJECT + r' from (\S+) with (.+)', line)
    if not m:
        raise InvalidInput(f"Invalid edit {keyword} syntax")
    prop = EventProperty.parse(m.group(1))
    subject = _subject(m, 2)
    start = parse_datetime(m.group(4))
    value = _property_value(prop, m.group(5))

    def run(ctx: CommandContext) -> None:
        updated = ctx.registry.edit(scope, subject, start, prop, value)
        ctx.view.display_message(f"{len(updated)} event(s) updated successfully")
    return run


def parse_edit_events(line: str) -> Command:
    return _parse_scoped_edit(line, 'events', EditScope.FROM)


def parse_edit_series(line: str) -> Command:
    return _parse_scoped_edit(line, 'series', EditScope.ALL)


# ==================== Queries ====================

def parse_print_on(line: str) -> Command:
    m = _fullmatch(r'print events on (\S+)', line)
    if not m:
        raise InvalidInput("Invalid print events syntax")
    day = parse_date(m.group(1))

    def run(ctx: CommandContext) -> None:
        ctx.view.display_events(ctx.registry.get_events_on(day))
    return run


def parse_print_range(line: str) -> Command:
    m = _fullmatch(r'print events from (\S+) to (\S+)', line)
    if not m:
        raise InvalidInput("Invalid print events syntax")
    start, end = parse_datetime(m.group(1)), parse_datetime(m.group(2))

    def run(ctx: CommandContext) -> None:
        ctx.view.display_events(ctx.registry.get_events_in_range(start, end))
    return run


def parse_show_status(line: str) -> Command:
    m = _fullmatch(r'show status on (\S+)', line)
    if not m:
        raise InvalidInput("Invalid show status syntax")
    instant = parse_datetime(m.group(1))

    def run(ctx: CommandContext) -> None:
        ctx.view.display_status(ctx.registry.is_busy(instant))
    return run


def parse_dashboard(line: str) -> Command:
    m = _fullmatch(r'show calendar dashboard from (\S+) to (\S+)', line)
    if not m:
        raise InvalidInput("Invalid dashboard syntax")
    start, end = parse_date(m.group(1)), parse_date(m.group(2))

    def run(ctx: CommandContext) -> None:
        calendar = ctx.registry.require_current_calendar()
        ctx.view.display_dashboard(generate_analytics(calendar, start, end))
    return run


# ==================== Copying ====================

def parse_copy_event(line: str) -> Command:
    m = _fullmatch(r'copy event ' + SUBJECT + r' on (\S+) --target (\S+) to (\S+)', line)
    if not m:
        raise InvalidInput("Invalid copy event syntax")
    subject = _subject(m, 1)
    source_start, target, target_start = parse_datetime(m.group(3)), m.group(4), parse_datetime(m.group(5))

    def run(ctx: CommandContext) -> None:
        ctx.registry.copy_event(subject, source_start, target, target_start)
        ctx.view.display_message(f"Event copied to calendar '{target}'")
    return run


def parse_copy_on(line: str) -> Command:
    m = _fullmatch(r'copy events on (\S+) --target (\S+) to (\S+)', line)
    if not m:
        raise InvalidInput("Invalid copy events syntax")
    source_date, target, target_date = parse_date(m.group(1)), m.group(2), parse_date(m.group(3))

    def run(ctx: CommandContext) -> None:
        copied = ctx.registry.copy_events_on_date(source_date, target, target_date)
        ctx.view.display_message(f"{copied} event(s) copied to calendar '{target}'")
    return run


def parse_copy_between(line: str) -> Command:
    m = _fullmatch(r'copy events between (\S+) and (\S+) --target (\S+) to (\S+)', line)
    if not m:
        raise InvalidInput("Invalid copy events syntax")
    start, end = parse_date(m.group(1)), parse_date(m.group(2))
    target, target_start = m.group(3), parse_date(m.group(4))

    def run(ctx: CommandContext) -> None:
        copied = ctx.registry.copy_events_between(start, end, target, target_start)
        ctx.view.display_message(f"{copied} event(s) copied to calendar '{target}'")
    return run


# ==================== Export ====================

def parse_export(line: str) -> Command:
    m = _fullmatch(r'export cal (.+)', line)
    if not m:
        raise InvalidInput("Invalid export syntax")
    file_name = _unquote(m.group(1))

    def run(ctx: CommandContext) -> None:
        calendar = ctx.registry.require_current_calendar()
        path = export_calendar(calendar, file_name, ctx.export_dir)
        ctx.view.display_message(f"Calendar exported to {path}")
    return run


# ==================== Dispatch Table ====================

def _prefix(prefix: str) -> Callable[[str], bool]:
    return lambda line: line.startswith(prefix)


COMMAND_TABLE: list[tuple[Callable[[str], bool], Callable[[str], Command]]] = [
    (_prefix('create calendar '), parse_create_calendar),
    (_prefix('edit calendar '), parse_edit_calendar),
    (_prefix('use calendar '), parse_use_calendar),
    (_prefix('create event '), parse_create_event),
    (_prefix('edit event '), parse_edit_event),
    (_prefix('edit events '), parse_edit_events),
    (_prefix('edit series '), parse_edit_series),
    (_prefix('print events on '), parse_print_on),
    (_prefix('print events from '), parse_print_range),
    (_prefix('show status on '), parse_show_status),
    (_prefix('show calendar dashboard '), parse_dashboard),
    (_prefix('copy event '), parse_copy_event),
    (_prefix('copy events on '), parse_copy_on),
    (_prefix('copy events between '), parse_copy_between),
    (_prefix('export cal '), parse_export),
]


def parse_command(line: str) -> Command:
    """
    Parse one command line.

    Raises:
        InvalidInput: if no command matches or the matching one is malformed.
    """
    line = line.strip()
    for accepts, parse in COMMAND_TABLE:
        if accepts(line):
            return parse(line)
    raise InvalidInput(f"Unknown command: {line}")


# ==================== Interpreter ====================

class CommandInterpreter:
    """
    Runs command lines against a registry.

    Errors from a command are shown through the view and do not stop the
    session.
    """

    EXIT = "exit"

    def __init__(self, registry: CalendarRegistry, view: TextView,
                 export_dir: Optional[Path] = None):
        self.context = CommandContext(registry=registry, view=view, export_dir=export_dir)

    @property
    def view(self) -> TextView:
        return self.context.view

    def execute(self, line: str) -> bool:
        """
        Run one line, reporting errors through the view.

        Returns:
            True if the command succeeded.
        """
        try:
            command = parse_command(line)
            command(self.context)
            return True
        except CalendarError as e:
            _debug_print(f"{type(e).__name__} for {line!r}: {e}")
            self.view.display_error(str(e))
            return False

    def run_interactive(self, input_stream: TextIO) -> None:
        self.view.display_message("Calendar started. Enter commands (type 'exit' to quit):")
        for raw in input_stream:
            line = raw.strip()
            if not line:
                continue
            if line.lower() == self.EXIT:
                self.view.display_message("Calendar has been terminated.")
                return
            self.execute(line)

    def run_lines(self, lines: Iterable[str]) -> bool:
        """
        Run a scripted sequence of commands.

        Blank lines and lines starting with '#' are skipped. The script
        must end with 'exit'.

        Returns:
            True if an 'exit' command was reached.
        """
        for raw in lines:
            line = raw.strip()
            if not line or line.startswith('#'):
                continue
            if line.lower() == self.EXIT:
                return True
            self.execute(line)
        self.view.display_error("Command file must end with 'exit'")
        return False

    def run_headless(self, commands_file: Path) -> bool:
        with open(commands_file, 'r', encoding='utf-8') as f:
            return self.run_lines(f.read().splitlines())
