"""
Plain text presentation for the command interpreter.
"""

import sys
from typing import Optional, TextIO

from .analytics import AnalyticsSummary
from .event import EventRecord


def format_event(event: EventRecord) -> str:
    """One-line description of an event."""
    text = (
        f"{event.subject} starting on {event.start:%Y-%m-%d} at {event.start:%H:%M}"
        f" ending on {event.end:%Y-%m-%d} at {event.end:%H:%M}"
    )
    if event.location:
        text += f", Location: {event.location}"
    text += f", Status: {event.status.value}"
    if event.description:
        text += f", Description: {event.description}"
    if event.series_id:
        text += " (series)"
    return text


def format_dashboard(summary: AnalyticsSummary) -> str:
    lines = [
        f"Dashboard {summary.start_date:%Y-%m-%d} to {summary.end_date:%Y-%m-%d}",
        f"Total events: {summary.total_events}",
        f"Average events per day: {summary.average_events_per_day:.2f}",
    ]
    if summary.events_by_subject:
        lines.append("By subject:")
        for subject, count in sorted(summary.events_by_subject.items()):
            lines.append(f"  {subject}: {count}")
    if summary.events_by_weekday:
        lines.append("By weekday:")
        for weekday, count in sorted(summary.events_by_weekday.items()):
            lines.append(f"  {weekday.name.title()}: {count}")
    if summary.events_by_week_index:
        lines.append("By week:")
        for index, count in sorted(summary.events_by_week_index.items()):
            lines.append(f"  Week {index}: {count}")
    if summary.events_by_month:
        lines.append("By month:")
        for (year, month), count in sorted(summary.events_by_month.items()):
            lines.append(f"  {year:04d}-{month:02d}: {count}")
    if summary.busiest_day is not None:
        lines.append(f"Busiest day: {summary.busiest_day:%Y-%m-%d}")
        lines.append(f"Least busy day: {summary.least_busy_day:%Y-%m-%d}")
    lines.append(f"Online events: {summary.online_events}")
    lines.append(f"Offline events: {summary.offline_events}")
    return "\n".join(lines)


class TextView:
    """Writes messages, errors and event listings to a text stream."""

    def __init__(self, output: Optional[TextIO] = None):
        self.output = output if output is not None else sys.stdout

    def display_message(self, message: str) -> None:
        self.output.write(message + "\n")

    def display_error(self, error: str) -> None:
        self.display_message(f"Error: {error}")

    def display_events(self, events: list[EventRecord]) -> None:
        if not events:
            self.display_message("No events found")
            return
        for event in events:
            self.display_message(f"• {format_event(event)}")

    def display_status(self, busy: bool) -> None:
        self.display_message("Busy" if busy else "Available")

    def display_dashboard(self, summary: AnalyticsSummary) -> None:
        self.display_message(format_dashboard(summary))
