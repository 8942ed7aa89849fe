"""
Diagnostic output for Planbook.

Debug lines are timestamped and written to stderr, tagged with the
component that produced them. Output is off unless enabled from the
command line or the configuration file.
"""

import sys
from datetime import datetime


_debug_enabled: bool = False


def set_debug(enabled: bool):
    """Enable or disable debug output for the whole application."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    return _debug_enabled


def debug_print(tag: str, message: str) -> None:
    if not _debug_enabled:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {tag}: {message}", file=sys.stderr)
