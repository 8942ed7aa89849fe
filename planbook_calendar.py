#!/usr/bin/env python3
"""
Planbook Calendar - a text calendar with recurring series and multi-timezone calendars.

This is the main entry point for the application.
"""

import sys
import argparse
from pathlib import Path

from planbook.config import Config
from planbook.commands import CommandInterpreter
from planbook.debug import set_debug
from planbook.errors import CalendarError
from planbook.registry import CalendarRegistry
from planbook.text_view import TextView


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Planbook Calendar - manage calendars from the command line"
    )
    parser.add_argument(
        "--mode",
        choices=["interactive", "headless"],
        default="interactive",
        help="Read commands from stdin (interactive) or from a file (headless)"
    )
    parser.add_argument(
        "commands_file",
        nargs="?",
        type=Path,
        help="Command file for headless mode"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    args = parser.parse_args(argv)
    if args.mode == "headless" and args.commands_file is None:
        parser.error("headless mode requires a command file")
    return args


def build_registry(config: Config) -> CalendarRegistry:
    """Create the registry and the calendars listed in the configuration."""
    registry = CalendarRegistry()
    for calendar in config.calendars:
        registry.create_calendar(calendar.name, calendar.timezone)
    if config.calendars:
        registry.use_calendar(config.calendars[0].name)
    return registry


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    set_debug(args.debug)

    # Load configuration
    try:
        config = Config.load(args.config)
        registry = build_registry(config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"\nDefault configuration location: {Config.get_default_config_path()}", file=sys.stderr)
        sys.exit(1)
    except (CalendarError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if config.debug:
        set_debug(True)

    interpreter = CommandInterpreter(registry, TextView(sys.stdout), config.export_dir)

    if args.mode == "headless":
        try:
            completed = interpreter.run_headless(args.commands_file)
        except OSError as e:
            print(f"Error: cannot read {args.commands_file}: {e}", file=sys.stderr)
            sys.exit(1)
        sys.exit(0 if completed else 1)

    interpreter.run_interactive(sys.stdin)


if __name__ == "__main__":
    main()
