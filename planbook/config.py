"""
Configuration parser for Planbook.

Reads an optional TOML file with general settings and calendars to
create at startup.
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from .debug import debug_print
from .timezone_utils import get_timezone


DEFAULT_TIMEZONE = "America/New_York"


def _debug_print(message: str) -> None:
    debug_print("CONFIG", message)


@dataclass
class CalendarConfig:
    """A calendar to create when the application starts."""
    name: str
    timezone: str = DEFAULT_TIMEZONE


@dataclass
class Config:
    """Main configuration container for Planbook."""

    default_timezone: str = DEFAULT_TIMEZONE
    export_dir: Path = field(default_factory=lambda: Path("exports"))
    debug: bool = False
    calendars: list[CalendarConfig] = field(default_factory=list)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'planbook' / 'planbook.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a TOML file.

        An explicitly given file must exist. When no path is given the
        default location is used if present, otherwise defaults apply.

        Raises:
            FileNotFoundError: if an explicit config_path does not exist.
            InvalidInput: if a configured timezone is unknown.
        """
        if config_path is None:
            config_path = cls.get_default_config_path()
            if not config_path.exists():
                _debug_print(f"no config at {config_path}, using defaults")
                return cls()
        elif not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a Config from parsed TOML data."""
        general = data.get('General', {})
        default_timezone = general.get('default_timezone', DEFAULT_TIMEZONE)
        get_timezone(default_timezone)

        export_dir = Path(os.path.expanduser(general.get('export_dir', 'exports')))
        debug = bool(general.get('debug', False))

        # Supports both [Calendar.Name] keys and a [Calendar] table of sub-tables
        calendars = []
        for key, value in data.items():
            if key.startswith('Calendar.') and isinstance(value, dict):
                calendars.append(cls._calendar_from(key.split('.', 1)[1], value, default_timezone))
            elif key == 'Calendar' and isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    if isinstance(sub_value, dict):
                        calendars.append(cls._calendar_from(sub_key, sub_value, default_timezone))

        _debug_print(f"loaded {len(calendars)} calendars from config")
        return cls(
            default_timezone=default_timezone,
            export_dir=export_dir,
            debug=debug,
            calendars=calendars,
        )

    @staticmethod
    def _calendar_from(name: str, value: dict, default_timezone: str) -> CalendarConfig:
        timezone = value.get('timezone', default_timezone)
        get_timezone(timezone)
        return CalendarConfig(name=value.get('name', name), timezone=timezone)
