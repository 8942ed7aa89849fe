"""Tests for the planbook_calendar entry script."""

import pytest

import planbook_calendar
from planbook.config import CalendarConfig, Config
from planbook.debug import is_debug, set_debug


@pytest.fixture(autouse=True)
def reset_debug():
    yield
    set_debug(False)


@pytest.fixture
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


class TestArgs:
    def test_defaults(self):
        args = planbook_calendar.parse_args([])
        assert args.mode == "interactive"
        assert args.commands_file is None
        assert not args.debug

    def test_headless_requires_file(self):
        with pytest.raises(SystemExit):
            planbook_calendar.parse_args(["--mode", "headless"])


class TestBuildRegistry:
    def test_first_calendar_in_use(self):
        config = Config(calendars=[
            CalendarConfig("Work", "America/New_York"),
            CalendarConfig("Home", "America/Los_Angeles"),
        ])
        registry = planbook_calendar.build_registry(config)
        assert registry.calendar_names() == ["Work", "Home"]
        assert registry.get_current_calendar().name == "Work"

    def test_no_calendars(self):
        assert planbook_calendar.build_registry(Config()).get_current_calendar() is None


class TestMain:
    def test_headless_success(self, tmp_path, no_user_config, capsys):
        script = tmp_path / "commands.txt"
        script.write_text(
            "create calendar --name Work --timezone America/New_York\n"
            "use calendar --name Work\n"
            "show status on 2025-05-05T10:00\n"
            "exit\n",
            encoding="utf-8",
        )
        with pytest.raises(SystemExit) as exc:
            planbook_calendar.main(["--mode", "headless", str(script), "--debug"])
        assert exc.value.code == 0
        captured = capsys.readouterr()
        assert captured.out.splitlines()[-1] == "Available"
        assert "REGISTRY: created calendar 'Work'" in captured.err
        assert is_debug()

    def test_headless_without_exit_fails(self, tmp_path, no_user_config, capsys):
        script = tmp_path / "commands.txt"
        script.write_text("create calendar --name Work --timezone America/New_York\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            planbook_calendar.main(["--mode", "headless", str(script)])
        assert exc.value.code == 1

    def test_missing_config_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            planbook_calendar.main(["-c", str(tmp_path / "nope.toml"), "--mode", "headless",
                                    str(tmp_path / "x.txt")])
        assert exc.value.code == 1
        assert "Configuration file not found" in capsys.readouterr().err
