"""Tests for CLI module."""

from __future__ import annotations

import io
import os
import sys
from unittest.mock import MagicMock, patch

import pytest
from conftest import T0, T1, FakeClockingServer

from clocking_client.cli import build_parser, choose_title, main, run_dashboard
from clocking_client.gateway import ApiGateway


def _run(fake_server: FakeClockingServer, *argv: str) -> int:
    """Run main() against the fake server and return the exit code."""
    return main(list(argv), gateway_factory=lambda server: fake_server.gateway())


class TestCLIParsing:
    """Tests for CLI argument parsing."""

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Verifies --version prints the version and exits cleanly."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "clocking-client" in capsys.readouterr().out

    def test_report_defaults(self) -> None:
        """Report options default to today through now in daily_detail view."""
        args = build_parser().parse_args(["report"])
        assert args.pick is None
        assert args.offset is None
        assert args.days is None
        assert args.view == "daily_detail"

    def test_report_rejects_unknown_view(self) -> None:
        """Only the four view types are accepted by --view."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["report", "--view", "weekly"])

    def test_finish_collects_note_lines(self) -> None:
        """Repeated -n values are collected in order."""
        args = build_parser().parse_args(["finish", "A", "-n", "one", "-n", "two"])
        assert args.notes == ["one", "two"]

    def test_start_no_wait_flag(self) -> None:
        """start accepts -n/--no-wait and waits for notes by default."""
        assert build_parser().parse_args(["start", "A"]).no_wait is False
        assert build_parser().parse_args(["start", "-n", "A"]).no_wait is True
        assert build_parser().parse_args(["start", "--no-wait"]).title is None

    def test_dashboard_command(self) -> None:
        """Verifies 'dashboard' subcommand launches the web dashboard.

        Business context:
        The dashboard is the interactive surface; it must start without
        touching the clocking service from the CLI process.

        Arrangement:
        Mock run_dashboard to capture invocation.

        Action:
        Call main() with dashboard and network arguments.

        Assertion Strategy:
        Validates run_dashboard called with the parsed host and port.
        """
        with patch("clocking_client.cli.run_dashboard") as mock_run:
            result = main(["dashboard", "--host", "0.0.0.0", "--port", "9000"])

        assert result == 0
        mock_run.assert_called_once_with(host="0.0.0.0", port=9000)

    def test_dashboard_server_flag_sets_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """--server is handed to the dashboard process through the environment."""
        monkeypatch.setenv("CLOCKING_SERVER_URL", "http://before.test")
        with patch("clocking_client.cli.run_dashboard"):
            main(["--server", "http://tracker.lan:9000", "dashboard"])
        assert os.environ["CLOCKING_SERVER_URL"] == "http://tracker.lan:9000"


class TestRunDashboard:
    """Tests for run_dashboard function."""

    def test_delegates_to_web_module(self) -> None:
        """Verifies run_dashboard delegates to web.run_dashboard with defaults."""
        with patch("clocking_client.web.run_dashboard") as mock_run:
            run_dashboard()
        mock_run.assert_called_once_with(host="127.0.0.1", port=8765)


class TestChooseTitle:
    """Tests for interactive title selection."""

    def test_without_recent_titles_reads_title(self) -> None:
        """Without recent titles the typed answer is the title, trimmed."""
        assert choose_title([], input_fn=lambda _: " New task ") == "New task"

    def test_without_recent_titles_empty_is_error(self) -> None:
        """An empty typed title is refused."""
        with pytest.raises(ValueError, match="Title cannot be empty"):
            choose_title([], input_fn=lambda _: "")

    def test_empty_answer_picks_first(self) -> None:
        """Choices are listed 1-based and Enter picks the first."""
        lines: list[str] = []
        title = choose_title(["A", "B"], input_fn=lambda _: "", output_fn=lines.append)
        assert title == "A"
        assert lines == ["1: A", "2: B"]

    def test_index(self) -> None:
        """A number picks by 1-based index."""
        assert choose_title(["A", "B"], input_fn=lambda _: "2", output_fn=lambda _: None) == "B"

    @pytest.mark.parametrize(("answer", "message"), [("x", "Invalid input"), ("3", "Invalid index")])
    def test_invalid_answers(self, answer: str, message: str) -> None:
        """Non-numeric and out-of-range answers are refused."""
        with pytest.raises(ValueError, match=message):
            choose_title(["A", "B"], input_fn=lambda _: answer, output_fn=lambda _: None)


class TestStatusCommands:
    """Tests for status and recent."""

    def test_no_command_defaults_to_status(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Running without a command shows the status."""
        assert _run(fake_server) == 0
        assert "(No open sessions)" in capsys.readouterr().out

    def test_status_lists_open_sessions(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """status prints open sessions with start time and recent titles."""
        fake_server.seed_open("Write report")

        assert _run(fake_server, "status") == 0

        out = capsys.readouterr().out
        assert "Write report:" in out
        assert "Started at:" in out
        assert "Recent:" in out

    def test_recent(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """recent prints one title per line, most recent first."""
        fake_server.recent = ["B", "A"]
        assert _run(fake_server, "recent") == 0
        assert capsys.readouterr().out.splitlines() == ["B", "A"]

    def test_load_failure_exits_1(self, fake_server: FakeClockingServer) -> None:
        """An unreachable service fails the command before any action."""
        fake_server.break_transport("/api/")
        assert _run(fake_server, "status") == 1

    def test_server_flag_reaches_factory(self, fake_server: FakeClockingServer) -> None:
        """--server is passed to the gateway factory."""
        seen: list[str | None] = []

        def factory(server: str | None) -> ApiGateway:
            seen.append(server)
            return fake_server.gateway()

        main(["--server", "http://tracker.lan", "recent"], gateway_factory=factory)
        assert seen == ["http://tracker.lan"]


class TestStartCommand:
    """Tests for the start command."""

    def test_start_no_wait_leaves_session_open(self, fake_server: FakeClockingServer) -> None:
        """--no-wait starts the session and exits without reading notes."""
        stdin = MagicMock()
        with patch.object(sys, "stdin", stdin):
            assert _run(fake_server, "start", "--no-wait", "Write report") == 0

        assert fake_server.open[0]["title"] == "Write report"
        stdin.read.assert_not_called()

    def test_start_waits_for_notes_then_finishes(self, fake_server: FakeClockingServer) -> None:
        """Verifies start reads notes until EOF and then finishes the session.

        Business context:
        The default CLI workflow clocks one activity in a single command:
        start it, type notes while working, and press Ctrl-D when done.

        Arrangement:
        Replace stdin with the notes the user would type.

        Action:
        Run 'start' without --no-wait.

        Assertion Strategy:
        Validates the session was started, then finished with the stdin
        text as its notes, leaving nothing open.
        """
        with patch.object(sys, "stdin", io.StringIO("Drafted intro\n")):
            assert _run(fake_server, "start", "Write report") == 0

        assert fake_server.calls("/api/start/", "POST")
        assert fake_server.open == []
        assert fake_server.finished[0]["id"] == {"title": "Write report", "start": T0}
        assert fake_server.finished[0]["notes"] == "Drafted intro\n"

    def test_start_wait_uses_trimmed_title(self, fake_server: FakeClockingServer) -> None:
        """The finish after waiting targets the title that was actually started."""
        with patch.object(sys, "stdin", io.StringIO("")):
            assert _run(fake_server, "start", "  Write report  ") == 0
        assert fake_server.calls("/api/finish/")[0].url.raw_path == (
            b"/api/finish/Write%20report"
        )

    def test_rejected_start_does_not_wait(self, fake_server: FakeClockingServer) -> None:
        """A start refused because a session is open never reads stdin."""
        fake_server.seed_open("A")
        stdin = MagicMock()
        with patch.object(sys, "stdin", stdin):
            assert _run(fake_server, "start", "B") == 1

        stdin.read.assert_not_called()
        assert fake_server.calls("/api/start/") == []
        assert fake_server.calls("/api/finish/") == []

    def test_failed_start_does_not_wait(self, fake_server: FakeClockingServer) -> None:
        """A start the service refuses exits 1 without finishing anything."""
        fake_server.fail("/api/start/", 500)
        stdin = MagicMock()
        with patch.object(sys, "stdin", stdin):
            assert _run(fake_server, "start", "A") == 1
        stdin.read.assert_not_called()

    def test_start_picks_from_recent(self, fake_server: FakeClockingServer) -> None:
        """Without a title the user picks from recent titles by index."""
        fake_server.recent = ["Review", "Write report"]
        with patch("builtins.input", return_value="2"):
            assert _run(fake_server, "start", "-n") == 0
        assert fake_server.open[0]["title"] == "Write report"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_empty_title_falls_back_to_chooser(
        self, fake_server: FakeClockingServer, title: str
    ) -> None:
        """An empty title argument behaves like an omitted one."""
        fake_server.recent = ["Review"]
        with patch("builtins.input", return_value="") as mock_input:
            assert _run(fake_server, "start", "--no-wait", title) == 0

        mock_input.assert_called_once()
        assert fake_server.open[0]["title"] == "Review"

    def test_start_invalid_choice_exits_1(self, fake_server: FakeClockingServer) -> None:
        """An invalid index exits 1 without starting anything."""
        fake_server.recent = ["Review"]
        with patch("builtins.input", return_value="9"):
            assert _run(fake_server, "start", "-n") == 1
        assert fake_server.calls("/api/start/") == []


class TestFinishCommand:
    """Tests for the finish command."""

    def test_finish_joins_note_lines(self, fake_server: FakeClockingServer) -> None:
        """Each -n value becomes one line of the notes."""
        fake_server.seed_open("A")
        assert _run(fake_server, "finish", "A", "-n", "one", "-n", "two") == 0
        assert fake_server.finished[0]["notes"] == "one\ntwo"

    def test_finish_reads_notes_from_stdin(self, fake_server: FakeClockingServer) -> None:
        """A single '-n -' reads the notes from stdin."""
        fake_server.seed_open("A")
        with patch.object(sys, "stdin", io.StringIO("from stdin\n")):
            assert _run(fake_server, "finish", "A", "-n", "-") == 0
        assert fake_server.finished[0]["notes"] == "from stdin\n"

    def test_finish_not_open_exits_1(self, fake_server: FakeClockingServer) -> None:
        """Finishing a title that is not open fails without a network call."""
        assert _run(fake_server, "finish", "Ghost") == 1
        assert fake_server.calls("/api/finish/") == []

    def test_finish_server_error_exits_1(self, fake_server: FakeClockingServer) -> None:
        """A server error on finish exits 1."""
        fake_server.seed_open("A")
        fake_server.fail("/api/finish/", 500)
        assert _run(fake_server, "finish", "A") == 1


class TestLatestCommand:
    """Tests for the latest command."""

    def test_closed_session(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A closed session prints its start ~ end range and notes."""
        fake_server.finished = [
            {"id": {"title": "A", "start": T0}, "end": T1, "notes": "line 1\nline 2"}
        ]

        assert _run(fake_server, "latest", "A") == 0

        out = capsys.readouterr().out
        assert " ~ " in out
        assert "Notes:" in out
        assert "line 2" in out

    def test_open_session(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """An open session prints only its start."""
        fake_server.seed_open("A")
        assert _run(fake_server, "latest", "A") == 0
        assert "Started at:" in capsys.readouterr().out

    def test_not_found(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A null answer from the service prints '(Not found)'."""
        assert _run(fake_server, "latest", "Ghost") == 0
        assert "(Not found)" in capsys.readouterr().out


class TestReportCommand:
    """Tests for the report command."""

    def test_report_prints_text(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Verifies the report body goes to stdout for piping."""
        assert _run(fake_server, "report") == 0
        assert capsys.readouterr().out.strip() == "Daily report 0 null daily_detail"

    def test_report_from_and_days(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--from and --days map onto offset and day count."""
        assert _run(fake_server, "report", "-f", "2", "-d", "3", "--view", "dist") == 0
        assert capsys.readouterr().out.strip() == "Daily report 2 3 dist"

    def test_report_quick_pick(
        self, fake_server: FakeClockingServer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """--pick uses the named shortcut."""
        assert _run(fake_server, "report", "--pick", "last_7_days") == 0
        assert capsys.readouterr().out.strip() == "Daily report 6 null daily_detail"

    def test_report_bad_date_range_exits_1(self, fake_server: FakeClockingServer) -> None:
        """A reversed date range fails locally."""
        code = _run(fake_server, "report", "--start-date", "2024-05-03", "--end-date", "2024-05-01")
        assert code == 1
        assert fake_server.calls("/api/report/") == []

    def test_report_server_error_exits_1(self, fake_server: FakeClockingServer) -> None:
        """A server error on the report exits 1."""
        fake_server.fail("/api/report/", 500)
        assert _run(fake_server, "report") == 1
