"""
CLI entry point for the clocking client.

PURPOSE: Command-line access to the same actions as the web dashboard.
AI CONTEXT: Every command builds a gateway + controller, loads state, runs
one action, and maps the result onto an exit code.

USAGE:
    clocking-client status                        # Open sessions + recent titles
    clocking-client start "Write report"          # Start, type notes, Ctrl-D finishes
    clocking-client start -n "Write report"       # Start and leave it open
    clocking-client start                         # Pick from recent titles
    clocking-client finish "Write report" -n "Drafted intro" -n "Sent to review"
    echo "notes" | clocking-client finish "Write report" -n -
    clocking-client latest "Write report"
    clocking-client report --pick last_7_days --view daily
    clocking-client report --start-date 2024-05-01 --end-date 2024-05-03
    clocking-client dashboard --port 8765
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import TYPE_CHECKING

from .config import Config
from .query import QUICK_PICKS, ViewType

if TYPE_CHECKING:
    from .controller import ActionResult, Controller
    from .gateway import ApiGateway

PROG = "clocking-client"
RECENT_LIMIT = 5

GatewayFactory = Callable[[str | None], "ApiGateway"]


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def _default_gateway(server: str | None) -> ApiGateway:
    from .gateway import ApiGateway

    return ApiGateway(server)


def _report_result(result: ActionResult) -> int:
    """Log the outcome of an action and turn it into an exit code."""
    if result.success:
        _log(result.message, emoji="✅")
        return 0
    _log(result.message, emoji="⚠️")
    return 1


def choose_title(
    recent_titles: Sequence[str],
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> str:
    """
    Ask the user for a title, offering recent titles when there are any.

    With recent titles, an empty answer picks the first one and a number
    picks by 1-based index. Without recent titles, the answer is the title.

    Args:
        recent_titles: Most-recent-first titles.
        input_fn: Prompt reader (injectable for tests).
        output_fn: Line writer for the choice list.

    Returns:
        The chosen title.

    Raises:
        ValueError: Empty title typed, or an invalid index.

    Example:
        >>> choose_title(["A", "B"], input_fn=lambda _: "2")
        'B'
    """
    if not recent_titles:
        answer = input_fn("Input Title: ").strip()
        if not answer:
            raise ValueError("Title cannot be empty.")
        return answer

    for index, title in enumerate(recent_titles, start=1):
        output_fn(f"{index}: {title}")
    answer = input_fn("Choose by index (default 1): ").strip()
    if not answer:
        return recent_titles[0]
    try:
        index = int(answer)
    except ValueError:
        raise ValueError(f"Invalid input: {answer}.") from None
    if not 0 < index <= len(recent_titles):
        raise ValueError(f"Invalid index: {index}.")
    return recent_titles[index - 1]


def _read_notes(notes: Sequence[str] | None) -> str:
    """Join -n values into notes; a single '-' reads stdin."""
    if not notes:
        return ""
    if len(notes) == 1 and notes[0] == "-":
        return sys.stdin.read()
    return "\n".join(notes)


# =============================================================================
# Commands (controller already loaded)
# =============================================================================


def _print_status(controller: Controller) -> int:
    from .presenters import DashboardPresenter

    overview = DashboardPresenter(controller).get_overview()
    if overview.ongoing:
        for item in overview.ongoing:
            print(f"{item.title}:")
            print(f"\tStarted at: {item.started_display} ({item.elapsed_display})")
    else:
        print("(No open sessions)")
    if overview.recent_titles:
        print("Recent:")
        for title in overview.recent_titles[:RECENT_LIMIT]:
            print(f"\t{title}")
    return 0


async def _cmd_start(controller: Controller, args: argparse.Namespace) -> int:
    """
    Start a session, then by default record notes until EOF and finish it.

    An omitted or empty title falls back to the recent-title chooser. With
    --no-wait the session is left open for a later 'finish'.
    """
    title = args.title
    if title is None or not title.strip():
        try:
            recent = list(controller.state.recent_titles[:RECENT_LIMIT])
            title = choose_title(recent, input_fn=input)
        except ValueError as e:
            _log(str(e), emoji="⚠️")
            return 1

    started = await controller.start(title)
    if not started.success or args.no_wait:
        return _report_result(started)

    _log(started.message, emoji="✅")
    _log("Type notes, Ctrl-D to finish clocking", emoji="📝")
    started_title = started.data["title"] if started.data else title.strip()
    controller.set_notes(started_title, sys.stdin.read())
    return _report_result(await controller.finish(started_title))


async def _cmd_finish(controller: Controller, args: argparse.Namespace) -> int:
    controller.set_notes(args.title, _read_notes(args.notes))
    return _report_result(await controller.finish(args.title))


async def _cmd_latest(controller: Controller, args: argparse.Namespace) -> int:
    result = await controller.view_detail(args.title)
    if not result.success:
        return _report_result(result)
    detail = controller.state.detail
    if detail is None:
        print("(Not found)")
        return 0
    print(f"{detail.title}:")
    if detail.end is None:
        print(f"\tStarted at: {detail.start}")
    else:
        print(f"\t{detail.start} ~ {detail.end}")
    if detail.notes:
        print("\tNotes:")
        for line in detail.notes.splitlines():
            print(f"\t  {line}")
    return 0


async def _cmd_report(controller: Controller, args: argparse.Namespace) -> int:
    if args.pick:
        result = await controller.run_quick_report(args.pick, args.view)
    elif args.start_date or args.end_date:
        result = await controller.run_date_report(args.start_date, args.end_date, args.view)
    else:
        result = await controller.run_form_report(args.offset, args.days, args.view)
    if not result.success:
        return _report_result(result)
    # Note: Using print() intentionally for stdout piping support
    print(controller.state.report)
    return 0


async def run_command(
    args: argparse.Namespace,
    gateway_factory: GatewayFactory | None = None,
) -> int:
    """
    Run one client command against the clocking service.

    Args:
        args: Parsed arguments (command, server and command options).
        gateway_factory: Builds the ApiGateway from the --server value.
            Defaults to ApiGateway; tests inject a mock transport here.

    Returns:
        Exit code: 0 on success, 1 if loading or the action failed.
    """
    from .controller import Controller

    factory = gateway_factory or _default_gateway
    async with factory(args.server) as gateway:
        controller = Controller(gateway)
        loaded = await controller.load()
        if not loaded.success:
            return _report_result(loaded)

        if args.command == "status":
            return _print_status(controller)
        if args.command == "recent":
            for title in controller.state.recent_titles:
                print(title)
            return 0
        if args.command == "start":
            return await _cmd_start(controller, args)
        if args.command == "finish":
            return await _cmd_finish(controller, args)
        if args.command == "latest":
            return await _cmd_latest(controller, args)
        if args.command == "report":
            return await _cmd_report(controller, args)
        raise ValueError(f"Unknown command: {args.command}")


def run_dashboard(host: str = Config.DASHBOARD_HOST, port: int = Config.DASHBOARD_PORT) -> None:
    """
    Launch the local web dashboard.

    Args:
        host: Interface to bind. Default '127.0.0.1' for local-only access.
        port: TCP port for the dashboard.

    Returns:
        None. Blocks until shutdown (Ctrl+C).

    Raises:
        OSError: If port is already in use.
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log(f"Clocking service: {Config.get_server_url()}")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Clocking client - start, finish and report tracked sessions",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--server",
        default=None,
        help="Clocking service root URL (default: $CLOCKING_SERVER_URL or "
        f"{Config.DEFAULT_SERVER_URL})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("status", help="Show open sessions and recent titles")
    subparsers.add_parser("recent", help="List recent titles")

    start_parser = subparsers.add_parser("start", help="Start a session")
    start_parser.add_argument(
        "title",
        nargs="?",
        default=None,
        help="If omitted, choose interactively from recent titles",
    )
    start_parser.add_argument(
        "-n",
        "--no-wait",
        action="store_true",
        help="Leave the session open instead of reading notes from stdin and finishing",
    )

    finish_parser = subparsers.add_parser("finish", help="Finish an open session")
    finish_parser.add_argument("title")
    finish_parser.add_argument(
        "-n",
        "--notes",
        action="append",
        default=None,
        help="Notes line; repeat for several lines. A single '-' reads stdin",
    )

    latest_parser = subparsers.add_parser("latest", help="Show the latest session of a title")
    latest_parser.add_argument("title")

    report_parser = subparsers.add_parser("report", help="Print a report")
    report_parser.add_argument("--pick", choices=sorted(QUICK_PICKS), default=None)
    report_parser.add_argument(
        "-f", "--from", dest="offset", default=None, help="Days before today (default 0)"
    )
    report_parser.add_argument(
        "-d", "--days", default=None, help="Number of days (default: through now)"
    )
    report_parser.add_argument("--start-date", default=None, help="YYYY-MM-DD")
    report_parser.add_argument("--end-date", default=None, help="YYYY-MM-DD (inclusive)")
    report_parser.add_argument(
        "--view",
        choices=[v.value for v in ViewType],
        default=Config.DEFAULT_VIEW_TYPE,
    )

    dashboard_parser = subparsers.add_parser("dashboard", help="Launch web dashboard")
    dashboard_parser.add_argument(
        "--host",
        default=Config.DASHBOARD_HOST,
        help=f"Bind address (default: {Config.DASHBOARD_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=Config.DASHBOARD_PORT,
        help=f"Port number (default: {Config.DASHBOARD_PORT})",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    gateway_factory: GatewayFactory | None = None,
) -> int:
    """
    Main CLI entry point.

    Parses arguments and dispatches to the subcommand. Without a
    subcommand, 'status' is run.

    Args:
        argv: Argument list; defaults to sys.argv[1:].
        gateway_factory: Optional ApiGateway factory for testability.

    Returns:
        Exit code: 0 for success, 1 for a failed or rejected action.

    Raises:
        SystemExit: On --help or argument parsing errors.

    Example:
        >>> # From command line:
        >>> # clocking-client report --pick today
        >>> sys.exit(main())
    """
    args = build_parser().parse_args(argv)

    if args.command == "dashboard":
        if args.server:
            # Read by Config.get_server_url() when uvicorn builds the app
            os.environ["CLOCKING_SERVER_URL"] = args.server
        run_dashboard(host=args.host, port=args.port)
        return 0

    if args.command is None:
        args.command = "status"
    return asyncio.run(run_command(args, gateway_factory))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
