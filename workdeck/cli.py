"""Workdeck CLI: launch the dashboard or wait for a work record's condition."""

import argparse
import dataclasses
import logging
import sys

from . import __version__
from .conditions import parse_expression
from .config import (
    DEFAULT_WAIT_CONDITION,
    get_logs_dir,
    get_results_path,
    load_client_config,
    parse_duration,
)
from .exceptions import NotFoundError, ValidationError, WorkdeckError
from .results import STATUS_WAITING, build_status_result, write_result

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _client_config(args: argparse.Namespace):
    """Resolve connection settings, exiting with a message on a bad config file."""
    try:
        return load_client_config(
            http_endpoint=args.http_endpoint,
            token=args.token,
            insecure=args.insecure,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def cmd_tui(args: argparse.Namespace) -> None:
    """Run the interactive dashboard."""
    from .dashboard.app import WorkdeckApp

    config = _client_config(args)

    # The terminal belongs to the dashboard, so logs go to a file.
    log_path = get_logs_dir() / "dashboard.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_path),
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    try:
        WorkdeckApp(config).run()
    except Exception:
        logger.exception("Dashboard crashed")
        raise


def cmd_wait(args: argparse.Namespace) -> None:
    """Block until a work record satisfies a condition expression."""
    from .client import WorkdeckClient
    from .waiter import wait_for_condition

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        timeout = parse_duration(args.timeout)
        poll_interval = parse_duration(args.poll_interval)
        expression = parse_expression(args.condition)
    except (ValueError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    config = _client_config(args)
    results_path = get_results_path(args.results_path)
    condition = str(expression)

    def report(detail, met: bool) -> None:
        if met:
            status, message = condition, f"condition {condition!r} met"
        else:
            status, message = STATUS_WAITING, f"waiting for condition {condition!r}"
        logger.info("%s/%s: %s", args.consumer, args.name, message)
        if results_path is not None:
            result = build_status_result(
                args.name, args.consumer, status, message, dataclasses.asdict(detail)
            )
            write_result(results_path, result)

    with WorkdeckClient(config) as client:
        try:
            client.consumers.get_by_name(args.consumer)
            try:
                client.bundles.get_by_name(args.consumer, args.name)
            except NotFoundError:
                raise NotFoundError(
                    f'work "{args.name}" not found in consumer "{args.consumer}"'
                ) from None

            wait_for_condition(
                client,
                args.consumer,
                args.name,
                expression,
                poll_interval=poll_interval,
                on_each_poll=report,
                timeout=timeout,
            )
        except WorkdeckError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    print(f'work "{args.name}" in consumer "{args.consumer}": {condition}')


def cmd_version(args: argparse.Namespace) -> None:
    """Print the version."""
    print(f"workdeck {__version__}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--http-endpoint", help="Backend API URL (default: http://localhost:8000)")
    parser.add_argument("--token", help="Bearer token for the backend API")
    parser.add_argument(
        "--insecure", action="store_true", default=None,
        help="Skip TLS certificate verification",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workdeck",
        description="Browse and wait on work-dispatch records",
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    sub = parser.add_subparsers(dest="command")

    # tui
    p_tui = sub.add_parser("tui", help="Interactive dashboard")
    _add_connection_args(p_tui)
    p_tui.set_defaults(func=cmd_tui)

    # wait
    p_wait = sub.add_parser("wait", help="Wait for a work record to reach a condition")
    p_wait.add_argument("--name", required=True, help="Work record name")
    p_wait.add_argument("--consumer", required=True, help="Consumer the record belongs to")
    p_wait.add_argument(
        "--for", dest="condition", default=DEFAULT_WAIT_CONDITION,
        help='Condition expression, e.g. "Job:Complete OR Job:Failed" (default: Available)',
    )
    p_wait.add_argument("--timeout", default="5m", help="Give up after this long (default: 5m)")
    p_wait.add_argument("--poll-interval", default="1s", help="Time between polls (default: 1s)")
    p_wait.add_argument("--results-path", help="Write a JSON status file after every poll")
    _add_connection_args(p_wait)
    p_wait.set_defaults(func=cmd_wait)

    # version
    p_version = sub.add_parser("version", help="Show version")
    p_version.set_defaults(func=cmd_version)

    return parser


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(0)

    args.func(args)


if __name__ == "__main__":
    main()
