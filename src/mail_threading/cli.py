"""Command-line interface for Mail Threading.

This module provides the main entry point for the CLI application. Each
page file holds one decoded list response from the mail API.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from mail_threading import __version__
from mail_threading.config import get_settings
from mail_threading.exceptions import MailThreadingError, PayloadError
from mail_threading.mailapi import parse_page
from mail_threading.models import Folder, Thread
from mail_threading.session import MailboxSession
from mail_threading.threads import aggregate_threads, filter_threads

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mail-threads", description="Mail Threading")
    subparsers = parser.add_subparsers(dest="command", required=True)

    folder_choices = [f.value for f in Folder]

    group_parser = subparsers.add_parser("group", help="Group one page of messages into threads")
    group_parser.add_argument("page", type=Path, help="JSON file with one list response")
    group_parser.add_argument(
        "--folder",
        choices=folder_choices,
        default=None,
        help="Folder the page was fetched from (default: taken from each message)",
    )
    group_parser.add_argument("--json", action="store_true", help="Print threads as JSON")

    merge_parser = subparsers.add_parser(
        "merge",
        help="Merge successive pages, as fetched while scrolling, into threads",
    )
    merge_parser.add_argument("pages", type=Path, nargs="+", help="JSON page files, in fetch order")
    merge_parser.add_argument(
        "--folder",
        choices=folder_choices,
        default=Folder.INBOX.value,
        help="Folder the pages were fetched from (default: inbox)",
    )
    merge_parser.add_argument("--query", default=None, help="Only show threads matching this text")
    merge_parser.add_argument("--json", action="store_true", help="Print threads as JSON")

    return parser


def _load_page(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PayloadError(f"Cannot read page file {path}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PayloadError(f"Page file {path} is not valid JSON: {e}") from e
    if not isinstance(data, (list, dict)):
        raise PayloadError(f"Page file {path} must hold a JSON list or object")
    return data


def _print_threads(threads: list[Thread], as_json: bool) -> None:
    if as_json:
        print(json.dumps([t.model_dump(mode="json") for t in threads], indent=2))
        return

    for t in threads:
        unread = "READ" if t.is_read else "UNREAD"
        date_part = t.timestamp.isoformat() if t.timestamp else "(no date)"
        participants = ", ".join(t.participants) or "(unknown sender)"
        print(f"{unread}\t{date_part}\t{t.message_count} msg\t{participants}\t{t.subject}")


def _cmd_group(args: argparse.Namespace) -> int:
    settings = get_settings()
    folder = Folder(args.folder) if args.folder else None

    messages = parse_page(_load_page(args.page), folder=folder, settings=settings)
    threads = aggregate_threads(messages)
    logger.info("page_grouped", message_count=len(messages), thread_count=len(threads))

    _print_threads(threads, args.json)
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = MailboxSession(Folder(args.folder), settings)

    for number, path in enumerate(args.pages, start=1):
        session.load_page(_load_page(path), page=number)

    threads = filter_threads(session.threads, query=args.query)
    _print_threads(threads, args.json)
    if not args.json:
        print(
            f"\n{session.current_page} pages, {len(session.threads)} threads, "
            f"{session.message_count} messages ({session.unread_count} unread), "
            f"{session.skipped_threads} duplicate threads skipped"
        )
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Mail Threading CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        settings = get_settings()
    except MailThreadingError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    # Configure logging; keep stdout for command output.
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level, logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )

    logger.debug("mail_threads_started", version=__version__, debug=settings.debug)

    try:
        if parsed.command == "group":
            return _cmd_group(parsed)
        if parsed.command == "merge":
            return _cmd_merge(parsed)
    except MailThreadingError as e:
        logger.error("command_failed", command=parsed.command, error=str(e))
        return 1

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
