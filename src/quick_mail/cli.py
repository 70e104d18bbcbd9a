"""Command-line interface for Quick Mail.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from quick_mail import __version__
from quick_mail.agent.mail_agent import MailAgent
from quick_mail.config import Settings, get_settings
from quick_mail.exceptions import MailConnectionError, QuickMailError
from quick_mail.gmail.client import open_session
from quick_mail.models import ParsedMail, Thread
from quick_mail.utils import configure_logging

logger = structlog.get_logger()

EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_UNAVAILABLE = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quick-mail", description="Read and triage Gmail threads")
    subparsers = parser.add_subparsers(dest="command", required=True)

    threads_parser = subparsers.add_parser("threads", help="List inbox threads")
    threads_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of threads to list (default: all)",
    )

    show_parser = subparsers.add_parser("show", help="Show the messages of one thread")
    show_parser.add_argument(
        "index",
        type=int,
        nargs="?",
        default=0,
        help="Thread position as printed by 'threads' (default: 0)",
    )

    archive_parser = subparsers.add_parser("archive", help="Remove a thread from the inbox")
    archive_parser.add_argument("index", type=int, help="Thread position as printed by 'threads'")

    reply_parser = subparsers.add_parser("reply", help="Reply to the last message of a thread")
    reply_parser.add_argument("index", type=int, help="Thread position as printed by 'threads'")
    reply_parser.add_argument("--text", required=True, help="Reply text")
    reply_parser.add_argument("--subject", default=None, help="Subject (default: Re: <subject>)")
    reply_parser.add_argument(
        "--to",
        action="append",
        default=None,
        help="Recipient; repeat for several (default: everyone on the message)",
    )

    return parser


def _pick(threads: list[Thread], index: int) -> Thread:
    if not 0 <= index < len(threads):
        raise QuickMailError(f"no thread at position {index} ({len(threads)} threads)")
    return threads[index]


def _print_mail(agent: MailAgent, mail: ParsedMail) -> None:
    print(f"From: {mail.header('From') or ''}")
    print(f"Subject: {mail.subject}")
    if mail.header("Date"):
        print(f"Date: {mail.header('Date')}")
    print(f"Recipients: {', '.join(mail.named_recipients)}")
    print(f"Gmail: {mail.gmail_link}")
    print()
    if mail.content.fragment_key is not None:
        print(agent.take_fragment(mail.content.fragment_key))
    else:
        print(mail.content.inline or "")
    print()


async def _cmd_threads(args: argparse.Namespace, settings: Settings) -> int:
    agent = MailAgent(settings)
    async with open_session(settings, readonly=True) as session:
        threads = await agent.get_threads(session)

    shown = threads if args.limit is None else threads[: args.limit]
    for position, thread in enumerate(shown):
        print(f"{position}\t{thread.thread_id}\t{len(thread)} message(s)")
    return 0


async def _cmd_show(args: argparse.Namespace, settings: Settings) -> int:
    agent = MailAgent(settings)
    async with open_session(settings, readonly=True) as session:
        threads = await agent.get_threads(session)
        messages = await agent.fetch(session, _pick(threads, args.index))

    for mail in messages:
        _print_mail(agent, mail)
    return 0


async def _cmd_archive(args: argparse.Namespace, settings: Settings) -> int:
    agent = MailAgent(settings)
    async with open_session(settings, readonly=False) as session:
        threads = await agent.get_threads(session)
        thread = _pick(threads, args.index)
        await agent.archive(session, thread)

    print(f"Archived thread {thread.thread_id} ({len(thread)} message(s))")
    return 0


async def _cmd_reply(args: argparse.Namespace, settings: Settings) -> int:
    agent = MailAgent(settings)
    async with open_session(settings, readonly=True) as session:
        threads = await agent.get_threads(session)
        messages = await agent.fetch(session, _pick(threads, args.index))

    if not messages:
        raise QuickMailError("thread has no messages")
    await agent.reply(messages[-1], args.text, subject=args.subject, recipients=args.to)
    print("Reply sent")
    return 0


_COMMANDS = {
    "threads": _cmd_threads,
    "show": _cmd_show,
    "archive": _cmd_archive,
    "reply": _cmd_reply,
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Quick Mail CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()
    configure_logging(settings)

    logger.info("quick_mail_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    command = _COMMANDS.get(parsed.command)
    if command is None:
        logger.error("unknown_command", command=parsed.command)
        return EXIT_USAGE

    try:
        return asyncio.run(command(parsed, settings))
    except MailConnectionError:
        print("Error connecting to gmail", file=sys.stderr)
        return EXIT_UNAVAILABLE
    except asyncio.TimeoutError:
        print("Timed out talking to gmail", file=sys.stderr)
        return EXIT_UNAVAILABLE
    except QuickMailError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(str(exc), file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
