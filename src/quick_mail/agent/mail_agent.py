"""Mail agent implementation.

This module provides the agent that callers use to list, display, archive and
answer threads. It owns the fragment cache and the message parser; each
operation takes an already opened mailbox session.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from quick_mail.compose.reply import build_reply, send_reply
from quick_mail.config import Settings
from quick_mail.exceptions import ConfigurationError
from quick_mail.fragments import FragmentCache
from quick_mail.gmail.auth import XOAuth2, resolve_credentials
from quick_mail.mailbox import MailboxSession, MessageParser
from quick_mail.mailbox import archive as archive_thread
from quick_mail.mailbox import fetch as fetch_thread
from quick_mail.mailbox import get_threads as list_threads
from quick_mail.mime import CommandSanitizer, HtmlSanitizer
from quick_mail.models import ParsedMail, Thread

logger = structlog.get_logger()

T = TypeVar("T")

_DEFAULT = object()


class MailAgent:
    """Main mail agent.

    This agent coordinates thread listing, message resolution,
    archiving and replies.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        cache: FragmentCache | None = None,
        sanitizer: HtmlSanitizer | None | object = _DEFAULT,
    ) -> None:
        """Initialize the mail agent.

        Args:
            settings: Application settings. If None, uses default settings.
            cache: Fragment cache. If None, creates a new one.
            sanitizer: HTML sanitizer. Defaults to the configured sanitizer
                command; pass None to disable sanitization.
        """
        from quick_mail.config import get_settings

        self.settings = settings or get_settings()
        self.cache = cache or FragmentCache(key_bytes=self.settings.fragment_key_bytes)

        if sanitizer is _DEFAULT:
            sanitizer = (
                CommandSanitizer(self.settings.sanitizer_command, self.settings.sanitizer_timeout)
                if self.settings.sanitizer_command
                else None
            )
        self.parser = MessageParser(self.cache, self.settings, sanitizer=sanitizer)  # type: ignore[arg-type]
        logger.info("mail_agent_initialized", sanitizer=sanitizer is not None)

    async def _bounded(self, operation: Awaitable[T], timeout: float | None) -> T:
        if timeout is None:
            timeout = self.settings.protocol_timeout
        return await asyncio.wait_for(operation, timeout=timeout)

    async def get_threads(self, session: MailboxSession, *, timeout: float | None = None) -> list[Thread]:
        """List the threads of the selected mailbox."""

        return await self._bounded(list_threads(session), timeout)

    async def fetch(
        self,
        session: MailboxSession,
        thread: Thread,
        *,
        timeout: float | None = None,
    ) -> list[ParsedMail]:
        """Fetch and resolve every message of a thread."""

        return await self._bounded(fetch_thread(session, thread, self.parser), timeout)

    async def archive(
        self,
        session: MailboxSession,
        thread: Thread,
        *,
        timeout: float | None = None,
    ) -> None:
        """Remove the Inbox label from every message of a thread."""

        await self._bounded(
            archive_thread(
                session,
                thread,
                all_mail=self.settings.all_mail_mailbox,
                label=self.settings.inbox_label,
            ),
            timeout,
        )

    def store_fragment(self, content: str) -> str:
        return self.cache.store(content)

    def take_fragment(self, key: str) -> str:
        return self.cache.take(key)

    async def reply(
        self,
        mail: ParsedMail,
        text: str,
        *,
        subject: str | None = None,
        recipients: list[str] | None = None,
        credentials: XOAuth2 | None = None,
    ) -> None:
        """Send a reply to a fetched message.

        Raises:
            ConfigurationError: If no sender address is configured.
            MailConnectionError: If submission fails.
        """

        if credentials is None:
            credentials = await resolve_credentials(self.settings)
        if not credentials.user:
            raise ConfigurationError("a sender address is required to reply")

        message = build_reply(
            mail,
            sender=credentials.user,
            text=text,
            subject=subject,
            recipients=recipients,
        )
        await send_reply(message, self.settings, credentials)
