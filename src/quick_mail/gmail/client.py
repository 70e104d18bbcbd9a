"""Gmail IMAP session.

This module implements the ``MailboxSession`` capability on top of
``imapclient``.

Notes:
    IMAPClient is synchronous. Every call on one connection is sent to a
    dedicated single-worker executor, which keeps commands in program order
    even when an awaiting task is cancelled mid-command.
"""

from __future__ import annotations

import asyncio
import functools
import imaplib
from collections.abc import AsyncIterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Any, Callable, Sequence

import structlog
from imapclient import IMAPClient

from quick_mail.config import Settings
from quick_mail.exceptions import AuthenticationError, MailConnectionError
from quick_mail.gmail.auth import MECHANISM, XOAuth2, resolve_credentials
from quick_mail.mailbox.session import SelectedMailbox, StoreOp
from quick_mail.utils import retry_on_failure

logger = structlog.get_logger()

# Errors raised by imaplib/imapclient for protocol failures, plus socket errors.
PROTOCOL_ERRORS: tuple[type[BaseException], ...] = (imaplib.IMAP4.error, OSError)

ClientFactory = Callable[..., Any]


def _normalize_record(uid: int, data: dict[Any, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for key, value in data.items():
        name = key.decode("ascii") if isinstance(key, bytes) else str(key)
        record[name.upper()] = value
    record["UID"] = uid
    return record


class GmailImapSession:
    """One authenticated IMAP connection to Gmail."""

    def __init__(self, client: Any, settings: Settings) -> None:
        self._client = client
        self.settings = settings
        self._selected: SelectedMailbox | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="imap")
        self._closed = False

    @classmethod
    async def connect(
        cls,
        settings: Settings,
        credentials: XOAuth2,
        *,
        client_factory: ClientFactory = IMAPClient,
    ) -> GmailImapSession:
        """Open a TLS connection and authenticate with XOAUTH2.

        Raises:
            MailConnectionError: If the server cannot be reached or login fails.
        """

        logger.info(
            "imap_connecting",
            host=settings.imap_host,
            port=settings.imap_port,
            user=credentials.user,
        )

        @retry_on_failure(max_retries=settings.max_retries, delay=1.0, exceptions=(OSError,))
        def _open() -> Any:
            return client_factory(
                settings.imap_host,
                port=settings.imap_port,
                ssl=True,
                timeout=settings.protocol_timeout,
            )

        def _connect_sync() -> Any:
            client = _open()
            try:
                client.sasl_login(MECHANISM, credentials.imap_authenticator())
            except BaseException:
                try:
                    client.logout()
                except PROTOCOL_ERRORS:
                    pass
                raise
            return client

        try:
            client = await asyncio.to_thread(_connect_sync)
        except (AuthenticationError, *PROTOCOL_ERRORS) as exc:
            logger.exception("imap_connect_failed", host=settings.imap_host, error=str(exc))
            raise MailConnectionError() from exc

        logger.info("imap_connected", host=settings.imap_host)
        return cls(client, settings)

    @property
    def selected(self) -> SelectedMailbox | None:
        return self._selected

    async def _call(self, command: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, functools.partial(func, *args, **kwargs))
        except PROTOCOL_ERRORS as exc:
            logger.exception("imap_command_failed", command=command, error=str(exc))
            raise MailConnectionError() from exc

    async def select_mailbox(self, name: str, readonly: bool = False) -> None:
        await self._call("select", self._client.select_folder, name, readonly=readonly)
        self._selected = SelectedMailbox(name=name, readonly=readonly)
        logger.debug("imap_mailbox_selected", mailbox=name, readonly=readonly)

    async def unselect_mailbox(self) -> None:
        await self._call("unselect", self._client.unselect_folder)
        self._selected = None
        logger.debug("imap_mailbox_unselected")

    async def fetch_metadata(self, messages: str = "1:*") -> list[tuple[str, int]]:
        response = await self._call("fetch", self._client.fetch, messages, ["X-GM-THRID", "UID"])
        pairs: list[tuple[str, int]] = []
        for uid, data in response.items():
            thread_id = data.get(b"X-GM-THRID")
            if thread_id is None:
                logger.warning("imap_fetch_missing_thread_id", uid=uid)
                continue
            pairs.append((str(thread_id), int(uid)))
        return pairs

    async def fetch(self, uids: Sequence[int], fields: Sequence[str]) -> list[dict[str, Any]]:
        response = await self._call("fetch", self._client.fetch, list(uids), list(fields))
        return [_normalize_record(int(uid), data) for uid, data in response.items()]

    async def search(self, criteria: Sequence[Any], charset: str | None = None) -> list[int]:
        result = await self._call("search", self._client.search, list(criteria), charset)
        return [int(uid) for uid in result]

    async def store(self, uids: Sequence[int], op: StoreOp, values: Sequence[str]) -> None:
        operations = {
            StoreOp.REMOVE_LABELS: self._client.remove_gmail_labels,
        }
        await self._call("store", operations[op], list(uids), list(values), silent=True)
        logger.debug("imap_store_completed", op=op.value, count=len(uids))

    async def logout(self) -> None:
        """Log out, waiting at most ``logout_timeout`` seconds. Never raises."""

        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.wait_for(
                self._call("logout", self._client.logout),
                timeout=self.settings.logout_timeout,
            )
        except (MailConnectionError, asyncio.TimeoutError) as exc:
            logger.warning("imap_logout_failed", error=str(exc) or type(exc).__name__)
        finally:
            self._executor.shutdown(wait=False)
        logger.info("imap_logged_out")


@asynccontextmanager
async def open_session(
    settings: Settings,
    *,
    readonly: bool = True,
    credentials: XOAuth2 | None = None,
    client_factory: ClientFactory = IMAPClient,
) -> AsyncIterator[GmailImapSession]:
    """Connect, select the inbox and always log out when the block exits.

    Raises:
        ConfigurationError: If credentials cannot be resolved.
        AuthenticationError: If the stored OAuth token is unusable.
        MailConnectionError: If connecting or selecting the inbox fails.
    """

    if credentials is None:
        credentials = await resolve_credentials(settings)

    session = await GmailImapSession.connect(settings, credentials, client_factory=client_factory)
    try:
        await session.select_mailbox(settings.inbox_mailbox, readonly=readonly)
        yield session
    finally:
        await session.logout()
