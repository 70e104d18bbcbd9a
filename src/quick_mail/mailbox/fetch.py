"""Fetch the messages of a thread and resolve them for display."""

from __future__ import annotations

import structlog

from quick_mail.config import Settings
from quick_mail.exceptions import MessageParseError
from quick_mail.fragments import FragmentCache
from quick_mail.gmail.parsing import extract_recipients, gmail_link, header_snapshot, parse_message
from quick_mail.mailbox.session import MailboxSession
from quick_mail.mime import (
    CharsetRegistry,
    HtmlSanitizer,
    build_tree,
    default_registry,
    extract_plain_text,
    render_content,
)
from quick_mail.mime.resolver import TEXT_HTML
from quick_mail.models import MailContent, ParsedMail, Thread

logger = structlog.get_logger()

BODY_FIELDS: tuple[str, ...] = ("BODY[]", "X-GM-MSGID", "X-GM-THRID")


class MessageParser:
    """Turns raw message bytes into ParsedMail records.

    HTML bodies always go to the fragment cache. Escaped plain text is inlined
    when it fits within ``inline_max_bytes``; the placeholder is always inline.
    """

    def __init__(
        self,
        cache: FragmentCache,
        settings: Settings | None = None,
        *,
        sanitizer: HtmlSanitizer | None = None,
        registry: CharsetRegistry = default_registry,
    ) -> None:
        from quick_mail.config import get_settings

        self.settings = settings or get_settings()
        self.cache = cache
        self.sanitizer = sanitizer
        self.registry = registry

    @property
    def owner(self) -> str | None:
        return self.settings.user_email if self.settings.exclude_self else None

    def _content(self, body: str, media_type: str) -> MailContent:
        deferred = media_type == TEXT_HTML or (
            bool(media_type) and len(body.encode("utf-8")) > self.settings.inline_max_bytes
        )
        if deferred:
            return MailContent(media_type=media_type, fragment_key=self.cache.store(body))
        return MailContent(media_type=media_type, inline=body)

    def parse(self, raw: bytes | None, message_id: str, thread_id: str) -> ParsedMail:
        """Resolve one fetched message.

        Raises:
            MessageParseError: If the message cannot be parsed at all.
            MessageIdentifierError: If the Gmail message ID is invalid.
        """

        link = gmail_link(message_id, self.settings.mail_web_host)
        message = parse_message(raw)
        tree = build_tree(message)

        resolved = render_content(
            tree,
            self.registry,
            self.sanitizer,
            placeholder=self.settings.content_placeholder,
        )
        recipients = extract_recipients(message, owner=self.owner)

        return ParsedMail(
            headers=header_snapshot(message),
            content=self._content(resolved.body, resolved.media_type),
            gmail_link=link,
            thread_id=thread_id,
            message_id=message_id,
            recipients=recipients.addresses,
            named_recipients=recipients.named,
            text_body=extract_plain_text(tree, self.registry),
        )


def _as_text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("ascii", errors="replace")
    return "" if value is None else str(value)


async def fetch(session: MailboxSession, thread: Thread, parser: MessageParser) -> list[ParsedMail]:
    """Fetch and resolve every message of a thread in one batch.

    Any message that fails to parse or carries an invalid ID aborts the
    batch; no partial result is returned.

    Raises:
        MailConnectionError: If the fetch fails.
        MessageParseError: If a message cannot be parsed.
        MessageIdentifierError: If a message has an invalid Gmail ID.
    """

    if not thread.message_ids:
        return []

    records = await session.fetch(thread.message_ids, list(BODY_FIELDS))

    parsed: list[ParsedMail] = []
    for record in records:
        raw = record.get("BODY[]")
        if raw is not None and not isinstance(raw, bytes):
            raise MessageParseError(f"unexpected body type for UID {record.get('UID')}")
        mail = parser.parse(
            raw,
            _as_text(record.get("X-GM-MSGID")),
            _as_text(record.get("X-GM-THRID")),
        )
        parsed.append(mail)

    logger.info("thread_fetched", thread_id=thread.thread_id, message_count=len(parsed))
    return parsed
