"""Build and submit replies to a fetched message."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from collections.abc import Sequence
from datetime import datetime
from email.message import EmailMessage
from email.utils import parsedate_to_datetime

import structlog

from quick_mail.config import Settings
from quick_mail.exceptions import AuthenticationError, MailConnectionError
from quick_mail.gmail.auth import MECHANISM, XOAuth2
from quick_mail.models import ParsedMail

logger = structlog.get_logger()


def _attribution_date(value: datetime) -> str:
    hour = value.hour % 12 or 12
    return (
        f"On {value:%a}, {value:%b} {value.day}, {value.year} "
        f"at {hour}:{value:%M} {value:%p}, "
    )


def they_wrote(mail: ParsedMail) -> str:
    """Attribution line, e.g. ``On Mon, Jan 2, 2006 at 3:04 PM, Ann <a@x> wrote:``."""

    prefix = ""
    date_header = mail.header("Date")
    if date_header:
        try:
            prefix = _attribution_date(parsedate_to_datetime(date_header))
        except (TypeError, ValueError, IndexError):
            prefix = ""
    return prefix + (mail.header("From") or "") + " wrote:"


def blockquote(text: str) -> str:
    """Quote text for a reply, one ``>`` level per line."""

    lines = []
    for line in text.splitlines():
        if line == "" or line.startswith(">"):
            lines.append(">" + line)
        else:
            lines.append("> " + line)
    return "\n".join(lines)


def build_reply(
    mail: ParsedMail,
    *,
    sender: str,
    text: str,
    subject: str | None = None,
    recipients: Sequence[str] | None = None,
) -> EmailMessage:
    """Create a reply to ``mail``.

    Args:
        mail: The message being answered.
        sender: From address of the reply.
        text: New text written by the user.
        subject: Subject line; defaults to ``Re:`` plus the original subject.
        recipients: Display-name addresses; defaults to the message's recipients.

    Returns:
        EmailMessage: Reply ready for submission.
    """

    if subject is None:
        original = mail.subject
        subject = original if original.lower().startswith("re:") else f"Re: {original}".strip()

    to = list(recipients) if recipients is not None else list(mail.named_recipients)

    reply = EmailMessage()
    reply["From"] = sender
    if to:
        reply["To"] = ", ".join(to)
    reply["Subject"] = subject

    message_id = mail.header("Message-ID")
    if message_id:
        reply["In-Reply-To"] = message_id
        references = mail.header("References") or ""
        reply["References"] = f"{references} {message_id}".strip()

    body = text
    if mail.text_body:
        body += f"\n\n\n{they_wrote(mail)}\n\n{blockquote(mail.text_body)}"
    reply.set_content(body)
    return reply


def _send_sync(message: EmailMessage, settings: Settings, credentials: XOAuth2) -> None:
    context = ssl.create_default_context()
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.protocol_timeout) as smtp:
        smtp.ehlo()
        smtp.starttls(context=context)
        smtp.ehlo()
        smtp.auth(MECHANISM, credentials.smtp_authenticator())
        smtp.send_message(message)


async def send_reply(message: EmailMessage, settings: Settings, credentials: XOAuth2) -> None:
    """Submit a message over SMTP with XOAUTH2.

    Raises:
        MailConnectionError: If submission fails.
    """

    logger.info("reply_sending", host=settings.smtp_host, to=message.get("To"))
    try:
        await asyncio.to_thread(_send_sync, message, settings, credentials)
    except (smtplib.SMTPException, OSError, AuthenticationError) as exc:
        logger.exception("reply_send_failed", host=settings.smtp_host, error=str(exc))
        raise MailConnectionError() from exc
    logger.info("reply_sent", to=message.get("To"))
