"""Helpers for parsing fetched Gmail messages into internal models."""

from __future__ import annotations

import email
import re
from email.header import decode_header, make_header
from email.message import Message
from email.policy import compat32
from email.utils import formataddr, getaddresses

import structlog

from quick_mail.exceptions import AddressListError, MessageIdentifierError, MessageParseError
from quick_mail.models import Recipients

logger = structlog.get_logger()

RECIPIENT_FIELDS: tuple[str, ...] = ("To", "From", "Cc")

_UINT64_MAX = 2**64 - 1
_EMPTY_GROUP = re.compile(r"^\s*[^:,<>@\"]+:\s*;\s*$")


def parse_message(raw: bytes | None) -> Message:
    """Parse raw RFC 5322 bytes.

    Raises:
        MessageParseError: If there is nothing to parse or no header was found.
    """

    if not raw:
        raise MessageParseError("failed to parse message: empty message")
    try:
        message = email.message_from_bytes(raw, policy=compat32)
    except (TypeError, ValueError, UnicodeError) as exc:
        raise MessageParseError(f"failed to parse message: {exc}") from exc
    if not message.keys():
        raise MessageParseError("failed to parse message: no header found")
    return message


def _decode_header_value(value: object) -> str:
    try:
        return str(make_header(decode_header(str(value))))
    except (LookupError, UnicodeError, ValueError):
        return str(value)


def header_snapshot(message: Message) -> list[tuple[str, str]]:
    """Return the header fields in order with RFC 2047 words decoded."""

    return [(name, _decode_header_value(value)) for name, value in message.items()]


def _is_empty_group(value: str) -> bool:
    return _EMPTY_GROUP.match(value) is not None


def parse_address_list(values: list[str]) -> list[tuple[str, str]]:
    """Parse the values of one address-list header.

    Addresses are split on the raw text and only display names are decoded,
    so an encoded name holding a comma stays one entry. Values that are only
    an empty group (``undisclosed-recipients:;``) contribute nothing.

    Raises:
        AddressListError: If any entry does not hold an address.
    """

    raw = [str(v) for v in values]
    raw = [v for v in raw if v.strip() and not _is_empty_group(v)]
    if not raw:
        return []

    result: list[tuple[str, str]] = []
    for name, addr in getaddresses(raw):
        if "@" not in addr:
            raise AddressListError(f"malformed address: {name or addr or ', '.join(raw)!r}")
        result.append((_decode_header_value(name) if name else "", addr))
    return result


def extract_recipients(message: Message, owner: str | None = None) -> Recipients:
    """Collect deduplicated recipients from To, From and Cc, in that order.

    Args:
        message: Parsed message.
        owner: Mailbox owner's address. When given, it is left out unless it
            appears in From.

    Returns:
        Recipients: Bare addresses and display-name forms, in first-seen order.
    """

    owner_key = owner.lower() if owner else None
    recipients = Recipients()
    seen: set[str] = set()

    for field in RECIPIENT_FIELDS:
        values = message.get_all(field) or []
        if not values:
            continue
        try:
            entries = parse_address_list([str(v) for v in values])
        except AddressListError as exc:
            logger.warning("address_list_skipped", field=field, error=str(exc))
            continue

        for name, addr in entries:
            if addr in seen:
                continue
            if owner_key is not None and field != "From" and addr.lower() == owner_key:
                continue
            seen.add(addr)
            recipients.addresses.append(addr)
            recipients.named.append(formataddr((name, addr)))

    return recipients


def gmail_link(message_id: str | int, host: str = "mail.google.com") -> str:
    """Build a deep link for a Gmail message ID (X-GM-MSGID).

    Raises:
        MessageIdentifierError: If the ID is not an unsigned 64-bit decimal number.
    """

    text = str(message_id).strip()
    if not (text.isascii() and text.isdigit()) or int(text) > _UINT64_MAX:
        raise MessageIdentifierError(f"bad value for X-GM-MSGID: {message_id}")
    return f"https://{host}/mail/u/0/#inbox/{int(text):x}"
