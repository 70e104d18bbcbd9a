"""Explicit MIME tree built from a parsed message.

Keeping the tree separate from decoding lets the part-selection policy run
against hand-built trees as well as real messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from email.message import Message


@dataclass(frozen=True)
class MimeNode:
    """One part of a message body.

    Leaves carry their payload with the transfer encoding already removed;
    multipart nodes carry their sub-parts in document order.
    """

    media_type: str
    params: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    children: tuple[MimeNode, ...] = ()

    @property
    def is_multipart(self) -> bool:
        return self.media_type.startswith("multipart/")

    @property
    def charset(self) -> str:
        return self.params.get("charset", "")

    @property
    def boundary(self) -> str | None:
        return self.params.get("boundary") or None


def _params(part: Message) -> dict[str, str]:
    params = part.get_params(header="content-type") or []
    result: dict[str, str] = {}
    # The first entry is the media type itself.
    for key, value in params[1:]:
        if isinstance(value, tuple):
            # RFC 2231 encoded value: (charset, language, text)
            value = value[2]
        result[key.lower()] = str(value)
    return result


def build_tree(part: Message) -> MimeNode:
    """Convert a parsed message (or sub-part) into a MimeNode tree."""

    media_type = part.get_content_type()
    params = _params(part)

    if media_type.startswith("multipart/"):
        if not part.is_multipart():
            # The parser could not split the body, typically because the
            # boundary parameter is missing.
            return MimeNode(media_type=media_type, params=params)
        children = tuple(build_tree(sub) for sub in part.get_payload())
        return MimeNode(media_type=media_type, params=params, children=children)

    if part.is_multipart():
        # message/rfc822 and friends are not walked.
        return MimeNode(media_type=media_type, params=params)

    body = part.get_payload(decode=True)
    return MimeNode(media_type=media_type, params=params, body=body if body is not None else b"")
