"""Select and decode the displayable body of a message.

The walk is depth-first over a MimeNode tree. Within a multipart node the
first HTML part wins outright; otherwise the last plain-text part found is
kept while the search for HTML continues. A sub-part that fails to decode is
skipped so that its siblings still get a chance.
"""

from __future__ import annotations

import html
from dataclasses import dataclass

import structlog

from quick_mail.exceptions import ContentError, MissingBoundaryError, NoDisplayableContentError
from quick_mail.mime.charset import CharsetRegistry, default_registry
from quick_mail.mime.sanitizer import HtmlSanitizer
from quick_mail.mime.tree import MimeNode

logger = structlog.get_logger()

TEXT_HTML = "text/html"
TEXT_PLAIN = "text/plain"

PLACEHOLDER = "failed to parse content. view in gmail"

_PRE_OPEN = '<pre style="word-wrap: break-word; white-space: pre-wrap;">'
_PRE_CLOSE = "</pre>"


@dataclass(frozen=True)
class ResolvedContent:
    body: str
    media_type: str


def resolve_node(
    node: MimeNode,
    registry: CharsetRegistry = default_registry,
    sanitizer: HtmlSanitizer | None = None,
) -> ResolvedContent | None:
    """Resolve one node of the tree.

    Returns:
        The selected content, or None when the node holds nothing displayable.

    Raises:
        UnsupportedCharsetError: A text leaf declares an unknown charset.
        MissingBoundaryError: A multipart node has no boundary parameter.
        SanitizerError: The sanitizer rejected an HTML leaf.
    """

    if node.media_type in (TEXT_HTML, TEXT_PLAIN):
        decode = registry.resolve(node.charset)
        text = decode(node.body or b"")
        if node.media_type == TEXT_HTML and sanitizer is not None:
            text = sanitizer.sanitize(text)
        return ResolvedContent(body=text, media_type=node.media_type)

    if node.is_multipart:
        if node.boundary is None:
            raise MissingBoundaryError(f"{node.media_type} part has no boundary")
        return _resolve_multipart(node, registry, sanitizer)

    return None


def _resolve_multipart(
    node: MimeNode,
    registry: CharsetRegistry,
    sanitizer: HtmlSanitizer | None,
) -> ResolvedContent | None:
    candidate: ResolvedContent | None = None
    first_error: ContentError | None = None

    for index, child in enumerate(node.children):
        try:
            resolved = resolve_node(child, registry, sanitizer)
        except ContentError as exc:
            logger.debug(
                "mime_part_skipped",
                media_type=child.media_type,
                index=index,
                error=str(exc),
            )
            if first_error is None:
                first_error = exc
            continue

        if resolved is None:
            continue
        candidate = resolved
        if resolved.media_type == TEXT_HTML:
            break

    if candidate is None and first_error is not None:
        raise first_error
    return candidate


def resolve_content(
    node: MimeNode,
    registry: CharsetRegistry = default_registry,
    sanitizer: HtmlSanitizer | None = None,
) -> ResolvedContent:
    """Resolve a whole message body.

    Raises:
        NoDisplayableContentError: If no part anywhere could be displayed.
        ContentError: For the decoding failures listed on resolve_node.
    """

    resolved = resolve_node(node, registry, sanitizer)
    if resolved is None:
        raise NoDisplayableContentError(f"no text part found in {node.media_type}")
    return resolved


def escape_plain_text(text: str) -> str:
    return _PRE_OPEN + html.escape(text, quote=True) + _PRE_CLOSE


def render_content(
    node: MimeNode,
    registry: CharsetRegistry = default_registry,
    sanitizer: HtmlSanitizer | None = None,
    placeholder: str = PLACEHOLDER,
) -> ResolvedContent:
    """Resolve a body into markup that is safe to display.

    Plain text is escaped and wrapped in a ``<pre>`` block. HTML is returned as
    produced by the sanitizer. Any content failure yields the placeholder with
    an empty media type.
    """

    try:
        resolved = resolve_content(node, registry, sanitizer)
    except ContentError as exc:
        logger.info("mime_content_unresolved", error_type=type(exc).__name__, error=str(exc))
        return ResolvedContent(body=placeholder, media_type="")

    if resolved.media_type == TEXT_PLAIN:
        return ResolvedContent(body=escape_plain_text(resolved.body), media_type=TEXT_PLAIN)
    return resolved


def extract_plain_text(node: MimeNode, registry: CharsetRegistry = default_registry) -> str:
    """Return the first decodable text/plain leaf, or an empty string."""

    if node.media_type == TEXT_PLAIN:
        try:
            return registry.resolve(node.charset)(node.body or b"")
        except ContentError:
            return ""

    for child in node.children:
        text = extract_plain_text(child, registry)
        if text:
            return text
    return ""
