"""MIME content resolution.

This package turns a raw message body into a single displayable text or HTML
document, decoding charsets and choosing between alternative parts.
"""

from .charset import CharsetDescriptor, CharsetRegistry, default_registry
from .resolver import ResolvedContent, extract_plain_text, render_content, resolve_content
from .sanitizer import CommandSanitizer, HtmlSanitizer
from .tree import MimeNode, build_tree

__all__ = [
    "CharsetDescriptor",
    "CharsetRegistry",
    "CommandSanitizer",
    "HtmlSanitizer",
    "MimeNode",
    "ResolvedContent",
    "build_tree",
    "default_registry",
    "extract_plain_text",
    "render_content",
    "resolve_content",
]
