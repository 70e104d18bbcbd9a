"""Charset registry used to decode text parts.

Only UTF-8 and the Western single-byte code page are registered. Labels are
matched case-insensitively; an unknown label is an error rather than a silent
pass-through so that callers can decide how to degrade.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from quick_mail.exceptions import UnsupportedCharsetError

Decoder = Callable[[bytes], str]

# Bytes left undefined by Windows-1252. Browsers map them to the C1 controls.
_CP1252_UNDEFINED = frozenset({0x81, 0x8D, 0x8F, 0x90, 0x9D})


def decode_utf8(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def decode_western(data: bytes) -> str:
    """Decode Windows-1252, the superset browsers use for ISO-8859-1 labels."""

    if not _CP1252_UNDEFINED.intersection(data):
        return data.decode("cp1252")
    return "".join(
        chr(b) if b in _CP1252_UNDEFINED else bytes((b,)).decode("cp1252") for b in data
    )


@dataclass(frozen=True)
class CharsetDescriptor:
    """A decoder together with every label that selects it."""

    name: str
    aliases: frozenset[str]
    decode: Decoder


UTF8 = CharsetDescriptor(
    name="utf-8",
    aliases=frozenset(
        {"utf-8", "utf8", "unicode-1-1-utf-8", "us-ascii", "ascii", "us", "ansi_x3.4-1968"}
    ),
    decode=decode_utf8,
)

WESTERN = CharsetDescriptor(
    name="windows-1252",
    aliases=frozenset(
        {
            "iso-8859-1",
            "iso8859-1",
            "iso_8859-1",
            "iso_8859-1:1987",
            "latin1",
            "l1",
            "iso-ir-100",
            "ibm819",
            "cp819",
            "csisolatin1",
            "windows-1252",
            "cp1252",
            "x-cp1252",
        }
    ),
    decode=decode_western,
)


def _normalize(label: str) -> str:
    return label.strip().strip('"').strip().lower()


class CharsetRegistry:
    """Maps charset labels to decoders."""

    def __init__(self, descriptors: Iterable[CharsetDescriptor] = (UTF8, WESTERN)) -> None:
        self._by_label: dict[str, CharsetDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: CharsetDescriptor) -> None:
        for alias in descriptor.aliases:
            self._by_label[_normalize(alias)] = descriptor

    def lookup(self, label: str | None) -> CharsetDescriptor:
        """Return the descriptor for a label.

        The empty label selects UTF-8, which is what a part without a charset
        parameter is assumed to carry.

        Raises:
            UnsupportedCharsetError: If no decoder is registered for the label.
        """

        normalized = _normalize(label or "")
        if not normalized:
            return UTF8
        try:
            return self._by_label[normalized]
        except KeyError:
            raise UnsupportedCharsetError(label or "") from None

    def resolve(self, label: str | None) -> Decoder:
        return self.lookup(label).decode

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and _normalize(label) in self._by_label


default_registry = CharsetRegistry()
