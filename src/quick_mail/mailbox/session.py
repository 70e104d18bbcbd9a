"""Mailbox protocol session capability.

The mailbox operations in this package only talk to the server through this
interface. ``quick_mail.gmail.client.GmailImapSession`` implements it over
IMAP; tests provide scripted fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Sequence


class StoreOp(str, Enum):
    """Modifications applied by ``MailboxSession.store``."""

    REMOVE_LABELS = "-X-GM-LABELS"


@dataclass(frozen=True)
class SelectedMailbox:
    name: str
    readonly: bool


class MailboxSession(Protocol):
    """A single authenticated connection to a mailbox server.

    The selected mailbox is connection state shared by every call, so calls
    must be awaited in program order. Protocol failures are raised as
    ``MailConnectionError``.
    """

    @property
    def selected(self) -> SelectedMailbox | None:
        ...

    async def select_mailbox(self, name: str, readonly: bool = False) -> None:
        ...

    async def unselect_mailbox(self) -> None:
        """Close the selected mailbox without expunging, leaving none selected."""
        ...

    async def fetch_metadata(self, messages: str = "1:*") -> list[tuple[str, int]]:
        """Return (thread ID, UID) pairs in server order."""
        ...

    async def fetch(self, uids: Sequence[int], fields: Sequence[str]) -> list[dict[str, Any]]:
        """Fetch attributes by UID.

        Each record maps upper-case attribute names to values and always
        includes ``UID``. Records are in server order.
        """
        ...

    async def search(self, criteria: Sequence[Any], charset: str | None = None) -> list[int]:
        ...

    async def store(self, uids: Sequence[int], op: StoreOp, values: Sequence[str]) -> None:
        ...

    async def logout(self) -> None:
        ...
