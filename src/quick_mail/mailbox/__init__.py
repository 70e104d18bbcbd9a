"""Mailbox operations.

Thread listing, fetching and archiving, written against the
``MailboxSession`` capability rather than a concrete IMAP client.
"""

from .archive import archive, or_criteria
from .fetch import MessageParser, fetch
from .session import MailboxSession, SelectedMailbox, StoreOp
from .threads import assemble_threads, get_threads

__all__ = [
    "MailboxSession",
    "MessageParser",
    "SelectedMailbox",
    "StoreOp",
    "archive",
    "assemble_threads",
    "fetch",
    "get_threads",
    "or_criteria",
]
