"""Archive a thread by removing its Inbox label.

Gmail exposes labels as IMAP folders, so a message in the currently selected
mailbox cannot be relabelled by UID alone. Each message's X-GM-MSGID is looked
up first, then the same messages are found again in All Mail, where the label
is removed. The previously selected mailbox is always re-selected afterwards.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from quick_mail.exceptions import DataConsistencyError
from quick_mail.mailbox.session import MailboxSession, SelectedMailbox, StoreOp
from quick_mail.models import Thread

logger = structlog.get_logger()

GMAIL_MESSAGE_ID = "X-GM-MSGID"


def or_criteria(key: str, values: Sequence[Any]) -> list[Any]:
    """Build a search matching any of the values.

    IMAP ``OR`` takes exactly two keys, so n values need n-1 prefix operators:
    ``OR OR K a K b K c``.
    """

    if not values:
        raise ValueError("or_criteria requires at least one value")
    criteria: list[Any] = ["OR"] * (len(values) - 1)
    for value in values:
        criteria.extend((key, value))
    return criteria


async def archive(
    session: MailboxSession,
    thread: Thread,
    *,
    all_mail: str = "[Gmail]/All Mail",
    label: str = "\\Inbox",
) -> None:
    """Remove the Inbox label from every message in a thread.

    Raises:
        MailConnectionError: If any protocol round-trip fails.
        DataConsistencyError: If the messages cannot be found again in All Mail.
    """

    if not thread.message_ids:
        return

    records = await session.fetch(thread.message_ids, [GMAIL_MESSAGE_ID])
    gmail_ids = [int(r[GMAIL_MESSAGE_ID]) for r in records if r.get(GMAIL_MESSAGE_ID) is not None]
    if not gmail_ids:
        logger.error("archive_lookup_empty", thread_id=thread.thread_id, uids=thread.message_ids)
        raise DataConsistencyError(f"no Gmail message IDs found for thread {thread.thread_id}")

    previous = session.selected
    try:
        await session.select_mailbox(all_mail, readonly=False)
        matches = await session.search(or_criteria(GMAIL_MESSAGE_ID, gmail_ids), charset="UTF-8")
        if not matches:
            logger.error(
                "archive_search_empty",
                thread_id=thread.thread_id,
                gmail_ids=gmail_ids,
                mailbox=all_mail,
            )
            raise DataConsistencyError(
                f"messages of thread {thread.thread_id} not found in {all_mail}"
            )
        await session.store(matches, StoreOp.REMOVE_LABELS, [label])
    finally:
        await _restore(session, previous)

    logger.info("thread_archived", thread_id=thread.thread_id, message_count=len(matches))


async def _restore(session: MailboxSession, previous: SelectedMailbox | None) -> None:
    if previous is None:
        await session.unselect_mailbox()
        return
    await session.select_mailbox(previous.name, readonly=previous.readonly)
