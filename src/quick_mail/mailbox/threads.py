"""Group mailbox messages into conversation threads."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from quick_mail.mailbox.session import MailboxSession
from quick_mail.models import Thread

logger = structlog.get_logger()


def assemble_threads(pairs: Iterable[tuple[str, int]]) -> list[Thread]:
    """Group (thread ID, message ID) pairs into threads.

    Threads are ordered by the first appearance of their ID, and each thread
    keeps its messages in input order. This is a stable grouping, not a sort.
    """

    threads: list[Thread] = []
    index: dict[str, int] = {}

    for thread_id, message_id in pairs:
        position = index.get(thread_id)
        if position is None:
            index[thread_id] = len(threads)
            threads.append(Thread(thread_id=thread_id, message_ids=[message_id]))
        else:
            threads[position].message_ids.append(message_id)

    return threads


async def get_threads(session: MailboxSession) -> list[Thread]:
    """Fetch thread IDs for every message in the selected mailbox and group them.

    Raises:
        MailConnectionError: If the metadata fetch fails.
    """

    pairs = await session.fetch_metadata("1:*")
    threads = assemble_threads(pairs)
    logger.info("threads_assembled", message_count=len(pairs), thread_count=len(threads))
    return threads
