"""Integration tests against a live Gmail account.

These tests need QUICK_MAIL_USER_EMAIL and QUICK_MAIL_ACCESS_TOKEN (or a token
file) for an account with IMAP enabled. They only read mail.
"""

import os

import pytest

from quick_mail.agent.mail_agent import MailAgent
from quick_mail.config import Settings
from quick_mail.gmail.client import open_session

pytestmark = pytest.mark.integration

requires_account = pytest.mark.skipif(
    not os.environ.get("QUICK_MAIL_USER_EMAIL"),
    reason="QUICK_MAIL_USER_EMAIL not set",
)


@requires_account
class TestGmailIntegration:
    """Integration tests for Gmail IMAP."""

    @pytest.mark.asyncio
    async def test_list_threads(self) -> None:
        """List inbox threads over a real connection."""
        settings = Settings()
        agent = MailAgent(settings)

        async with open_session(settings, readonly=True) as session:
            threads = await agent.get_threads(session)

        assert all(len(t) > 0 for t in threads)

    @pytest.mark.asyncio
    async def test_fetch_first_thread(self) -> None:
        """Fetch and resolve the first inbox thread."""
        settings = Settings()
        agent = MailAgent(settings)

        async with open_session(settings, readonly=True) as session:
            threads = await agent.get_threads(session)
            if not threads:
                pytest.skip("inbox is empty")
            mails = await agent.fetch(session, threads[0])

        assert len(mails) == len(threads[0])
        assert all(m.gmail_link.startswith("https://mail.google.com/") for m in mails)
