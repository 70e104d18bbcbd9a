"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any, Sequence

import pytest

from quick_mail.exceptions import MailConnectionError
from quick_mail.mailbox.session import SelectedMailbox, StoreOp


class FakeMailboxSession:
    """Scripted MailboxSession that records every call."""

    def __init__(
        self,
        *,
        metadata: list[tuple[str, int]] | None = None,
        records: dict[int, dict[str, Any]] | None = None,
        search_results: list[int] | None = None,
        fail_on: str | None = None,
        selected: SelectedMailbox | None = SelectedMailbox("INBOX", True),
    ) -> None:
        self.metadata = metadata or []
        self.records = records or {}
        self.search_results = search_results or []
        self.fail_on = fail_on
        self._selected = selected
        self.calls: list[tuple[Any, ...]] = []

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.fail_on == call[0]:
            raise MailConnectionError()

    @property
    def selected(self) -> SelectedMailbox | None:
        return self._selected

    async def select_mailbox(self, name: str, readonly: bool = False) -> None:
        self._record("select", name, readonly)
        self._selected = SelectedMailbox(name, readonly)

    async def unselect_mailbox(self) -> None:
        self._record("unselect")
        self._selected = None

    async def fetch_metadata(self, messages: str = "1:*") -> list[tuple[str, int]]:
        self._record("fetch_metadata", messages)
        return list(self.metadata)

    async def fetch(self, uids: Sequence[int], fields: Sequence[str]) -> list[dict[str, Any]]:
        self._record("fetch", list(uids), list(fields))
        result = []
        for uid in uids:
            if uid in self.records:
                record = {k: v for k, v in self.records[uid].items() if k in fields}
                record["UID"] = uid
                result.append(record)
        return result

    async def search(self, criteria: Sequence[Any], charset: str | None = None) -> list[int]:
        self._record("search", list(criteria), charset)
        return list(self.search_results)

    async def store(self, uids: Sequence[int], op: StoreOp, values: Sequence[str]) -> None:
        self._record("store", list(uids), op, list(values))

    async def logout(self) -> None:
        self._record("logout")


def make_message(
    body: str | bytes,
    *,
    content_type: str | None = "text/plain; charset=utf-8",
    headers: dict[str, str] | None = None,
) -> bytes:
    """Build raw RFC 5322 bytes with CRLF line endings."""

    fields = {
        "From": "Ann Example <ann@example.com>",
        "To": "me@example.com",
        "Subject": "Hello",
        "Date": "Mon, 02 Jan 2006 15:04:05 -0700",
        "Message-ID": "<msg-1@example.com>",
        "MIME-Version": "1.0",
    }
    if headers:
        fields.update(headers)
    if content_type is not None:
        fields["Content-Type"] = content_type

    head = "".join(f"{k}: {v}\r\n" for k, v in fields.items()).encode("utf-8")
    payload = body if isinstance(body, bytes) else body.encode("utf-8")
    return head + b"\r\n" + payload


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from quick_mail.config import Settings

    return Settings(
        user_email="me@example.com",
        access_token="test-token",
        log_level="DEBUG",
        debug=True,
        _env_file=None,
    )


@pytest.fixture
def fake_session_factory():
    """Return the FakeMailboxSession class for building scripted sessions."""
    return FakeMailboxSession


@pytest.fixture
def multipart_alternative() -> bytes:
    """A text/plain + text/html alternative message."""
    body = (
        "--XYZ\r\n"
        "Content-Type: text/plain; charset=utf-8\r\n"
        "\r\n"
        "plain <version>\r\n"
        "--XYZ\r\n"
        "Content-Type: text/html; charset=utf-8\r\n"
        "\r\n"
        "<p>html version</p>\r\n"
        "--XYZ--\r\n"
    )
    return make_message(body, content_type='multipart/alternative; boundary="XYZ"')


@pytest.fixture
def message_factory():
    """Return a builder for raw RFC 5322 messages."""
    return make_message
