"""Unit tests for data models."""

import pytest

from quick_mail.models import MailContent, ParsedMail, Recipients, Thread


class TestMailContent:
    """Test suite for MailContent model."""

    def test_inline_content(self) -> None:
        content = MailContent(media_type="text/plain", inline="<pre>x</pre>")

        assert content.is_deferred is False

    def test_fragment_content(self) -> None:
        content = MailContent(media_type="text/html", fragment_key="abc")

        assert content.is_deferred is True

    def test_exactly_one_location_required(self) -> None:
        with pytest.raises(Exception):  # Pydantic ValidationError
            MailContent(media_type="text/html")
        with pytest.raises(Exception):  # Pydantic ValidationError
            MailContent(media_type="text/html", inline="x", fragment_key="k")


class TestParsedMail:
    """Test suite for ParsedMail model."""

    def test_parsed_mail_creation(self) -> None:
        mail = ParsedMail(
            headers=[("Subject", "Hi"), ("Received", "a"), ("received", "b")],
            content=MailContent(media_type="text/html", fragment_key="key123"),
            gmail_link="https://mail.google.com/mail/u/0/#inbox/ff",
            thread_id="42",
            message_id="255",
        )

        assert mail.subject == "Hi"
        assert mail.header("SUBJECT") == "Hi"
        assert mail.header("X-Missing") is None
        assert mail.header_values("Received") == ["a", "b"]
        assert mail.body_link == "fragment?key=key123"

    def test_parsed_mail_is_immutable(self) -> None:
        mail = ParsedMail(
            content=MailContent(inline="placeholder"),
            gmail_link="https://mail.google.com/mail/u/0/#inbox/1",
            thread_id="1",
        )

        assert mail.body_link is None
        with pytest.raises(Exception):  # Pydantic ValidationError
            mail.thread_id = "2"


class TestThread:
    def test_thread_length(self) -> None:
        assert len(Thread(thread_id="t", message_ids=[1, 2])) == 2
        assert not Thread(thread_id="t")


def test_recipients_defaults() -> None:
    recipients = Recipients()

    assert recipients.addresses == []
    assert recipients.named == []
