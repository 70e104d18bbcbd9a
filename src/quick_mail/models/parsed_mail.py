"""Display-ready projection of a fetched message.

A ParsedMail is built once per fetched message and never changes afterwards.
The body is either carried inline (escaped plain text or the placeholder) or
referenced through a one-time fragment key.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MailContent(BaseModel):
    """Resolved body of a message."""

    model_config = ConfigDict(frozen=True)

    media_type: str = Field(
        default="",
        description="text/html, text/plain, or empty when the placeholder is shown",
    )
    inline: str | None = Field(default=None, description="Markup safe to embed directly")
    fragment_key: str | None = Field(default=None, description="One-time fragment cache key")

    @model_validator(mode="after")
    def _exactly_one_location(self) -> MailContent:
        if (self.inline is None) == (self.fragment_key is None):
            raise ValueError("exactly one of inline or fragment_key must be set")
        return self

    @property
    def is_deferred(self) -> bool:
        return self.fragment_key is not None


class ParsedMail(BaseModel):
    """A message resolved for display."""

    model_config = ConfigDict(frozen=True)

    headers: list[tuple[str, str]] = Field(
        default_factory=list, description="Header fields in message order"
    )
    content: MailContent = Field(description="Resolved body")
    gmail_link: str = Field(description="Deep link into the Gmail web interface")
    thread_id: str = Field(description="Gmail thread ID (X-GM-THRID)")
    message_id: str = Field(default="", description="Gmail message ID (X-GM-MSGID)")

    # Parallel lists: bare addresses and their display-name forms.
    recipients: list[str] = Field(default_factory=list, description="Deduplicated addresses")
    named_recipients: list[str] = Field(
        default_factory=list, description="Deduplicated addresses with display names"
    )

    text_body: str = Field(default="", description="Plain-text body used when quoting")

    def header(self, name: str) -> str | None:
        """Return the first value of a header, matched case-insensitively."""

        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def header_values(self, name: str) -> list[str]:
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    @property
    def subject(self) -> str:
        return self.header("Subject") or ""

    @property
    def body_link(self) -> str | None:
        if self.content.fragment_key is None:
            return None
        return f"fragment?key={self.content.fragment_key}"
