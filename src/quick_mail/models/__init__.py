"""Data models for Quick Mail.

This module contains Pydantic models for data validation and serialization.
"""

from pydantic import BaseModel, Field

from .parsed_mail import MailContent, ParsedMail


class Thread(BaseModel):
    """Messages sharing one Gmail thread ID, in the order they were first seen."""

    thread_id: str = Field(description="Gmail thread ID (X-GM-THRID)")
    message_ids: list[int] = Field(default_factory=list, description="Message UIDs")

    def __len__(self) -> int:
        return len(self.message_ids)


class Recipients(BaseModel):
    """Addresses collected from To, From and Cc."""

    addresses: list[str] = Field(default_factory=list, description="Bare addresses")
    named: list[str] = Field(default_factory=list, description="Display-name forms")


__all__ = ["MailContent", "ParsedMail", "Recipients", "Thread"]
