"""Configuration management for Quick Mail.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the QUICK_MAIL_ prefix (e.g., QUICK_MAIL_IMAP_HOST).
    """

    model_config = SettingsConfigDict(
        env_prefix="QUICK_MAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Account
    user_email: str | None = Field(
        default=None,
        description="Address of the mailbox owner; used for login and recipient filtering",
    )
    access_token: str | None = Field(
        default=None,
        description="OAuth2 access token. When unset, token_path is loaded and refreshed.",
    )
    token_path: Path = Field(
        default=Path("token.json"),
        description="Path to an authorized-user OAuth token file",
    )
    oauth_scope: str = Field(
        default="https://mail.google.com/",
        description="OAuth scope required for IMAP and SMTP access",
    )

    # IMAP Configuration
    imap_host: str = Field(default="imap.gmail.com", description="IMAP server host")
    imap_port: int = Field(default=993, description="IMAP server port (implicit TLS)")
    inbox_mailbox: str = Field(default="INBOX", description="Mailbox listed by default")
    all_mail_mailbox: str = Field(
        default="[Gmail]/All Mail",
        description="Mailbox holding every message regardless of labels",
    )
    inbox_label: str = Field(
        default="\\Inbox",
        description="Gmail label removed from messages when a thread is archived",
    )
    protocol_timeout: float = Field(
        default=30.0,
        description="Timeout for a single mailbox operation in seconds",
    )
    logout_timeout: float = Field(
        default=15.0,
        description="Maximum time spent logging out of the mailbox server in seconds",
    )

    # SMTP Configuration
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP submission host")
    smtp_port: int = Field(default=587, description="SMTP submission port (STARTTLS)")

    # Content Configuration
    mail_web_host: str = Field(
        default="mail.google.com",
        description="Host used to build deep links into the Gmail web interface",
    )
    sanitizer_command: str | None = Field(
        default=None,
        description="External command that sanitizes HTML read from stdin (e.g. 'node sanitize.js')",
    )
    sanitizer_timeout: float = Field(
        default=10.0,
        description="Timeout for the HTML sanitizer command in seconds",
    )
    inline_max_bytes: int = Field(
        default=16384,
        description="Largest escaped plain-text body shown inline instead of as a fragment",
    )
    fragment_key_bytes: int = Field(
        default=64,
        description="Random bytes used for each fragment key",
    )
    exclude_self: bool = Field(
        default=True,
        description="Drop the owner's address from recipient lists unless they sent the message",
    )
    content_placeholder: str = Field(
        default="failed to parse content. view in gmail",
        description="Text shown when a message body cannot be resolved",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    max_retries: int = Field(
        default=3,
        description="Maximum number of retries when connecting to the mailbox server",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
