"""XOAUTH2 authentication for Gmail IMAP and SMTP.

Both protocols carry the same bearer-token initial response and differ only
in how the SASL exchange is driven, so one credential value exposes two small
adapters.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

import structlog

from quick_mail.config import Settings
from quick_mail.exceptions import AuthenticationError, ConfigurationError

logger = structlog.get_logger()

MECHANISM = "XOAUTH2"


@dataclass(frozen=True)
class XOAuth2:
    """A user and OAuth2 access token."""

    user: str
    token: str

    def initial_response(self) -> str:
        return f"user={self.user}\x01auth=Bearer {self.token}\x01\x01"

    def __repr__(self) -> str:
        return f"XOAuth2(user={self.user!r}, token=<redacted>)"

    def imap_authenticator(self) -> ImapXOAuth2:
        return ImapXOAuth2(self)

    def smtp_authenticator(self) -> SmtpXOAuth2:
        return SmtpXOAuth2(self)


class ImapXOAuth2:
    """SASL callback for ``IMAPClient.sasl_login``.

    The callback sees each server continuation. Only the first, empty one is
    expected; any further challenge means the server rejected the token.
    """

    def __init__(self, credentials: XOAuth2) -> None:
        self.credentials = credentials
        self._started = False

    def __call__(self, challenge: bytes) -> bytes:
        if self._started:
            raise AuthenticationError("Challenge shouldn't be issued.")
        self._started = True
        return self.credentials.initial_response().encode("utf-8")


class SmtpXOAuth2:
    """Authentication object for ``smtplib.SMTP.auth``."""

    def __init__(self, credentials: XOAuth2) -> None:
        self.credentials = credentials

    def __call__(self, challenge: bytes | None = None) -> str:
        if challenge is None:
            return self.credentials.initial_response()
        logger.warning(
            "smtp_unexpected_challenge",
            challenge=challenge.decode("utf-8", errors="replace")[:200],
        )
        raise AuthenticationError("Unexpected server message.")


def _load_token_sync(token_path: Path, scope: str) -> str:
    # Imported lazily to keep import-time cost low and tests fast.
    from google.auth.exceptions import GoogleAuthError
    from google.auth.transport.requests import Request
    from google.oauth2.credentials import Credentials

    try:
        creds = Credentials.from_authorized_user_file(str(token_path), scopes=[scope])
        if creds.expired and creds.refresh_token:
            creds.refresh(Request())
    except (GoogleAuthError, ValueError) as exc:
        raise AuthenticationError(str(exc)) from exc

    if not creds.valid or not creds.token:
        raise AuthenticationError(f"OAuth token in {token_path} is not valid")
    return creds.token


async def resolve_credentials(settings: Settings) -> XOAuth2:
    """Return XOAUTH2 credentials for the configured user.

    An explicit access token wins; otherwise the authorized-user token file is
    loaded and refreshed when expired.

    Raises:
        ConfigurationError: If no user or no token source is configured.
        AuthenticationError: If the stored token cannot be used or refreshed.
    """

    if not settings.user_email:
        raise ConfigurationError("QUICK_MAIL_USER_EMAIL is not set")

    if settings.access_token:
        return XOAuth2(settings.user_email, settings.access_token)

    token_path = Path(settings.token_path)
    if not token_path.exists():
        raise ConfigurationError(
            f"OAuth token file not found: {token_path}. "
            "Set QUICK_MAIL_ACCESS_TOKEN or QUICK_MAIL_TOKEN_PATH."
        )

    logger.info("oauth_token_loading", token_path=str(token_path))
    token = await asyncio.to_thread(_load_token_sync, token_path, settings.oauth_scope)
    return XOAuth2(settings.user_email, token)
