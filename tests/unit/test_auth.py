"""Unit tests for XOAUTH2 authentication helpers."""

from __future__ import annotations

import pytest

from quick_mail.exceptions import AuthenticationError, ConfigurationError
from quick_mail.gmail.auth import XOAuth2, resolve_credentials

EXPECTED = "user=me@example.com\x01auth=Bearer secret\x01\x01"


class TestXOAuth2:
    """Test suite for the XOAUTH2 mechanism adapters."""

    def test_initial_response(self) -> None:
        assert XOAuth2("me@example.com", "secret").initial_response() == EXPECTED

    def test_repr_hides_token(self) -> None:
        assert "secret" not in repr(XOAuth2("me@example.com", "secret"))

    def test_imap_adapter_answers_first_continuation_only(self) -> None:
        auth = XOAuth2("me@example.com", "secret").imap_authenticator()

        assert auth(b"") == EXPECTED.encode("utf-8")
        with pytest.raises(AuthenticationError):
            auth(b'{"status":"400"}')

    def test_smtp_adapter_initial_response(self) -> None:
        auth = XOAuth2("me@example.com", "secret").smtp_authenticator()

        assert auth() == EXPECTED

    def test_smtp_adapter_rejects_challenge(self) -> None:
        auth = XOAuth2("me@example.com", "secret").smtp_authenticator()

        with pytest.raises(AuthenticationError):
            auth(b'{"status":"401"}')


class TestResolveCredentials:
    @pytest.mark.asyncio
    async def test_access_token_setting(self, mock_settings) -> None:
        credentials = await resolve_credentials(mock_settings)

        assert credentials == XOAuth2("me@example.com", "test-token")

    @pytest.mark.asyncio
    async def test_missing_token_file(self, mock_settings, tmp_path) -> None:
        settings = mock_settings.model_copy(
            update={"access_token": None, "token_path": tmp_path / "missing.json"}
        )

        with pytest.raises(ConfigurationError):
            await resolve_credentials(settings)

    @pytest.mark.asyncio
    async def test_invalid_token_file(self, mock_settings, tmp_path) -> None:
        token_path = tmp_path / "token.json"
        token_path.write_text("{}", encoding="utf-8")
        settings = mock_settings.model_copy(update={"access_token": None, "token_path": token_path})

        with pytest.raises(AuthenticationError):
            await resolve_credentials(settings)
