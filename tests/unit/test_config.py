"""Unit tests for configuration module."""

import pytest

from quick_mail.config import Settings, get_settings


class TestSettings:
    """Test suite for Settings class."""

    def test_default_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that default settings are properly initialized."""
        monkeypatch.delenv("QUICK_MAIL_LOG_LEVEL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.imap_host == "imap.gmail.com"
        assert settings.imap_port == 993
        assert settings.all_mail_mailbox == "[Gmail]/All Mail"
        assert settings.inbox_label == "\\Inbox"
        assert settings.fragment_key_bytes == 64
        assert settings.content_placeholder == "failed to parse content. view in gmail"
        assert settings.log_level == "INFO"
        assert settings.debug is False
        assert settings.max_retries == 3

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading settings from environment variables."""
        monkeypatch.setenv("QUICK_MAIL_IMAP_HOST", "imap.test")
        monkeypatch.setenv("QUICK_MAIL_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("QUICK_MAIL_DEBUG", "true")
        monkeypatch.setenv("QUICK_MAIL_INLINE_MAX_BYTES", "10")

        # Clear the cache to ensure fresh settings
        get_settings.cache_clear()

        settings = get_settings()

        assert settings.imap_host == "imap.test"
        assert settings.log_level == "DEBUG"
        assert settings.debug is True
        assert settings.inline_max_bytes == 10

        # Clean up
        get_settings.cache_clear()

    def test_get_settings_returns_cached_instance(self) -> None:
        """Test that get_settings returns the same cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

        # Clean up
        get_settings.cache_clear()
