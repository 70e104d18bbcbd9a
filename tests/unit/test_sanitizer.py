"""Unit tests for the external HTML sanitizer adapter."""

import sys

import pytest

from quick_mail.exceptions import SanitizerError
from quick_mail.mime import CommandSanitizer

# A tiny stand-in sanitizer: drops <script> tags from stdin.
STRIP_SCRIPT = (
    "import re, sys; "
    "data = sys.stdin.buffer.read().decode('utf-8'); "
    "sys.stdout.buffer.write(re.sub(r'<script.*?</script>', '', data, flags=re.S).encode('utf-8'))"
)


class TestCommandSanitizer:
    """Test suite for CommandSanitizer."""

    def test_string_command_is_split(self) -> None:
        assert CommandSanitizer("node sanitize.js").command == ["node", "sanitize.js"]

    def test_empty_command_rejected(self) -> None:
        with pytest.raises(ValueError):
            CommandSanitizer("")

    def test_pipes_html_through_command(self) -> None:
        sanitizer = CommandSanitizer([sys.executable, "-c", STRIP_SCRIPT])

        result = sanitizer.sanitize("<p>café</p><script>alert(1)</script>")

        assert result == "<p>café</p>"

    def test_non_zero_exit_raises(self) -> None:
        sanitizer = CommandSanitizer([sys.executable, "-c", "import sys; sys.exit(3)"])

        with pytest.raises(SanitizerError):
            sanitizer.sanitize("<p>x</p>")

    def test_missing_executable_raises(self) -> None:
        sanitizer = CommandSanitizer(["definitely-not-a-sanitizer-binary"])

        with pytest.raises(SanitizerError):
            sanitizer.sanitize("<p>x</p>")
