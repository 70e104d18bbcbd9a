"""HTML sanitizer capability.

The sanitizer itself lives outside this package. ``CommandSanitizer`` pipes
HTML through any program that reads markup on stdin and writes the cleaned
markup to stdout.
"""

from __future__ import annotations

import shlex
import subprocess
from typing import Protocol, Sequence

import structlog

from quick_mail.exceptions import SanitizerError

logger = structlog.get_logger()


class HtmlSanitizer(Protocol):
    def sanitize(self, html: str) -> str:
        ...


class CommandSanitizer:
    """Sanitize HTML by running an external command."""

    def __init__(self, command: Sequence[str] | str, timeout: float = 10.0) -> None:
        if isinstance(command, str):
            command = shlex.split(command)
        if not command:
            raise ValueError("sanitizer command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    def sanitize(self, html: str) -> str:
        """Return the sanitized markup.

        Raises:
            SanitizerError: If the command is missing, times out or exits non-zero.
        """

        try:
            completed = subprocess.run(
                self.command,
                input=html.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("html_sanitizer_failed", command=self.command[0], error=str(exc))
            raise SanitizerError(f"sanitizer failed: {exc}") from exc

        if completed.returncode != 0:
            logger.warning(
                "html_sanitizer_failed",
                command=self.command[0],
                returncode=completed.returncode,
                stderr=completed.stderr.decode("utf-8", errors="replace")[:200],
            )
            raise SanitizerError(f"sanitizer exited with status {completed.returncode}")

        return completed.stdout.decode("utf-8", errors="replace")
