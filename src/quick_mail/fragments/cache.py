"""One-shot store for deferred message content.

Each stored value is handed out under a random key and can be read exactly
once: ``take`` removes the entry it returns. Entries that are never read stay
in memory for the lifetime of the cache.
"""

from __future__ import annotations

import base64
import random
import secrets
import threading
from typing import Callable

import structlog

from quick_mail.exceptions import ConfigurationError

logger = structlog.get_logger()

MIN_KEY_BYTES = 64

RandomSource = Callable[[int], bytes]


class FragmentCache:
    """Thread-safe map from one-time keys to content."""

    def __init__(
        self,
        key_bytes: int = MIN_KEY_BYTES,
        random_source: RandomSource = secrets.token_bytes,
    ) -> None:
        """Create an empty cache.

        Args:
            key_bytes: Random bytes drawn for each key.
            random_source: Cryptographically strong byte source.

        Raises:
            ConfigurationError: If key_bytes is below the minimum.
        """

        if key_bytes < MIN_KEY_BYTES:
            raise ConfigurationError(
                f"fragment keys need at least {MIN_KEY_BYTES} random bytes, got {key_bytes}"
            )
        self._key_bytes = key_bytes
        self._random_source = random_source
        self._fallback = random.Random()
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def _random_bytes(self) -> bytes:
        try:
            return self._random_source(self._key_bytes)
        except (OSError, NotImplementedError) as exc:
            logger.warning(
                "fragment_key_weak_random_fallback",
                error=str(exc),
                key_bytes=self._key_bytes,
            )
            return bytes(self._fallback.getrandbits(8) for _ in range(self._key_bytes))

    def new_key(self) -> str:
        return base64.urlsafe_b64encode(self._random_bytes()).rstrip(b"=").decode("ascii")

    def store(self, value: str) -> str:
        """Store a value and return the key that retrieves it once."""

        key = self.new_key()
        with self._lock:
            while key in self._entries:
                key = self.new_key()
            self._entries[key] = value
        return key

    def take(self, key: str) -> str:
        """Remove and return a stored value; unknown or consumed keys give ''."""

        with self._lock:
            return self._entries.pop(key, "")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
