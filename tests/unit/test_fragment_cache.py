"""Unit tests for the one-shot fragment cache."""

from __future__ import annotations

import base64
import threading

import pytest
from structlog.testing import capture_logs

from quick_mail.exceptions import ConfigurationError
from quick_mail.fragments import FragmentCache


def test_take_returns_stored_value_once() -> None:
    cache = FragmentCache()

    key = cache.store("<p>body</p>")

    assert cache.take(key) == "<p>body</p>"
    assert cache.take(key) == ""
    assert len(cache) == 0


def test_unknown_key_returns_empty() -> None:
    assert FragmentCache().take("missing") == ""


def test_keys_are_urlsafe_and_carry_64_bytes() -> None:
    key = FragmentCache().store("x")

    assert set(key) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")
    padded = key + "=" * (-len(key) % 4)
    assert len(base64.urlsafe_b64decode(padded)) == 64


def test_keys_are_not_reused() -> None:
    cache = FragmentCache()

    keys = {cache.store(str(i)) for i in range(2000)}

    assert len(keys) == 2000


def test_instances_are_independent() -> None:
    first = FragmentCache()
    second = FragmentCache()

    key = first.store("value")

    assert key not in second
    assert second.take(key) == ""
    assert first.take(key) == "value"


def test_colliding_key_is_regenerated() -> None:
    draws = iter([b"\x00" * 64, b"\x00" * 64, b"\x01" * 64])
    cache = FragmentCache(random_source=lambda n: next(draws))

    first = cache.store("a")
    second = cache.store("b")

    assert first != second
    assert cache.take(first) == "a"
    assert cache.take(second) == "b"


def test_weak_random_fallback_is_logged() -> None:
    def broken_source(n: int) -> bytes:
        raise OSError("no entropy")

    cache = FragmentCache(random_source=broken_source)

    with capture_logs() as logs:
        key = cache.store("value")

    assert cache.take(key) == "value"
    assert any(
        entry["event"] == "fragment_key_weak_random_fallback" and entry["log_level"] == "warning"
        for entry in logs
    )


def test_short_keys_rejected() -> None:
    with pytest.raises(ConfigurationError):
        FragmentCache(key_bytes=16)


def test_concurrent_take_hands_out_value_once() -> None:
    cache = FragmentCache()
    key = cache.store("secret")
    results: list[str] = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(cache.take(key))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("secret") == 1
    assert results.count("") == 7
