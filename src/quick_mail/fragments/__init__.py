"""Deferred content fragments.

Message bodies that should not be embedded in a page are parked here under a
one-time key and served separately.
"""

from .cache import FragmentCache

__all__ = ["FragmentCache"]
