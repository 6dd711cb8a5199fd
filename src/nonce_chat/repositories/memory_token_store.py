"""In-memory implementation of TokenStore.

Tokens live only for the lifetime of the process; a cold cache simply
triggers one fetch on first use.
"""

import threading
import time
from collections.abc import Callable

from nonce_chat.entities import NonceTokenEntity
from nonce_chat.protocols import NONCE_KEY


class InMemoryTokenStore:
    """Dictionary-backed token cache with per-entry expiry.

    This class satisfies the TokenStore protocol through structural
    typing - no explicit inheritance needed.

    Expired entries are never returned. They are evicted lazily on the
    next read rather than by a background sweeper.

    Example:
        ```python
        store = InMemoryTokenStore.create()
        store.set(NonceTokenEntity(value="abc123"), ttl=3600)
        store.get()  # NonceTokenEntity(acquired_at=..., ttl=3600)
        ```
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the store.

        Args:
            clock: Monotonic time source in seconds. Injectable for tests.
        """
        self._clock = clock
        self._entries: dict[str, tuple[NonceTokenEntity, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def create(cls) -> "InMemoryTokenStore":
        """Factory method to create InMemoryTokenStore with defaults."""
        return cls()

    def _live_entry(self, key: str) -> NonceTokenEntity | None:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        token, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return token

    def get(self, key: str = NONCE_KEY) -> NonceTokenEntity | None:
        """Return the live token for ``key``, counting a hit or a miss.

        Args:
            key: Cache key

        Returns:
            The token, or None if absent or expired
        """
        with self._lock:
            token = self._live_entry(key)
            if token is None:
                self._misses += 1
            else:
                self._hits += 1
            return token

    def peek(self, key: str = NONCE_KEY) -> NonceTokenEntity | None:
        """Return the live token without touching the hit/miss counters."""
        with self._lock:
            return self._live_entry(key)

    def set(self, token: NonceTokenEntity, ttl: int | None = None, key: str = NONCE_KEY) -> None:
        """Store a token, replacing any previous entry.

        Args:
            token: The token to store
            ttl: Time-to-live in seconds. Defaults to the token's own ttl.
            key: Cache key
        """
        lifetime = token.ttl if ttl is None else ttl
        if lifetime <= 0:
            raise ValueError("ttl must be positive")
        with self._lock:
            self._entries[key] = (token, self._clock() + lifetime)

    def invalidate(self, key: str = NONCE_KEY) -> bool:
        """Drop an entry.

        Returns:
            True if an entry was removed, False otherwise
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def get_stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with live key count, hits and misses
        """
        with self._lock:
            live = sum(1 for key in list(self._entries) if self._live_entry(key) is not None)
            return {
                "keys": live,
                "hits": self._hits,
                "misses": self._misses,
            }
