"""Token storage protocol.

Defines the interface for any store that can hold the current nonce with
a per-entry expiry.

Implementations can include:
- In-process dictionary (default)
- Redis with key expiry
- Any other TTL-capable key-value store
"""

from typing import Protocol, runtime_checkable

from nonce_chat.entities import NonceTokenEntity

NONCE_KEY = "nonce"


@runtime_checkable
class TokenStore(Protocol):
    """Protocol for token cache backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from nonce_chat.protocols import TokenStore

        store: TokenStore = InMemoryTokenStore()
        ```
    """

    def get(self, key: str = NONCE_KEY) -> NonceTokenEntity | None:
        """Return the live token for ``key``, counting a hit or a miss.

        Args:
            key: Cache key

        Returns:
            The token, or None if absent or expired
        """
        ...

    def peek(self, key: str = NONCE_KEY) -> NonceTokenEntity | None:
        """Same as ``get`` but leaves the hit/miss counters untouched."""
        ...

    def set(self, token: NonceTokenEntity, ttl: int | None = None, key: str = NONCE_KEY) -> None:
        """Store a token, replacing any previous entry.

        Args:
            token: The token to store
            ttl: Time-to-live in seconds. Defaults to the token's own ttl.
            key: Cache key
        """
        ...

    def invalidate(self, key: str = NONCE_KEY) -> bool:
        """Drop an entry.

        Returns:
            True if an entry was removed, False otherwise
        """
        ...

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        ...

    def get_stats(self) -> dict[str, int]:
        """Return ``{"keys", "hits", "misses"}``."""
        ...
