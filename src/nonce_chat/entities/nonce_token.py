"""Nonce token domain entity."""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class NonceTokenEntity:
    """Anti-automation token scraped from the origin page.

    The value is excluded from repr so tokens do not leak into logs.

    Attributes:
        value: The opaque token string
        acquired_at: Unix timestamp of the successful scrape
        ttl: Validity window in seconds. Expiry is enforced by the token store.
    """

    value: str = field(repr=False)
    acquired_at: float = field(default_factory=time.time)
    ttl: int = 3600
