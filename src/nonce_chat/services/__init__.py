"""Service layer for business logic.

This layer contains the nonce acquisition and the upstream chat pipeline.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (State / parsing)

Usage:
    ```python
    from nonce_chat.repositories import InMemoryTokenStore
    from nonce_chat.services import ChatProxyService, NonceFetcher

    store = InMemoryTokenStore.create()
    fetcher = NonceFetcher.create(token_store=store)
    proxy = ChatProxyService.create(token_store=store, nonce_fetcher=fetcher)
    ```
"""

from .chat_proxy import ChatProxyService
from .nonce_fetcher import NonceFetcher

__all__ = [
    "ChatProxyService",
    "NonceFetcher",
]
