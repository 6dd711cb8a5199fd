"""Nonce Chat - chat proxy with scraped-nonce caching.

This package provides a layered architecture around one upstream site:

Layers:
    - protocols: Interface contracts (TokenStore, TokenParser)
    - repositories: In-memory token cache and regex token parser
    - services: Nonce fetcher and chat proxy (business logic)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from nonce_chat import ChatProxyService, InMemoryTokenStore, NonceFetcher

    store = InMemoryTokenStore.create()
    fetcher = NonceFetcher.create(token_store=store)
    proxy = ChatProxyService.create(token_store=store, nonce_fetcher=fetcher)
    result = await proxy.send("Hello", None)
    ```

For HTTP API:
    ```python
    from nonce_chat.api.app import app, create_app
    ```
"""

from nonce_chat.config import Settings, get_settings, settings
from nonce_chat.dto import ChatRequest, ChatSuccessResponse
from nonce_chat.entities import ChatMessageEntity, ChatResultEntity, NonceTokenEntity
from nonce_chat.exceptions import (
    NonceChatError,
    NonceFetchExhausted,
    RequestTimedOut,
    TokenNotFound,
    UpstreamRejected,
    UpstreamUnavailable,
)
from nonce_chat.handlers import ChatHandler
from nonce_chat.protocols import TokenParser, TokenStore
from nonce_chat.repositories import InMemoryTokenStore, RegexTokenParser
from nonce_chat.services import ChatProxyService, NonceFetcher

__all__ = [
    # Configuration
    "settings",
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "TokenStore",
    "TokenParser",
    # Services (business logic)
    "ChatProxyService",
    "NonceFetcher",
    # Handlers (HTTP)
    "ChatHandler",
    # Repositories
    "InMemoryTokenStore",
    "RegexTokenParser",
    # Entities (domain models)
    "NonceTokenEntity",
    "ChatMessageEntity",
    "ChatResultEntity",
    # DTOs (API contracts)
    "ChatRequest",
    "ChatSuccessResponse",
    # Errors
    "NonceChatError",
    "UpstreamUnavailable",
    "TokenNotFound",
    "NonceFetchExhausted",
    "UpstreamRejected",
    "RequestTimedOut",
]
