"""Chat proxy service for the upstream request pipeline.

This service composes the outbound message, attaches the current nonce
(fetching one when the cache is cold) and relays the upstream JSON.
"""

import asyncio
import logging

import httpx

from nonce_chat.config import settings
from nonce_chat.entities import ChatMessageEntity, ChatResultEntity, NonceTokenEntity
from nonce_chat.exceptions import UpstreamRejected, UpstreamUnavailable
from nonce_chat.protocols import TokenStore
from nonce_chat.services.nonce_fetcher import NonceFetcher

logger = logging.getLogger(__name__)


class ChatProxyService:
    """Core chat orchestration service.

    Depends on a TokenStore protocol and a NonceFetcher, both injected,
    so tests can swap in fakes without touching module state.

    Example:
        ```python
        store = InMemoryTokenStore.create()
        fetcher = NonceFetcher.create(token_store=store)
        proxy = ChatProxyService.create(token_store=store, nonce_fetcher=fetcher)

        result = await proxy.send("Hi there", None)
        print(result.data)
        ```
    """

    def __init__(
        self,
        token_store: TokenStore,
        nonce_fetcher: NonceFetcher,
        client: httpx.AsyncClient | None = None,
        chat_url: str | None = None,
        origin_url: str | None = None,
        action: str | None = None,
        user_agent: str | None = None,
        default_user_message: str | None = None,
        default_system_prompt: str | None = None,
        invalidate_on_reject: bool | None = None,
        header_timeout: float | None = None,
        body_timeout: float | None = None,
    ) -> None:
        """Initialize the chat proxy.

        Args:
            token_store: Cache holding the current nonce (required).
            nonce_fetcher: Fetcher used on a cache miss (required).
            client: Shared HTTP client. Created lazily if None.
            chat_url: AJAX endpoint. Defaults to settings.
            origin_url: Sent as Origin/Referer. Defaults to settings.
            action: AJAX action identifier. Defaults to settings.
            user_agent: Browser User-Agent. Defaults to settings.
            default_user_message: Used when the user message is blank.
            default_system_prompt: Used when the system prompt is blank.
            invalidate_on_reject: Drop the cached nonce when the chat call is rejected.
                Defaults to settings (off).
            header_timeout: Connect/response-header timeout in seconds.
            body_timeout: Body read timeout in seconds. Upstream generation is slow.
        """
        self._store = token_store
        self._fetcher = nonce_fetcher
        self._client = client
        self._owns_client = client is None
        self._chat_url = chat_url or settings.chat_url
        self._origin_url = origin_url or settings.origin_url
        self._action = action or settings.chat_action
        self._user_agent = user_agent or settings.user_agent
        self._default_user = default_user_message or settings.default_user_message
        self._default_system = default_system_prompt or settings.default_system_prompt
        self._invalidate_on_reject = (
            settings.invalidate_on_reject if invalidate_on_reject is None else invalidate_on_reject
        )
        header_timeout = header_timeout or settings.chat_header_timeout
        body_timeout = body_timeout or settings.chat_body_timeout
        self._timeout = httpx.Timeout(header_timeout, read=body_timeout)
        self._fetch_lock = asyncio.Lock()

    @classmethod
    def create(
        cls,
        token_store: TokenStore,
        nonce_fetcher: NonceFetcher,
        client: httpx.AsyncClient | None = None,
    ) -> "ChatProxyService":
        """Factory method to create ChatProxyService with settings defaults.

        Returns:
            Configured ChatProxyService
        """
        return cls(token_store=token_store, nonce_fetcher=nonce_fetcher, client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def build_message(self, user_message: str | None, system_prompt: str | None) -> ChatMessageEntity:
        """Normalize inputs into a message with no blank parts."""
        return ChatMessageEntity.create(
            user_message=user_message,
            system_prompt=system_prompt,
            default_user_message=self._default_user,
            default_system_prompt=self._default_system,
        )

    async def current_token(self) -> NonceTokenEntity:
        """Return the cached nonce, fetching one on a miss.

        Concurrent misses share a lock and re-check the cache, so only
        the first caller hits the origin.
        """
        token = self._store.get()
        if token is not None:
            return token

        async with self._fetch_lock:
            token = self._store.peek()
            if token is not None:
                return token
            return await self._fetcher.fetch()

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
            "Accept": "application/json, text/javascript, */*; q=0.01",
            "X-Requested-With": "XMLHttpRequest",
            "User-Agent": self._user_agent,
            "Origin": self._origin_url.rstrip("/"),
            "Referer": self._origin_url,
        }

    async def send(self, user_message: str | None, system_prompt: str | None) -> ChatResultEntity:
        """Relay a chat message upstream.

        Business logic:
        1. Compose the blended message (defaults for blank parts)
        2. Obtain the nonce from the cache, fetching on a miss
        3. POST the form payload to the AJAX endpoint
        4. Return the JSON body unmodified

        A rejection is not retried here. Whether it also drops the cached
        nonce depends on ``invalidate_on_reject``.

        Args:
            user_message: The user's message, may be None or blank
            system_prompt: Custom system prompt, may be None or blank

        Returns:
            ChatResultEntity wrapping the upstream payload

        Raises:
            NonceFetchExhausted: If no nonce could be obtained
            UpstreamUnavailable: If the chat endpoint could not be reached
            UpstreamRejected: On a non-200 status or a non-JSON body
        """
        message = self.build_message(user_message, system_prompt)
        token = await self.current_token()

        payload = {
            "action": self._action,
            "message": message.composed,
            "nonce": token.value,
        }

        try:
            response = await self.client.post(
                self._chat_url,
                data=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Chat request failed: {e}") from e

        if response.status_code != 200:
            if self._invalidate_on_reject:
                self._store.invalidate()
                logger.info("Cached nonce dropped after chat rejection")
            raise UpstreamRejected(
                f"API returned {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamRejected("API returned a non-JSON body", status_code=200) from e

        return ChatResultEntity(data=data)

    @property
    def token_store(self) -> TokenStore:
        """Get the underlying token store (for stats and testing)."""
        return self._store

    @property
    def nonce_fetcher(self) -> NonceFetcher:
        """Get the underlying nonce fetcher (for stats and testing)."""
        return self._fetcher

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
