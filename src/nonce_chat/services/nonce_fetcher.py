"""Nonce acquisition from the origin page.

The origin page offers no contract: the token is scraped out of markup
that may change without notice. Each fetch therefore retries transient
failures with a growing delay before giving up.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import httpx

from nonce_chat.config import settings
from nonce_chat.entities import NonceTokenEntity
from nonce_chat.exceptions import NonceFetchExhausted, TokenNotFound, UpstreamUnavailable
from nonce_chat.protocols import TokenParser, TokenStore
from nonce_chat.repositories import RegexTokenParser

logger = logging.getLogger(__name__)


def browser_headers(user_agent: str) -> dict[str, str]:
    """Headers the origin expects before it serves the full page."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Upgrade-Insecure-Requests": "1",
    }


class NonceFetcher:
    """Scrape a fresh nonce and store it in the token cache.

    Example:
        ```python
        store = InMemoryTokenStore.create()
        fetcher = NonceFetcher.create(token_store=store)

        token = await fetcher.fetch()
        assert store.get() == token
        ```
    """

    def __init__(
        self,
        token_store: TokenStore,
        parser: TokenParser | None = None,
        client: httpx.AsyncClient | None = None,
        origin_url: str | None = None,
        user_agent: str | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        ttl: int | None = None,
        timeout: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the fetcher.

        Args:
            token_store: Cache that receives fetched tokens (required).
            parser: Token extraction strategy. Defaults to RegexTokenParser.
            client: Shared HTTP client. Created lazily if None.
            origin_url: Page to scrape. Defaults to settings.
            user_agent: Browser User-Agent. Defaults to settings.
            max_retries: Total attempts per fetch. Defaults to settings.
            backoff_base: Delay unit in seconds between attempts. Defaults to settings.
            ttl: Validity window stored with each token. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            sleep: Coroutine used to wait between attempts.
        """
        self._store = token_store
        self._parser = parser or RegexTokenParser()
        self._client = client
        self._owns_client = client is None
        self._origin_url = origin_url or settings.origin_url
        self._user_agent = user_agent or settings.user_agent
        self._max_retries = max_retries if max_retries is not None else settings.nonce_max_retries
        self._backoff_base = backoff_base if backoff_base is not None else settings.nonce_backoff_base
        self._ttl = ttl or settings.nonce_ttl
        self._timeout = timeout or settings.nonce_timeout
        self._sleep = sleep

        if self._max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self._fetches = 0
        self._failures = 0
        self._last_fetched_at: float | None = None

    @classmethod
    def create(
        cls,
        token_store: TokenStore,
        client: httpx.AsyncClient | None = None,
    ) -> "NonceFetcher":
        """Factory method to create NonceFetcher with settings defaults.

        Args:
            token_store: Cache that receives fetched tokens.
            client: Shared HTTP client. Created lazily if None.

        Returns:
            Configured NonceFetcher
        """
        return cls(token_store=token_store, client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after a failed attempt (1-based)."""
        return attempt * self._backoff_base

    async def fetch(self) -> NonceTokenEntity:
        """Scrape a new nonce, retrying transient failures.

        Business logic:
        1. GET the origin page with browser headers
        2. Extract the token through the parser
        3. On failure wait ``attempt * backoff_base`` and try again
        4. On success store the token with its TTL and return it

        Returns:
            The fresh token

        Raises:
            NonceFetchExhausted: If every attempt failed. The last error is
                chained as ``__cause__``.
        """
        last_error: Exception | None = None

        for attempt in range(1, self._max_retries + 1):
            try:
                token = await self._attempt()
            except (UpstreamUnavailable, TokenNotFound) as e:
                last_error = e
                logger.warning(
                    "Nonce fetch attempt %d/%d failed: %s", attempt, self._max_retries, e
                )
                if attempt < self._max_retries:
                    await self._sleep(self.backoff_delay(attempt))
                continue

            self._store.set(token, self._ttl)
            self._fetches += 1
            self._last_fetched_at = token.acquired_at
            logger.info("Nonce fetched and cached for %ds", self._ttl)
            return token

        self._failures += 1
        raise NonceFetchExhausted(attempts=self._max_retries, last_error=last_error) from last_error

    async def _attempt(self) -> NonceTokenEntity:
        try:
            response = await self.client.get(
                self._origin_url,
                headers=browser_headers(self._user_agent),
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Nonce page request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamUnavailable(f"HTTP {response.status_code}", status_code=response.status_code)

        value = self._parser.parse(response.content)
        return NonceTokenEntity(value=value, acquired_at=time.time(), ttl=self._ttl)

    def get_stats(self) -> dict:
        """Get fetcher statistics.

        Returns:
            Successful fetches, exhausted fetches and the last fetch time
        """
        return {
            "fetches": self._fetches,
            "failures": self._failures,
            "last_fetched_at": self._last_fetched_at,
        }

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
