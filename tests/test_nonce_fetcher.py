"""
Tests for NonceFetcher retry and caching behaviour.
"""

import httpx
import pytest

from nonce_chat.exceptions import NonceFetchExhausted, TokenNotFound, UpstreamUnavailable
from nonce_chat.services import NonceFetcher
from tests.conftest import PAGE_WITH_NONCE


class TestNonceFetcher:

    @pytest.mark.asyncio
    async def test_fetch_caches_token(self, fetcher, token_store, upstream, sleeper):
        token = await fetcher.fetch()

        assert token.value == "abc123"
        assert token_store.peek() is token
        assert len(upstream.page_requests) == 1
        assert sleeper.delays == []
        assert fetcher.get_stats()["fetches"] == 1

    @pytest.mark.asyncio
    async def test_sends_browser_headers(self, fetcher, upstream):
        await fetcher.fetch()

        request = upstream.page_requests[0]
        assert request.headers["User-Agent"] == "test-agent"
        assert request.headers["Accept"].startswith("text/html")
        assert str(request.url) == "https://origin.test/"

    @pytest.mark.asyncio
    async def test_retries_until_token_appears(self, fetcher, upstream, sleeper):
        upstream.page_script = [
            (503, "busy"),
            (200, "<html>maintenance</html>"),
            (200, PAGE_WITH_NONCE),
        ]

        token = await fetcher.fetch()

        assert token.value == "abc123"
        assert len(upstream.page_requests) == 3
        assert sleeper.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_leaves_cache_empty(self, fetcher, token_store, upstream, sleeper):
        upstream.page_script = [(500, "boom")]

        with pytest.raises(NonceFetchExhausted) as exc_info:
            await fetcher.fetch()

        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.__cause__, UpstreamUnavailable)
        assert "after 3 attempts" in str(exc_info.value)
        assert len(upstream.page_requests) == 3
        # No sleep after the final attempt
        assert sleeper.delays == [1.0, 2.0]
        assert token_store.peek() is None
        assert fetcher.get_stats()["failures"] == 1

    @pytest.mark.asyncio
    async def test_missing_token_is_retried(self, fetcher, upstream):
        upstream.page_script = [(200, "<html>no token</html>")]

        with pytest.raises(NonceFetchExhausted) as exc_info:
            await fetcher.fetch()

        assert isinstance(exc_info.value.__cause__, TokenNotFound)

    @pytest.mark.asyncio
    async def test_transport_error_is_retried(self, fetcher, upstream):
        upstream.page_script = [httpx.ConnectError, (200, PAGE_WITH_NONCE)]

        token = await fetcher.fetch()

        assert token.value == "abc123"
        assert len(upstream.page_requests) == 2

    def test_backoff_is_linear(self, fetcher):
        assert [fetcher.backoff_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_rejects_zero_attempts(self, token_store):
        with pytest.raises(ValueError):
            NonceFetcher(token_store=token_store, max_retries=0)
