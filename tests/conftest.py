"""
Shared fixtures: fake clock, recorded sleeps and a scripted upstream site.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from nonce_chat.repositories import InMemoryTokenStore
from nonce_chat.services import ChatProxyService, NonceFetcher

ORIGIN_URL = "https://origin.test/"
CHAT_URL = "https://origin.test/wp-admin/admin-ajax.php"
PAGE_WITH_NONCE = '<script>var ajax = {"url":"/wp-admin/admin-ajax.php","nonce":"abc123"};</script>'
DEFAULT_SYSTEM = "You are a test persona"


def form_of(request: httpx.Request) -> dict[str, str]:
    """Decode the urlencoded chat payload of a recorded request."""
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeUpstream:
    """Scripted origin site.

    Each queue holds (status, body) tuples or exception classes. Items are
    consumed in order; the last one keeps repeating.
    """

    def __init__(self):
        self.page_script: list = [(200, PAGE_WITH_NONCE)]
        self.chat_script: list = [(200, {"response": "hi"})]
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        script = self.page_script if request.method == "GET" else self.chat_script
        item = script.pop(0) if len(script) > 1 else script[0]

        if isinstance(item, type) and issubclass(item, Exception):
            raise item("connection refused", request=request)

        status, body = item
        if isinstance(body, (dict, list)):
            return httpx.Response(status, content=json.dumps(body).encode(),
                                  headers={"Content-Type": "application/json"})
        return httpx.Response(status, text=body)

    @property
    def page_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    @property
    def chat_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def token_store(clock):
    return InMemoryTokenStore(clock=clock)


@pytest.fixture
def fetcher(token_store, http_client, sleeper):
    return NonceFetcher(
        token_store=token_store,
        client=http_client,
        origin_url=ORIGIN_URL,
        user_agent="test-agent",
        max_retries=3,
        backoff_base=1.0,
        ttl=3600,
        timeout=10,
        sleep=sleeper,
    )


@pytest.fixture
def make_proxy(token_store, fetcher, http_client):
    """Build a ChatProxyService wired to the fake upstream."""

    def _make(invalidate_on_reject: bool = False) -> ChatProxyService:
        return ChatProxyService(
            token_store=token_store,
            nonce_fetcher=fetcher,
            client=http_client,
            chat_url=CHAT_URL,
            origin_url=ORIGIN_URL,
            action="ai_chat_response",
            user_agent="test-agent",
            default_user_message="Hello",
            default_system_prompt=DEFAULT_SYSTEM,
            invalidate_on_reject=invalidate_on_reject,
            header_timeout=10,
            body_timeout=30,
        )

    return _make


@pytest.fixture
def proxy(make_proxy):
    return make_proxy()
