"""HTTP handlers for chat, health and metrics.

Handlers convert between DTOs (API contracts) and service calls.
Core failures propagate as typed exceptions; the API layer maps them
to status codes.
"""

import asyncio
import platform
import sys
import time

from nonce_chat.config import Settings, settings
from nonce_chat.dto import (
    CacheStatsResponse,
    ChatRequest,
    ChatSuccessResponse,
    HealthCheckResponse,
    MemoryUsage,
    MetricsResponse,
    NonceStatsResponse,
)
from nonce_chat.exceptions import RequestTimedOut
from nonce_chat.services import ChatProxyService
from nonce_chat.utils import isoformat_utc, utc_now_iso


def _memory_usage() -> MemoryUsage:
    if sys.platform == "win32":
        return MemoryUsage(max_rss_mb=None)

    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is reported in bytes on macOS and kilobytes elsewhere
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return MemoryUsage(max_rss_mb=round(peak / divisor))


class ChatHandler:
    """HTTP handlers for the chat gateway.

    This handler delegates to ChatProxyService and handles HTTP-specific
    concerns like:
    - Converting entities to DTOs
    - Enforcing the per-request deadline
    - Reporting health and metrics

    Example:
        ```python
        handler = ChatHandler(chat_service=proxy)

        @router.get("/api/chat", response_model=ChatSuccessResponse)
        async def chat(user: str | None = None, system: str | None = None):
            return await handler.chat(ChatRequest(user=user, system=system))
        ```
    """

    def __init__(
        self,
        chat_service: ChatProxyService,
        app_settings: Settings | None = None,
    ) -> None:
        """Initialize the chat handler.

        Args:
            chat_service: The chat proxy for business logic (required).
            app_settings: Settings for environment and timeouts. Defaults to global settings.
        """
        self._chat = chat_service
        self._settings = app_settings or settings
        self._started_at = time.monotonic()

    @property
    def uptime(self) -> float:
        """Seconds since the handler was created."""
        return round(time.monotonic() - self._started_at, 3)

    async def chat(self, request: ChatRequest) -> ChatSuccessResponse:
        """Handle GET and POST /api/chat requests.

        Args:
            request: The chat request DTO

        Returns:
            ChatSuccessResponse wrapping the upstream payload

        Raises:
            RequestTimedOut: If the request deadline elapsed. The upstream
                call is cancelled, not left running.
            NonceChatError: Any other core failure, unchanged
        """
        try:
            result = await asyncio.wait_for(
                self._chat.send(request.user, request.system),
                timeout=self._settings.request_timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimedOut(
                f"Chat request exceeded {self._settings.request_timeout:g}s"
            ) from e

        return ChatSuccessResponse(
            success=True,
            data=result.data,
            timestamp=isoformat_utc(result.timestamp),
        )

    def cache_stats(self) -> CacheStatsResponse:
        """Read-only token cache statistics."""
        return CacheStatsResponse(**self._chat.token_store.get_stats())

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        return HealthCheckResponse(
            status="healthy",
            uptime=self.uptime,
            timestamp=utc_now_iso(),
            environment=self._settings.environment,
            cache=self.cache_stats(),
            memory=_memory_usage(),
        )

    async def metrics(self) -> MetricsResponse:
        """Handle GET /metrics requests."""
        return MetricsResponse(
            uptime=self.uptime,
            memory=_memory_usage(),
            cache=self.cache_stats(),
            nonce=NonceStatsResponse(**self._chat.nonce_fetcher.get_stats()),
            python_version=platform.python_version(),
            platform=sys.platform,
        )
