"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ChatSuccessResponse(BaseModel):
    """Response DTO for a relayed chat message."""

    success: bool = Field(True, description="Always true for a relayed response")
    data: Any = Field(..., description="Upstream JSON payload, unmodified")
    timestamp: str = Field(..., description="ISO 8601 time the response was relayed")


class ErrorResponse(BaseModel):
    """Response DTO for any failed request."""

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Error message (generic in production)")
    timestamp: str = Field(..., description="ISO 8601 time of the failure")
    path: str | None = Field(None, description="Requested path, for unknown routes")


class CacheStatsResponse(BaseModel):
    """Response DTO for token cache statistics."""

    keys: int = Field(..., description="Number of live cache entries", ge=0)
    hits: int = Field(..., description="Cache reads that returned a token", ge=0)
    misses: int = Field(..., description="Cache reads that found nothing live", ge=0)


class NonceStatsResponse(BaseModel):
    """Response DTO for nonce fetcher statistics."""

    fetches: int = Field(..., description="Successful nonce fetches", ge=0)
    failures: int = Field(..., description="Fetches that exhausted every retry", ge=0)
    last_fetched_at: float | None = Field(
        None,
        description="Unix timestamp of the last successful fetch",
    )


class MemoryUsage(BaseModel):
    """Process memory figures."""

    max_rss_mb: int | None = Field(
        ...,
        description="Peak resident set size in MB, null where the platform does not report it",
        ge=0,
    )


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy'")
    uptime: float = Field(..., description="Seconds since startup")
    timestamp: str = Field(..., description="ISO 8601 time of the check")
    environment: str = Field(..., description="Runtime environment name")
    cache: CacheStatsResponse
    memory: MemoryUsage


class MetricsResponse(BaseModel):
    """Response DTO for system metrics."""

    uptime: float = Field(..., description="Seconds since startup")
    memory: MemoryUsage
    cache: CacheStatsResponse
    nonce: NonceStatsResponse
    python_version: str = Field(..., description="Interpreter version")
    platform: str = Field(..., description="Operating system platform")
