"""Typed failures raised by the core.

Services raise these; only the API layer decides which HTTP status each one
maps to. Messages must never contain token values.
"""


class NonceChatError(Exception):
    """Base class for every failure raised by the nonce chat core."""


class UpstreamUnavailable(NonceChatError):
    """The upstream site could not be reached or answered with a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TokenNotFound(NonceChatError):
    """The origin page did not contain an extractable nonce."""


class NonceFetchExhausted(NonceChatError):
    """Every nonce fetch attempt failed."""

    def __init__(self, attempts: int, last_error: Exception | None) -> None:
        super().__init__(f"Nonce fetch failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class UpstreamRejected(NonceChatError):
    """The chat endpoint refused the request or answered with something other than JSON."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RequestTimedOut(NonceChatError):
    """The gateway deadline for a chat request elapsed."""
