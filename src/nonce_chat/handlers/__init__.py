"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (State / parsing)
"""

from .chat_handler import ChatHandler

__all__ = [
    "ChatHandler",
]
