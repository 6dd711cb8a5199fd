"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .chat_message import ChatMessageEntity
from .chat_result import ChatResultEntity
from .nonce_token import NonceTokenEntity

__all__ = ["ChatMessageEntity", "ChatResultEntity", "NonceTokenEntity"]
