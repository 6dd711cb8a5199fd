"""Repository layer for data access.

This layer abstracts state and parsing behind protocol-based interfaces.
This enables:
- Easy swapping of implementations (in-memory -> Redis, regex -> HTML parser)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from nonce_chat.protocols import TokenParser, TokenStore

from .memory_token_store import InMemoryTokenStore
from .regex_token_parser import DEFAULT_NONCE_PATTERN, RegexTokenParser

__all__ = [
    "TokenStore",
    "TokenParser",
    "InMemoryTokenStore",
    "RegexTokenParser",
    "DEFAULT_NONCE_PATTERN",
]
