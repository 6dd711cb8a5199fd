"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (in-memory -> Redis, regex -> HTML parser)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .token_parser import TokenParser
from .token_store import NONCE_KEY, TokenStore

__all__ = [
    "NONCE_KEY",
    "TokenParser",
    "TokenStore",
]
