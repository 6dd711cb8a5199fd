"""Token parser protocol.

The origin page has no contract, so extraction lives behind this single
interface. A regex is the default; a structured HTML parse can replace it
without touching caching or proxy code.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenParser(Protocol):
    """Protocol for nonce extraction strategies."""

    def parse(self, body: str | bytes) -> str:
        """Extract the token from a page body.

        Args:
            body: Raw page body

        Returns:
            The token value (never empty)

        Raises:
            TokenNotFound: If the body holds no extractable token
        """
        ...
