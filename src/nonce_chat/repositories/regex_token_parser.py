"""Regular-expression token parser.

The origin embeds the nonce in an inline script as ``"nonce":"<token>"``.
"""

import re

from nonce_chat.exceptions import TokenNotFound

DEFAULT_NONCE_PATTERN = r'nonce":"(.*?)"'


class RegexTokenParser:
    """Extract the first capture group of a pattern from the page body.

    This class satisfies the TokenParser protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, pattern: str = DEFAULT_NONCE_PATTERN) -> None:
        """Initialize the parser.

        Args:
            pattern: Regular expression with exactly one capture group.
        """
        self._pattern = re.compile(pattern)
        if self._pattern.groups != 1:
            raise ValueError("pattern must contain exactly one capture group")

    @property
    def pattern(self) -> str:
        """Get the pattern source."""
        return self._pattern.pattern

    def parse(self, body: str | bytes) -> str:
        """Extract the token from a page body.

        Args:
            body: Raw page body

        Returns:
            The first non-empty capture

        Raises:
            TokenNotFound: If the pattern is absent or captured nothing
        """
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")

        match = self._pattern.search(body)
        if match is None or not match.group(1):
            raise TokenNotFound("Nonce not found in HTML")
        return match.group(1)
