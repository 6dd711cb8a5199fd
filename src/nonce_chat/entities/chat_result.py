"""Chat result domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class ChatResultEntity:
    """Upstream chat payload, relayed verbatim.

    Attributes:
        data: Parsed JSON body from the chat endpoint
        timestamp: When the response was received (UTC)
    """

    data: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
