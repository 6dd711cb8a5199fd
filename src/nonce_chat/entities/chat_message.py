"""Chat message domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChatMessageEntity:
    """A user message paired with the system prompt it is sent under.

    The upstream API takes one blended text field instead of separate roles,
    so both parts are folded into ``composed``.
    """

    user_message: str
    system_prompt: str

    @classmethod
    def create(
        cls,
        user_message: str | None,
        system_prompt: str | None,
        default_user_message: str,
        default_system_prompt: str,
    ) -> "ChatMessageEntity":
        """Build a message, substituting defaults for absent or blank parts."""
        user = user_message if user_message and user_message.strip() else default_user_message
        system = system_prompt if system_prompt and system_prompt.strip() else default_system_prompt
        return cls(user_message=user, system_prompt=system)

    @property
    def composed(self) -> str:
        return f"[SYSTEM]: {self.system_prompt} | [USER]: {self.user_message}"
