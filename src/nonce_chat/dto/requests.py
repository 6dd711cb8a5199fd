"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request DTO for the chat endpoint.

    Both fields are optional; blank values are replaced by defaults in the
    service layer before anything is sent upstream.
    """

    user: str | None = Field(
        None,
        description="User message to send to the AI",
        examples=["Tell me about yourself"],
    )
    system: str | None = Field(
        None,
        description="Custom system prompt (optional)",
        examples=["You are a helpful assistant"],
    )
