"""HTTP routes for the chat gateway."""

import json
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from nonce_chat.api.dependencies import HandlerDep
from nonce_chat.dto import (
    ChatRequest,
    ChatSuccessResponse,
    ErrorResponse,
    HealthCheckResponse,
    MetricsResponse,
)

router = APIRouter()

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Upstream or nonce failure"},
    504: {"model": ErrorResponse, "description": "Upstream did not answer in time"},
}

CHAT_BODY_SCHEMA = {
    "type": "object",
    "properties": {
        "user": {"type": "string", "example": "Tell me about yourself"},
        "system": {"type": "string", "example": "You are a helpful assistant"},
    },
}

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _as_text(value: Any) -> str | None:
    # Uploaded files, numbers and nested JSON fall back to defaults
    return value if isinstance(value, str) else None


async def read_chat_body(request: Request) -> dict[str, str | None]:
    """Pull ``user``/``system`` from a JSON or form body; anything else is empty."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == "application/json":
        raw = await request.body()
        if not raw.strip():
            return {}
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Malformed JSON body",
            ) from e
        if not isinstance(payload, dict):
            return {}
        return {"user": _as_text(payload.get("user")), "system": _as_text(payload.get("system"))}

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return {"user": _as_text(form.get("user")), "system": _as_text(form.get("system"))}

    return {}


@router.get(
    "/api/chat",
    response_model=ChatSuccessResponse,
    responses=ERROR_RESPONSES,
    summary="Get AI chat response",
)
async def get_chat(
    handler: HandlerDep,
    user: str | None = Query(None, description="User message to send to the AI"),
    system: str | None = Query(None, description="Custom system prompt (optional)"),
) -> ChatSuccessResponse:
    """Send a message and get an AI response using a GET request."""
    return await handler.chat(ChatRequest(user=user, system=system))


@router.post(
    "/api/chat",
    response_model=ChatSuccessResponse,
    responses={**ERROR_RESPONSES, 400: {"model": ErrorResponse, "description": "Malformed body"}},
    summary="Post AI chat message",
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {
                "application/json": {"schema": CHAT_BODY_SCHEMA},
                "application/x-www-form-urlencoded": {"schema": CHAT_BODY_SCHEMA},
            },
        }
    },
)
async def post_chat(
    request: Request,
    handler: HandlerDep,
    user: str | None = Query(None, description="Fallback when the body has no user"),
    system: str | None = Query(None, description="Fallback when the body has no system"),
) -> ChatSuccessResponse:
    """Send a message via POST with a JSON or form body; query params are the fallback."""
    body = await read_chat_body(request)
    return await handler.chat(
        ChatRequest(
            user=body.get("user") or user,
            system=body.get("system") or system,
        )
    )


@router.get("/health", response_model=HealthCheckResponse, summary="Health check")
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """API health status, token cache statistics and memory usage."""
    return await handler.health_check()


@router.get("/metrics", response_model=MetricsResponse, summary="System metrics")
async def metrics(handler: HandlerDep) -> MetricsResponse:
    """Uptime, memory, token cache and nonce fetcher figures."""
    return await handler.metrics()


@router.get("/", include_in_schema=False)
async def root() -> RedirectResponse:
    return RedirectResponse(url="/docs")
