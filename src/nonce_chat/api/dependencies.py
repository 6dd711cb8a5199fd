"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from nonce_chat.config import Settings, get_settings
from nonce_chat.handlers import ChatHandler
from nonce_chat.repositories import InMemoryTokenStore
from nonce_chat.services import ChatProxyService, NonceFetcher

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> ChatHandler:
    """Dependency injection for ChatHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ChatHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "chat_handler", None)
    if handler is None:
        raise RuntimeError("ChatHandler not initialized. Check lifespan setup.")
    return handler


def build_chat_service(app_settings: Settings) -> ChatProxyService:
    """Wire store -> fetcher -> proxy from one Settings instance."""
    token_store = InMemoryTokenStore.create()
    nonce_fetcher = NonceFetcher(
        token_store=token_store,
        origin_url=app_settings.origin_url,
        user_agent=app_settings.user_agent,
        max_retries=app_settings.nonce_max_retries,
        backoff_base=app_settings.nonce_backoff_base,
        ttl=app_settings.nonce_ttl,
        timeout=app_settings.nonce_timeout,
    )
    return ChatProxyService(
        token_store=token_store,
        nonce_fetcher=nonce_fetcher,
        chat_url=app_settings.chat_url,
        origin_url=app_settings.origin_url,
        action=app_settings.chat_action,
        user_agent=app_settings.user_agent,
        default_user_message=app_settings.default_user_message,
        default_system_prompt=app_settings.default_system_prompt,
        invalidate_on_reject=app_settings.invalidate_on_reject,
        header_timeout=app_settings.chat_header_timeout,
        body_timeout=app_settings.chat_body_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Token store and nonce fetcher (shared by the proxy)
    2. Chat proxy service - stored in app.state.chat_service
    3. Handler (HTTP endpoints) - stored in app.state.chat_handler

    Cleanup:
        Closes upstream HTTP clients and removes services from app.state
    """
    app_settings: Settings = getattr(app.state, "settings", None) or get_settings()

    chat_service = build_chat_service(app_settings)
    chat_handler = ChatHandler(chat_service=chat_service, app_settings=app_settings)

    # Store in app.state (FastAPI pattern)
    app.state.chat_service = chat_service
    app.state.chat_handler = chat_handler

    logger.info("Environment: %s", app_settings.environment)
    logger.info("Origin: %s", app_settings.origin_url)
    logger.info(
        "Nonce TTL: %ds, retries: %d, invalidate on reject: %s",
        app_settings.nonce_ttl,
        app_settings.nonce_max_retries,
        app_settings.invalidate_on_reject,
    )

    yield

    await chat_service.close()
    await chat_service.nonce_fetcher.close()
    cleared = chat_service.token_store.clear()
    del app.state.chat_handler
    del app.state.chat_service
    logger.info("Chat service shut down (%d cached tokens dropped)", cleared)


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ChatHandler, Depends(get_handler)]
