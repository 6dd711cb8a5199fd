import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from nonce_chat.api.dependencies import lifespan
from nonce_chat.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from nonce_chat.api.routes import router
from nonce_chat.config import Settings, get_settings
from nonce_chat.dto import ErrorResponse
from nonce_chat.exceptions import NonceChatError, RequestTimedOut
from nonce_chat.utils import utc_now_iso

logger = logging.getLogger(__name__)

# Core failures not listed here map to 500
ERROR_STATUS: dict[type[NonceChatError], int] = {
    RequestTimedOut: 504,
}


def _error_response(status_code: int, message: str, path: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, timestamp=utc_now_iso(), path=path)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _is_production(request: Request) -> bool:
    return request.app.state.settings.is_production


async def handle_core_error(request: Request, exc: NonceChatError) -> JSONResponse:
    """Translate core failures into the error envelope."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    logger.error(
        "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc
    )
    message = "Internal server error" if _is_production(request) else str(exc)
    return _error_response(status_code, message)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error_response(404, "Route not found", path=request.url.path)
    return _error_response(exc.status_code, str(exc.detail))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Invalid request" if _is_production(request) else f"Invalid request: {exc.errors()}"
    return _error_response(400, message)


async def catch_unexpected_errors(request: Request, call_next) -> Response:
    """Turn non-core exceptions into a 500 inside the middleware stack.

    Runs innermost so security and CORS headers still wrap the error response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Internal server error" if _is_production(request) else str(exc)
        return _error_response(500, message)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the gateway application.

    Args:
        app_settings: Settings to wire services with. Defaults to environment settings.

    Returns:
        Configured FastAPI app; services are created in the lifespan.
    """
    cfg = app_settings or get_settings()

    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Nonce Chat API",
        description="AI chat proxy with automatic nonce management and caching",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = cfg

    # Last added runs first: CORS answers preflights before anything else
    app.add_middleware(BaseHTTPMiddleware, dispatch=catch_unexpected_errors)  # type: ignore[arg-type]
    app.add_middleware(GZipMiddleware, minimum_size=1024)  # type: ignore[arg-type]
    app.add_middleware(
        RateLimitMiddleware,  # type: ignore[arg-type]
        limit=cfg.rate_limit_max,
        window=cfg.rate_limit_window,
        trust_proxy=cfg.trust_proxy,
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=[origin.strip() for origin in cfg.cors_origins.split(",")],
        allow_methods=["GET", "POST", "OPTIONS", "PUT", "DELETE"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    if not cfg.is_production:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start_time = time.time()
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "%s %s -> %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
            return response

    app.add_exception_handler(NonceChatError, handle_core_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]

    app.include_router(router)
    return app


app = create_app()
