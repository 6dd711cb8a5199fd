import uvicorn

from nonce_chat.config import settings


def main() -> None:
    """Run the gateway with uvicorn."""
    uvicorn.run(
        "nonce_chat.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        timeout_graceful_shutdown=30,
    )


if __name__ == "__main__":
    main()
