import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


DEFAULT_SYSTEM_PROMPT = (
    "I want you to act as a college student who is a girl in 18 years old "
    "and your name is Jasmine..."
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Runtime
    environment: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("PORT", "3000"))
    api_reload: bool = _env_bool("API_RELOAD", "false")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "60"))

    # Rate limiting (applies to /api/ routes only)
    rate_limit_window: int = int(os.getenv("RATE_LIMIT_WINDOW", "900"))  # 15 minutes
    rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "100"))
    trust_proxy: bool = _env_bool("TRUST_PROXY", "true")

    # Upstream
    origin_url: str = os.getenv("ORIGIN_URL", "https://mistral-ai.chat/")
    chat_url: str = os.getenv("CHAT_URL", "https://mistral-ai.chat/wp-admin/admin-ajax.php")
    chat_action: str = os.getenv("CHAT_ACTION", "ai_chat_response")
    user_agent: str = os.getenv("UPSTREAM_USER_AGENT", DEFAULT_USER_AGENT)
    chat_header_timeout: float = float(os.getenv("CHAT_HEADER_TIMEOUT", "10"))
    chat_body_timeout: float = float(os.getenv("CHAT_BODY_TIMEOUT", "30"))

    # Nonce
    nonce_ttl: int = int(os.getenv("NONCE_TTL", "3600"))  # 1 hour, real lifetime unknown
    nonce_max_retries: int = int(os.getenv("NONCE_MAX_RETRIES", "3"))
    nonce_backoff_base: float = float(os.getenv("NONCE_BACKOFF_BASE", "1.0"))
    nonce_timeout: float = float(os.getenv("NONCE_TIMEOUT", "10"))
    invalidate_on_reject: bool = _env_bool("INVALIDATE_ON_REJECT", "false")

    # Chat defaults
    default_user_message: str = os.getenv("DEFAULT_USER_MESSAGE", "Hello")
    default_system_prompt: str = os.getenv("DEFAULT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)

    @property
    def is_production(self) -> bool:
        """Whether the app runs in production mode (hides error details)."""
        return self.environment.lower() == "production"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.nonce_max_retries < 1:
            raise ValueError("NONCE_MAX_RETRIES must be at least 1")

        if self.nonce_ttl <= 0:
            raise ValueError("NONCE_TTL must be a positive number of seconds")

        if self.nonce_backoff_base < 0:
            raise ValueError("NONCE_BACKOFF_BASE must not be negative")

        if self.rate_limit_max < 1 or self.rate_limit_window < 1:
            raise ValueError(
                f"RATE_LIMIT_MAX and RATE_LIMIT_WINDOW must be positive, "
                f"got {self.rate_limit_max} / {self.rate_limit_window}"
            )

        if not self.default_user_message.strip() or not self.default_system_prompt.strip():
            raise ValueError("DEFAULT_USER_MESSAGE and DEFAULT_SYSTEM_PROMPT must not be blank")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
