from typing import List, Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing."""


class Settings(BaseSettings):
    """
    Application configuration settings.
    """
    model_config = SettingsConfigDict(
        env_prefix="FULLTASK_", env_file=".env", extra="ignore", populate_by_name=True
    )

    # Service Info
    service_name: str = "fulltask-ai-tutor"
    product_name: str = "FullTask AI Tutor"
    app_version: str = "v6.7"
    environment: str = "local"
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 10000
    cors_origins: List[str] = ["*"]

    # Completion API (OpenAI-compatible)
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("FULLTASK_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 800
    top_p: float = 1.0

    # Attribution
    owner_name: str = "Akin S. Sokpah"
    owner_location: str = "Liberia"

    # Conversation store
    store_backend: str = "auto"  # auto | memory | redis
    redis_url: Optional[str] = None
    redis_socket_timeout: float = 5.0
    history_cap: int = 48

    # Rate limiting (per client address, sliding window; 0 disables)
    rate_limit_max_requests: int = 60
    rate_limit_window_seconds: float = 10.0

    # Uploads
    upload_max_chars: int = 15000
    upload_max_bytes: int = 10 * 1024 * 1024

    def resolved_store_backend(self) -> str:
        """Backend name after resolving 'auto' against redis_url."""
        backend = self.store_backend.lower()
        if backend == "auto":
            return "redis" if self.redis_url else "memory"
        return backend

    def check_startup(self) -> None:
        """
        Fail fast on settings the service cannot run without.

        Raises:
            ConfigurationError: If the completion API key is missing or the
                store backend is unusable.
        """
        if not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY missing")
        backend = self.resolved_store_backend()
        if backend not in ("memory", "redis"):
            raise ConfigurationError(f"Unsupported store backend: {self.store_backend}")
        if backend == "redis" and not self.redis_url:
            raise ConfigurationError("store_backend is 'redis' but REDIS_URL is not set")


settings = Settings()
