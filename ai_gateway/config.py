"""
Application configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: Settings grouped by concern
- Clear naming: Descriptive property names
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewayConfig(BaseSettings):
    """
    Gateway configuration with validation.

    Loads from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="AIGateway", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    identity_header: str = Field(
        default="X-User-ID", description="Header carrying the caller identity"
    )
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="CORS allowed origins",
    )

    # Redis settings
    redis_enabled: bool = Field(default=True, description="Use Redis backing stores")
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    redis_db: int = Field(default=0, ge=0, le=15, description="Redis database")
    redis_password: str = Field(default="", description="Redis password")
    redis_max_connections: int = Field(default=10, ge=1, description="Max connections")
    redis_socket_timeout: float = Field(
        default=2.0, gt=0.0, description="Redis socket timeout in seconds"
    )

    # LLM Provider settings
    default_llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai", description="Default provider"
    )
    openai_api_key: str = Field(default="", description="OpenAI API key")
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    default_model: str = Field(default="gpt-4o-mini", description="Default model")
    anthropic_model: str = Field(
        default="claude-3-5-haiku-latest", description="Model used with Anthropic"
    )

    # Cache settings
    content_cache_ttl_seconds: int = Field(
        default=3600, ge=1, description="TTL for content generation features"
    )
    matching_cache_ttl_seconds: int = Field(
        default=1800, ge=1, description="TTL for time-sensitive matching features"
    )
    memory_cache_max_entries: int = Field(
        default=1024, ge=1, description="In-memory cache capacity"
    )

    # Rate limit settings
    ai_rate_limit_per_minute: int = Field(
        default=10, ge=1, description="AI generation requests per window"
    )
    rate_limit_window_seconds: int = Field(
        default=60, ge=1, description="Fixed window length in seconds"
    )
    rate_limit_fail_open: bool = Field(
        default=True, description="Admit requests when the counter store is down"
    )

    # Retry settings
    retry_max_attempts: int = Field(default=3, ge=1, le=10, description="Max attempts")
    retry_base_delay_seconds: float = Field(
        default=2.0, ge=0.0, description="First backoff delay"
    )
    retry_backoff_multiplier: float = Field(
        default=2.0, ge=1.0, description="Backoff multiplier"
    )
    retry_max_delay_seconds: float = Field(
        default=30.0, ge=0.0, description="Backoff delay ceiling"
    )
    upstream_timeout_seconds: float = Field(
        default=30.0, gt=0.0, description="Per-attempt upstream timeout"
    )
    request_deadline_seconds: float = Field(
        default=60.0, gt=0.0, description="End-to-end deadline per request"
    )

    # Coordination
    enable_single_flight: bool = Field(
        default=False, description="Coalesce concurrent misses for one key"
    )

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def redis_url(self) -> str:
        """Build Redis URL."""
        if self.redis_password:
            return (
                f"redis://:{self.redis_password}@"
                f"{self.redis_host}:{self.redis_port}/{self.redis_db}"
            )
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global configuration instance
config = GatewayConfig()
