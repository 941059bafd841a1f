"""
Main FastAPI application.

Following Sandi Metz:
- Single Responsibility: Application setup and configuration
- Small methods: Each lifecycle stage isolated
- Clear naming: Descriptive function names
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import ConnectionPool
from starlette.middleware.gzip import GZipMiddleware

from ai_gateway.api.middleware import RequestLoggingMiddleware, default_logging_config
from ai_gateway.api.routes import ai, health, metrics
from ai_gateway.api.routes.docs import API_DESCRIPTION, TAGS_METADATA
from ai_gateway.cache.cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore
from ai_gateway.config import GatewayConfig, config
from ai_gateway.fallback.generator import FallbackGenerator
from ai_gateway.features.registry import FeatureRegistry, build_default_registry
from ai_gateway.llm.factory import LLMProviderFactory
from ai_gateway.llm.provider import BaseLLMProvider
from ai_gateway.llm.retry import RetryExecutor, RetryPolicy
from ai_gateway.models.ratelimit import RateLimitConfig
from ai_gateway.monitoring.usage_tracker import UsageTracker
from ai_gateway.pipeline.single_flight import SingleFlight
from ai_gateway.ratelimit.backends import (
    CounterBackend,
    InMemoryCounterBackend,
    RedisCounterBackend,
)
from ai_gateway.ratelimit.rate_limiter import FixedWindowRateLimiter
from ai_gateway.repositories.redis_repository import RedisRepository, create_redis_pool
from ai_gateway.services.request_coordinator import RequestCoordinator
from ai_gateway.utils.logger import get_logger, setup_logging

setup_logging(config.log_level, json_output=config.is_production)
logger = get_logger(__name__)


class ApplicationState:
    """
    Manages application-wide state.

    Every gateway component is constructed once here and shared for the
    life of the process.
    """

    def __init__(self, settings: GatewayConfig = config) -> None:
        self.settings = settings
        self.redis_pool: Optional[ConnectionPool] = None
        self.cache: Optional[CacheStore] = None
        self.rate_limiter: Optional[FixedWindowRateLimiter] = None
        self.llm_provider: Optional[BaseLLMProvider] = None
        self.registry: Optional[FeatureRegistry] = None
        self.usage_tracker = UsageTracker()
        self.coordinator: Optional[RequestCoordinator] = None

    async def startup(self) -> None:
        """Initialize application resources."""
        logger.info("Starting AI gateway", env=self.settings.app_env)
        try:
            counters = self._build_stores()
            self.rate_limiter = FixedWindowRateLimiter(
                counters, fail_open=self.settings.rate_limit_fail_open
            )
            self.llm_provider = LLMProviderFactory.create(settings=self.settings)
            self.registry = build_default_registry(self.settings)
            self.coordinator = self._build_coordinator()
            logger.info(
                "AI gateway started successfully",
                provider=self.llm_provider.get_name(),
                features=self.registry.list_features(),
            )
        except Exception as e:
            logger.error("Failed to initialize AI gateway", error=str(e))
            raise

    def _build_stores(self) -> CounterBackend:
        """Create cache store and counter backend; returns the latter."""
        if not self.settings.redis_enabled:
            logger.warning("Redis disabled, using in-memory cache and counters")
            self.cache = InMemoryCacheStore(self.settings.memory_cache_max_entries)
            return InMemoryCounterBackend()

        self.redis_pool = create_redis_pool(self.settings)
        repository = RedisRepository(self.redis_pool)
        self.cache = RedisCacheStore(repository)
        logger.info("Redis pool initialized")
        return RedisCounterBackend(repository)

    def _build_coordinator(self) -> RequestCoordinator:
        """Wire the request coordinator."""
        single_flight = SingleFlight() if self.settings.enable_single_flight else None
        return RequestCoordinator(
            cache=self.cache,
            rate_limiter=self.rate_limiter,
            retry_executor=RetryExecutor(RetryPolicy.from_settings(self.settings)),
            llm_provider=self.llm_provider,
            registry=self.registry,
            fallback=FallbackGenerator(),
            rate_limit=RateLimitConfig(
                limit=self.settings.ai_rate_limit_per_minute,
                window_seconds=self.settings.rate_limit_window_seconds,
            ),
            usage_tracker=self.usage_tracker,
            single_flight=single_flight,
            deadline_seconds=self.settings.request_deadline_seconds,
        )

    async def shutdown(self) -> None:
        """Cleanup application resources."""
        logger.info("Shutting down AI gateway")
        try:
            if self.redis_pool:
                await self.redis_pool.disconnect()
                logger.info("Redis pool closed")
            logger.info("AI gateway shut down successfully")
        except Exception as e:
            logger.error("Error during shutdown", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    state = ApplicationState()
    await state.startup()
    app.state.app_state = state

    yield

    await state.shutdown()


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=config.app_name,
        description=API_DESCRIPTION,
        version=config.app_version,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )

    # Add middleware (order matters - first added is last executed)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware, config=default_logging_config)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Cache",
            "X-Cost-Saved",
            "X-Provenance",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(ai.router, prefix="/api/v1", tags=["ai"])
    app.include_router(metrics.router, prefix="/api/v1", tags=["metrics"])

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ai_gateway.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.is_development,
    )
