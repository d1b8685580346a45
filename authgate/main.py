#!/usr/bin/env python3
"""
authgate - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the authentication stack
3. Runs the API server and the nonce reaper

All business logic is in the modules, following black box principles.
"""

import asyncio
import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from authgate import __version__
from authgate.config.provider import ConfigProvider, EnvConfigProvider
from authgate.logging_config import get_logging_config
from authgate.modules.api import HealthResponse, create_auth_router
from authgate.modules.auth.factory import AuthFactory
from authgate.modules.auth.service import ChallengeAuthService
from authgate.modules.storage import StorageModule

# Configure logging with health check suppression
log_config.dictConfig(get_logging_config(EnvConfigProvider().get_api_config().log_level))
logger = logging.getLogger(__name__)


async def reap_periodically(store, interval: int) -> None:
    """
    Remove expired pending verifications every ``interval`` seconds.

    Runs until cancelled. Errors are logged and the loop continues.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await store.reap()
            if removed:
                logger.info(f"Reaped {removed} expired pending verifications")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Nonce reaper failed: {e}")


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    auth_service: Optional[ChallengeAuthService] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config_provider: Configuration source, defaults to environment variables
        auth_service: Prebuilt service; when given, the lifespan does not build one

    Returns:
        Configured FastAPI application
    """
    config_provider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        logger.info("Starting authgate API...")
        storage: Optional[StorageModule] = None

        if app.state.auth_service is None:
            nonce_config = config_provider.get_nonce_config()
            redis_client = None
            if nonce_config.uses_redis:
                storage = StorageModule(nonce_config.redis_url, nonce_config.redis_timeout)
                redis_client = await storage.connect()
            app.state.auth_service = AuthFactory.build(config_provider, redis_client)
            logger.info("Authentication service initialized via factory")

        reap_interval = config_provider.get_nonce_config().reap_interval
        reaper = asyncio.create_task(reap_periodically(app.state.auth_service.store, reap_interval))

        logger.info("authgate API started successfully")

        yield

        logger.info("Shutting down authgate API...")
        reaper.cancel()
        try:
            await reaper
        except asyncio.CancelledError:
            pass
        if storage:
            await storage.disconnect()
        logger.info("authgate API shutdown complete")

    app = FastAPI(
        title="authgate",
        description="Two-step challenge/response authentication",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.auth_service = auth_service
    app.include_router(create_auth_router())

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            200: Service healthy
            503: Authentication stack not initialized
        """
        service = request.app.state.auth_service
        if service is None:
            return JSONResponse(status_code=503, content={"status": "unhealthy"})
        return HealthResponse(nonce_backend=service.store.backend)

    @app.exception_handler(redis.ConnectionError)
    @app.exception_handler(redis.TimeoutError)
    async def redis_error_handler(request, exc):
        """Handle Redis connection errors and timeouts."""
        logger.error(f"Redis unavailable: {exc}")
        return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})

    return app


app = create_app()


if __name__ == "__main__":
    api_config = EnvConfigProvider().get_api_config()
    # Use dict config for logging, not file path
    uvicorn.run(
        "authgate.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )
