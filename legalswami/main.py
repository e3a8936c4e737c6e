"""
Main application module for the LegalSwami API.

Contains the create_app factory function for configuring and initializing
the FastAPI application with all routers, middleware, and error handlers.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from legalswami.api import chat_router, health_router, routing_router
from legalswami.config import VERSION, get_settings
from legalswami.dependencies import get_completion_client, get_model_dispatcher
from legalswami.logging_config import configure_logging
from legalswami.middleware import register_error_handlers, register_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown lifecycle hooks.

    Credentials and models are resolved at startup so configuration problems
    show up in the logs before the first request. An empty credential pool
    does not stop the service.
    """
    dispatcher = app.dependency_overrides.get(get_model_dispatcher, get_model_dispatcher)()
    structlog.get_logger().info(
        "app_started",
        models=dispatcher.available_models,
        keys_available=dispatcher.pool.available_count,
    )
    yield
    if get_completion_client.cache_info().currsize:
        await get_completion_client().close()
    structlog.get_logger().info("app_stopped")


def create_app() -> FastAPI:
    """
    Creates and configures the FastAPI application instance.

    Sets up logging, middleware, error handlers, and API routers.

    Dependency injection is handled through legalswami/dependencies.py using
    @lru_cache() for singleton management.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    configure_logging(settings.log_dir, settings.log_level)

    app = FastAPI(
        title="LegalSwami API",
        description="Legal Q&A assistant backed by rotating upstream credentials and model fallback.",
        version=VERSION,
        lifespan=lifespan,
    )

    register_error_handlers(app)
    register_middleware(app)

    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(routing_router)

    return app


app = create_app()
