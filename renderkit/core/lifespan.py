"""Application lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from renderkit import __version__
from renderkit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    The renderer factory is installed before the app starts (see create_app),
    so template compile errors surface before any request is served. Here we
    only run the buffer pool lifecycle. Exceptions after yield are re-raised.
    """
    factory = app.state.renderer_factory

    log_with_context(
        logger,
        "info",
        "Starting renderkit application",
        version=__version__,
        env=factory.settings.env,
        event_type="app_startup",
    )

    await factory.pool.initialize()
    log_with_context(
        logger,
        "info",
        "Buffer pool initialized",
        capacity=factory.pool.capacity,
        event_type="buffer_pool_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        # Cleanup always runs, even if exception was raised
        log_with_context(
            logger,
            "info",
            "Shutting down renderkit application",
            event_type="app_shutdown",
        )

        await factory.pool.cleanup()
        log_with_context(
            logger,
            "info",
            "Buffer pool cleaned up",
            event_type="buffer_pool_cleanup",
        )
