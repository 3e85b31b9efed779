"""Exception handlers for the application."""

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from renderkit.exceptions import RenderException
from renderkit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


async def render_exception_handler(request: Request, exc: RenderException) -> PlainTextResponse:
    """Handle render exceptions that escaped a handler.

    The renderer reports its own failures in the response. This catches the
    ones raised before a renderer exists, such as a development-mode
    recompile hitting a broken template. The body is the error text, matching
    what the renderer writes for per-request failures.
    """
    log_with_context(
        logger,
        "warning",
        "Render error",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        url=str(request.url),
        event_type="render_exception",
    )

    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def general_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Handle general exceptions with logging."""
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        url=str(request.url),
        event_type="unhandled_error",
    )
    # Also log the traceback separately for debugging
    logger.error("Exception traceback:", exc_info=True)

    # Don't expose internal error details to clients
    return PlainTextResponse("Internal Server Error", status_code=500)


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(RenderException, render_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
