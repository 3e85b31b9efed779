"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from renderkit import __version__
from renderkit.config import Options, Settings, get_settings
from renderkit.core.lifespan import lifespan
from renderkit.factory import setup_renderer
from renderkit.middleware.error_handlers import register_error_handlers


def create_app(options: Options | None = None, settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application with the renderer installed.

    Templates are compiled here, before the app is returned, so a broken
    template directory fails the caller instead of the first request.

    Args:
        options: Renderer options (defaults: ./templates, .tmpl files)
        settings: Environment settings (defaults to get_settings())

    Returns:
        Configured FastAPI application instance

    Raises:
        TemplateCompileError: If the template directory cannot be compiled
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="renderkit",
        description="Response rendering helpers: JSON, XML, templated HTML/text and raw data.",
        version=__version__,
        lifespan=lifespan,
    )

    setup_renderer(app, options, settings)

    # Register exception handlers
    register_error_handlers(app)

    return app
