"""FastAPI dependencies for dependency injection."""

from fastapi import Depends, Request

from renderkit.factory import RendererFactory
from renderkit.renderer import Renderer


async def get_renderer_factory(request: Request) -> RendererFactory:
    """
    Get the renderer factory from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared RendererFactory instance.

    Raises:
        RuntimeError: If setup_renderer() was never called for this app.
    """
    factory: RendererFactory | None = getattr(request.app.state, "renderer_factory", None)

    if factory is None:
        raise RuntimeError("Renderer not initialized. Call setup_renderer() when building the app.")

    return factory


def get_renderer(
    request: Request,
    factory: RendererFactory = Depends(get_renderer_factory),
) -> Renderer:
    """
    Get a renderer bound to the current request.

    A plain function so FastAPI runs it in the threadpool: in development
    every call recompiles the template directory.

    Args:
        request: The FastAPI request object.
        factory: The shared RendererFactory.

    Returns:
        A Renderer for this request only.

    Example:
        @app.get("/")
        def index(render: Renderer = Depends(get_renderer)):
            return render.html(200, "index", {"title": "Home"})
    """
    return factory.for_request(request)
