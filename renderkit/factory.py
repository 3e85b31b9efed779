"""Renderer factory: compile once at setup, hand out one Renderer per request."""

from fastapi import FastAPI, Request

from renderkit.config import Options, Settings, get_settings, prepare_charset, prepare_options
from renderkit.logging_config import get_logger, log_with_context
from renderkit.renderer import Renderer
from renderkit.state_managers import DEFAULT_POOL_CAPACITY, BufferPool
from renderkit.templates import TemplateSet, compile_templates
from renderkit.writer import ResponseWriter

logger = get_logger(__name__)


class RendererFactory:
    """Builds per-request renderers.

    In development every request recompiles the template directory, so edits
    on disk show up without a restart. In production every request renders
    from the set compiled here. That set is never mutated after compilation,
    so sharing it across concurrent requests needs no copy and no lock.
    """

    def __init__(
        self,
        options: Options | None = None,
        settings: Settings | None = None,
        pool_capacity: int = DEFAULT_POOL_CAPACITY,
    ):
        """Resolve options and compile the templates.

        Args:
            options: Renderer options; defaults are filled in for empty fields
            settings: Environment settings (defaults to get_settings())
            pool_capacity: Number of idle buffers kept for template execution

        Raises:
            TemplateCompileError: If the template directory cannot be compiled
        """
        self.options = prepare_options(options)
        self.settings = settings or get_settings()
        self.charset = prepare_charset(self.options.charset)
        self.pool = BufferPool(pool_capacity)
        self.templates = compile_templates(self.options)

        log_with_context(
            logger,
            "info",
            "Renderer initialized",
            env=self.settings.env,
            directory=self.options.directory,
            template_count=len(self.templates),
            event_type="renderer_setup",
        )

    def template_set(self) -> TemplateSet:
        """Templates to use for one request."""
        if self.settings.is_development:
            log_with_context(
                logger,
                "debug",
                "Recompiling templates",
                directory=self.options.directory,
                event_type="templates_recompile",
            )
            return compile_templates(self.options)
        return self.templates

    def for_request(self, request: Request) -> Renderer:
        """Create the renderer bound to one request."""
        return Renderer(
            ResponseWriter(),
            request,
            self.template_set(),
            self.options,
            self.charset,
            self.pool,
        )


def setup_renderer(
    app: FastAPI,
    options: Options | None = None,
    settings: Settings | None = None,
) -> RendererFactory:
    """Compile templates and attach a RendererFactory to app.state.

    Raises:
        TemplateCompileError: If the template directory cannot be compiled
    """
    factory = RendererFactory(options, settings)
    app.state.renderer_factory = factory
    return factory
