"""Per-request renderer.

A Renderer wraps one response and offers the serialize-and-write operations
handlers call: json, xml, html, text, data, status/error and redirect. Every
operation writes into the response writer and returns the built response, so
a handler can simply `return render.json(200, value)`.
"""

import posixpath
from collections.abc import Callable, Mapping
from http import HTTPStatus
from typing import Any
from urllib.parse import urlsplit

from fastapi import Request
from fastapi.responses import Response
from jinja2 import Environment, Template
from markupsafe import Markup, escape
from starlette.datastructures import MutableHeaders

from renderkit.config import (
    CONTENT_BINARY,
    CONTENT_JSON,
    CONTENT_TYPE,
    CONTENT_XML,
    DEFAULT_CHARSET,
    HTMLOptions,
    Options,
)
from renderkit.exceptions import SerializationError
from renderkit.logging_config import get_logger, log_with_context
from renderkit.serializers import marshal_json, marshal_xml
from renderkit.state_managers import BufferPool
from renderkit.templates import CURRENT, YIELD, TemplateSet, helpers
from renderkit.writer import ResponseWriter, http_error

logger = get_logger(__name__)

# Names every template can read besides the keys of a mapping binding
DATA_VAR = "data"
EXTRA_VAR = "extra"

# Mapping keys with these names stay reachable only through `data`
RESERVED_VARS = frozenset({DATA_VAR, EXTRA_VAR, YIELD, CURRENT})


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


class Renderer:
    """Serializes values and renders templates into a single response."""

    def __init__(
        self,
        writer: ResponseWriter,
        request: Request,
        templates: TemplateSet,
        options: Options,
        charset: str,
        pool: BufferPool,
    ):
        """Initialize a renderer for one request.

        Args:
            writer: Response stream for this request
            request: Incoming request, used to resolve relative redirects
            templates: Compiled template set (fresh or shared snapshot)
            options: Prepared options, shared across requests
            charset: Precomputed Content-Type suffix, e.g. "; charset=UTF-8"
            pool: Shared buffer pool for template execution
        """
        self.writer = writer
        self.request = request
        self.templates = templates
        self.options = options
        self.charset = charset
        self.pool = pool
        self._encoding = options.charset or DEFAULT_CHARSET

    @property
    def response(self) -> Response:
        return self.writer.to_response()

    @property
    def html_template(self) -> Environment:
        """The auto-escaping template environment."""
        return self.templates.html

    @property
    def text_template(self) -> Environment:
        """The plain (non-escaping) template environment."""
        return self.templates.text

    def header(self) -> MutableHeaders:
        """Outbound headers, free to be changed before or after other calls."""
        return self.writer.headers

    def json(self, status: int, value: Any) -> Response:
        """Write value as JSON with the given status."""
        try:
            result = marshal_json(value, self.options.indent_json)
        except SerializationError as e:
            return self._fail("json", e)

        self.writer.headers[CONTENT_TYPE] = CONTENT_JSON + self.charset
        self.writer.write_header(status)
        if self.options.prefix_json:
            self.writer.write(self.options.prefix_json)
        self.writer.write(result)
        return self.response

    def xml(self, status: int, value: Any) -> Response:
        """Write value as XML with the given status."""
        try:
            result = marshal_xml(value, self.options.indent_xml)
        except SerializationError as e:
            return self._fail("xml", e)

        self.writer.headers[CONTENT_TYPE] = CONTENT_XML + self.charset
        self.writer.write_header(status)
        if self.options.prefix_xml:
            self.writer.write(self.options.prefix_xml)
        self.writer.write(result)
        return self.response

    def html(self, status: int, name: str, binding: Any = None, html_opt: HTMLOptions | None = None) -> Response:
        """Render the named template with auto-escaping.

        When a layout is in effect the layout template is rendered instead,
        and its `yield` produces the output of `name`. A mapping binding gets
        the options' extra values merged into a copy of it.
        """
        opt = self._prepare_html_options(html_opt)
        if isinstance(binding, Mapping):
            binding = {**binding, **opt.extra}
        return self._render("html", status, name, binding, opt, escaping=True)

    def text(self, status: int, name: str, binding: Any = None, html_opt: HTMLOptions | None = None) -> Response:
        """Render the named template without escaping.

        Layouts work as in html(); the binding is passed through untouched.
        """
        opt = self._prepare_html_options(html_opt)
        return self._render("text", status, name, binding, opt, escaping=False)

    def data(self, status: int, payload: bytes) -> Response:
        """Write raw bytes, defaulting the Content-Type to octet-stream."""
        if not self.writer.headers.get(CONTENT_TYPE):
            self.writer.headers[CONTENT_TYPE] = CONTENT_BINARY
        self.writer.write_header(status)
        self.writer.write(payload)
        return self.response

    def error(self, status: int) -> Response:
        """Write only the given status code."""
        self.writer.write_header(status)
        return self.response

    def status(self, status: int) -> Response:
        """Alias of error()."""
        return self.error(status)

    def redirect(self, location: str, status: int = HTTPStatus.FOUND) -> Response:
        """Redirect to location, resolving relative paths against the request path."""
        url = self._resolve_location(location)
        headers = self.writer.headers
        headers["Location"] = url

        had_content_type = CONTENT_TYPE in headers
        if not had_content_type and self.request.method in ("GET", "HEAD"):
            headers[CONTENT_TYPE] = "text/html; charset=utf-8"
        self.writer.write_header(int(status))

        if not had_content_type and self.request.method == "GET":
            body = f'<a href="{escape(url)}">{_status_text(int(status))}</a>.\n'
            self.writer.write(body.encode("utf-8"))
        return self.response

    def _resolve_location(self, location: str) -> str:
        parts = urlsplit(location)
        if parts.scheme or parts.netloc:
            return location

        path, sep, query = location.partition("?")
        if not path.startswith("/"):
            current = self.request.url.path or "/"
            path = current[: current.rfind("/") + 1] + path

        trailing = path.endswith("/")
        path = posixpath.normpath(path)
        if path.startswith("//"):
            path = "/" + path.lstrip("/")
        if trailing and not path.endswith("/"):
            path += "/"
        return path + sep + query

    def _prepare_html_options(self, html_opt: HTMLOptions | None) -> HTMLOptions:
        if html_opt is not None:
            return html_opt
        return HTMLOptions(layout=self.options.layout, extra=self.options.extra)

    def _context(self, binding: Any, extra: Mapping[str, str]) -> dict[str, Any]:
        context: dict[str, Any] = {DATA_VAR: binding, EXTRA_VAR: dict(extra)}
        if isinstance(binding, Mapping):
            context.update((k, v) for k, v in binding.items() if isinstance(k, str) and k not in RESERVED_VARS)
        return context

    def _execute(self, template: Template, context: dict[str, Any]) -> bytes:
        with self.pool.borrow() as buf:
            for chunk in template.generate(context):
                buf.write(chunk.encode(self._encoding))
            return buf.getvalue()

    def _yield_func(self, name: str, binding: Any, extra: Mapping[str, str], escaping: bool) -> Callable[[], str]:
        def render_inner() -> str:
            template = self.templates.get(name, escaping)
            context = self._context(binding, extra)
            context.update(helpers(current=name))
            output = self._execute(template, context).decode(self._encoding)
            # Our own template output, already escaped where needed
            return Markup(output) if escaping else output

        return render_inner

    def _render(
        self,
        operation: str,
        status: int,
        name: str,
        binding: Any,
        opt: HTMLOptions,
        escaping: bool,
    ) -> Response:
        context = self._context(binding, opt.extra)
        if opt.layout:
            context.update(helpers(self._yield_func(name, binding, opt.extra, escaping), current=name))
            name = opt.layout

        try:
            body = self._execute(self.templates.get(name, escaping), context)
        except Exception as e:
            return self._fail(operation, e, template=name)

        self.writer.headers[CONTENT_TYPE] = self.options.html_content_type + self.charset
        self.writer.write_header(status)
        self.writer.write(body)
        return self.response

    def _fail(self, operation: str, error: Exception, **fields: Any) -> Response:
        log_with_context(
            logger,
            "warning",
            "Render failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            path=self.request.url.path,
            event_type="render_error",
            **fields,
        )
        http_error(self.writer, str(error), 500)
        return self.response
