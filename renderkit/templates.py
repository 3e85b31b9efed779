"""Template compilation.

Every file under the template directory whose extension matches is parsed
into two Jinja2 environments built over the same sources: an auto-escaping
one for markup and a plain one for text. Templates are named by their path
relative to the directory, extension stripped, with forward slashes.
"""

import os
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

from jinja2 import DictLoader, Environment, Template, TemplateError, TemplateNotFound, TemplateSyntaxError
from markupsafe import escape

from renderkit.config import Options
from renderkit.exceptions import NoLayoutError, TemplateCompileError, TemplateRenderError
from renderkit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

# Body of the template registered under the directory name
PLACEHOLDER_BODY = "renderkit"

YIELD = "yield"
CURRENT = "current"


class Helper:
    """Template helper that works both as `{{ name }}` and `{{ name() }}`."""

    def __init__(self, func: Callable[[], str]):
        self._func = func

    def __call__(self) -> str:
        return self._func()

    def __str__(self) -> str:
        return str(self._func())

    def __html__(self) -> str:
        # Markup results pass through; plain strings are escaped
        return str(escape(self._func()))

    def __repr__(self) -> str:
        return f"Helper({self._func!r})"


def _no_layout() -> str:
    raise NoLayoutError()


def helpers(yield_func: Callable[[], str] = _no_layout, current: str = "") -> dict[str, Helper]:
    """Build the reserved `yield` and `current` bindings for one render.

    Called with no arguments it returns the placeholders installed at compile
    time: `yield` raises NoLayoutError and `current` is empty.
    """
    return {YIELD: Helper(yield_func), CURRENT: Helper(lambda: current)}


def get_ext(filename: str) -> str:
    """Return the compound extension of a file name.

    Everything from the first dot onwards, so "page.html.tmpl" yields
    ".html.tmpl". Names without a dot have no extension.
    """
    if "." not in filename:
        return ""
    return "." + filename.split(".", 1)[1]


class TemplateSet:
    """The escaping and plain template trees compiled from one directory.

    Read-only once built. Per-render helper bindings are passed in the render
    context and never stored on the environments, so one set can serve many
    concurrent requests.
    """

    def __init__(self, directory: str, html: Environment, text: Environment, names: Iterable[str]):
        self.directory = directory
        self.html = html
        self.text = text
        self.names = frozenset(names)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)

    def environment(self, escaping: bool) -> Environment:
        return self.html if escaping else self.text

    def get(self, name: str, escaping: bool = True) -> Template:
        """Look up a compiled template.

        Raises:
            TemplateRenderError: If no template is registered under name
        """
        try:
            return self.environment(escaping).get_template(name)
        except TemplateNotFound as e:
            raise TemplateRenderError(f'template "{name}" is undefined', details={"template": name}) from e


def _walk(root: Path) -> Iterator[Path]:
    """Yield every file under root in a stable order.

    A missing root, or one that is not a directory, yields nothing; any
    other walk error is fatal.
    """

    def onerror(err: OSError) -> None:
        if isinstance(err, (FileNotFoundError, NotADirectoryError)) and Path(err.filename or "") == root:
            return
        raise TemplateCompileError(f"failed to walk template directory: {err}", details={"path": err.filename}) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def _collect_sources(options: Options) -> dict[str, str]:
    root = Path(options.directory)
    sources = {options.directory: PLACEHOLDER_BODY}

    for path in _walk(root):
        ext = get_ext(path.name)
        if ext not in options.extensions:
            continue

        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateCompileError(f"failed to read template {path}: {e}", details={"path": str(path)}) from e

        rel = path.relative_to(root).as_posix()
        sources[rel[: -len(ext)]] = source

    return sources


def _build_environment(
    options: Options,
    sources: dict[str, str],
    autoescape: bool,
    func_maps: list[dict[str, Callable[..., Any]]],
) -> Environment:
    env = Environment(
        loader=DictLoader(sources),
        autoescape=autoescape,
        variable_start_string=options.delims.left,
        variable_end_string=options.delims.right,
        keep_trailing_newline=True,
        cache_size=-1,
        auto_reload=False,
    )
    for funcs in func_maps:
        env.globals.update(funcs)
    env.globals.update(helpers())

    # Parse everything now; a broken template must never reach a request
    for name in sources:
        try:
            env.get_template(name)
        except TemplateSyntaxError as e:
            raise TemplateCompileError(
                f"failed to parse template {name}: {e.message} (line {e.lineno})",
                details={"template": name, "lineno": e.lineno},
            ) from e
        except TemplateError as e:
            raise TemplateCompileError(
                f"failed to parse template {name}: {e}", details={"template": name}
            ) from e

    return env


def compile_templates(options: Options) -> TemplateSet:
    """Compile the template directory described by options.

    Args:
        options: Fully prepared options (see prepare_options)

    Returns:
        TemplateSet holding the escaping and plain environments

    Raises:
        TemplateCompileError: If a file cannot be read or parsed, or the
            directory walk fails. A missing directory, or a path that
            is not a directory, is not an error.
    """
    sources = _collect_sources(options)

    html = _build_environment(options, sources, True, options.html_funcs)
    text = _build_environment(options, sources, False, options.text_funcs)

    log_with_context(
        logger,
        "debug",
        "Compiled templates",
        directory=options.directory,
        template_count=len(sources) - 1,
        event_type="templates_compiled",
    )
    return TemplateSet(options.directory, html, text, sources)
