"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi import Request

from renderkit.config import Options, Settings
from renderkit.factory import RendererFactory
from renderkit.renderer import Renderer


def _write_templates(directory: Path, templates: dict[str, str], ext: str = ".tmpl") -> Path:
    """Write {name: body} pairs as template files under directory."""
    for name, body in templates.items():
        path = directory / f"{name}{ext}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
    return directory


def make_request(method: str = "GET", path: str = "/a/b") -> Request:
    """Minimal Starlette request for redirect resolution."""
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [(b"host", b"testserver")],
            "scheme": "http",
            "server": ("testserver", 80),
        }
    )


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Template directory with content, layout and nested templates."""
    return _write_templates(
        tmp_path / "templates",
        {
            "content": "hi",
            "layout": "L[{{ yield }}]",
            "named_layout": "{{ current }}:{{ yield }}",
            "field": "{{ Field }}",
            "attr": "{{ data.Field }}",
            "admin/index": "admin {{ title }}",
            "no_layout": "{{ yield }}",
            "extra": "{{ site }}|{{ extra.site }}",
        },
    )


@pytest.fixture
def production_settings() -> Settings:
    return Settings(env="production")


@pytest.fixture
def development_settings() -> Settings:
    return Settings(env="development")


@pytest.fixture
def make_renderer(template_dir: Path, production_settings: Settings) -> Callable[..., Renderer]:
    """Build a Renderer for a fake request; options default to template_dir."""

    def _make(
        options: Options | None = None,
        settings: Settings | None = None,
        method: str = "GET",
        path: str = "/a/b",
    ) -> Renderer:
        factory = RendererFactory(
            options or Options(directory=str(template_dir)),
            settings or production_settings,
        )
        return factory.for_request(make_request(method, path))

    return _make


@pytest.fixture
def write_templates() -> Callable[..., Path]:
    """Helper writing {name: body} template files into a directory."""
    return _write_templates


@pytest.fixture
def request_factory() -> Callable[..., Request]:
    """Helper building minimal requests (method, path)."""
    return make_request
