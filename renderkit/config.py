"""Renderer options, defaults, and environment settings."""

from collections.abc import Callable
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"
CONTENT_BINARY = "application/octet-stream"
CONTENT_JSON = "application/json"
CONTENT_HTML = "text/html"
CONTENT_XHTML = "application/xhtml+xml"
CONTENT_XML = "text/xml"
CONTENT_PLAIN = "text/plain"

DEFAULT_CHARSET = "UTF-8"
DEFAULT_DIRECTORY = "templates"
DEFAULT_EXTENSIONS = (".tmpl",)

FuncMap = dict[str, Callable[..., Any]]


class Delims(BaseModel):
    """Left and right variable delimiters used when parsing templates."""

    model_config = ConfigDict(frozen=True)

    left: str = Field(default="{{", min_length=1)
    right: str = Field(default="}}", min_length=1)


class Options(BaseModel):
    """Configuration for the renderer.

    Immutable after construction. In production mode one instance is shared
    by reference across all requests.
    """

    model_config = ConfigDict(frozen=True)

    # Directory to load templates from. Defaults to "templates".
    directory: str = ""
    # Layout template name. No layout is rendered when empty.
    layout: str = ""
    # Extensions to parse template files from. Defaults to [".tmpl"].
    extensions: list[str] = Field(default_factory=list)
    # Helper function maps installed on the escaping and plain template sets
    html_funcs: list[FuncMap] = Field(default_factory=list)
    text_funcs: list[FuncMap] = Field(default_factory=list)
    delims: Delims = Field(default_factory=Delims)
    # Appended to Content-Type headers. Defaults to "UTF-8".
    charset: str = ""
    indent_json: bool = False
    indent_xml: bool = False
    prefix_json: bytes = b""
    prefix_xml: bytes = b""
    # Set to "application/xhtml+xml" to serve XHTML. Defaults to "text/html".
    html_content_type: str = ""
    extra: dict[str, str] = Field(default_factory=dict)


class HTMLOptions(BaseModel):
    """Per-call overrides for HTML and TEXT rendering."""

    model_config = ConfigDict(frozen=True)

    layout: str = ""
    extra: dict[str, str] = Field(default_factory=dict)


def prepare_options(options: Options | None = None) -> Options:
    """Fill in defaults for any option left empty."""
    opt = options or Options()

    updates: dict[str, Any] = {}
    if not opt.directory:
        updates["directory"] = DEFAULT_DIRECTORY
    if not opt.extensions:
        updates["extensions"] = list(DEFAULT_EXTENSIONS)
    if not opt.html_content_type:
        updates["html_content_type"] = CONTENT_HTML

    return opt.model_copy(update=updates) if updates else opt


def prepare_charset(charset: str) -> str:
    """Build the suffix appended to every Content-Type header."""
    return "; charset=" + (charset or DEFAULT_CHARSET)


class Settings(BaseSettings):
    """Environment-driven settings.

    `env` is the development/production switch: development recompiles
    templates on every request, production renders from the snapshot
    compiled at startup.
    """

    env: Literal["development", "production"] = Field(
        default="development", description="RENDER_ENV: development or production"
    )
    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: Path | None = Field(default=None, description="Directory for the rotating JSON log file")

    model_config = SettingsConfigDict(
        env_prefix="RENDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("env", mode="before")
    @classmethod
    def normalize_env(cls, v: Any) -> Any:
        """Accept any casing plus the dev/prod short forms."""
        if isinstance(v, str):
            v = v.strip().lower()
            return {"": "development", "dev": "development", "prod": "production"}.get(v, v)
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v

    @property
    def is_development(self) -> bool:
        return self.env == "development"


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Avoids re-reading the environment and .env file on every request.

    Example:
        @app.get("/")
        async def route(settings: Settings = Depends(get_settings)):
            return {"env": settings.env}
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
