"""Custom exceptions for renderkit with HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes carried by render exceptions."""

    # Generic errors
    RENDER_ERROR = "RENDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Template errors
    TEMPLATE_COMPILE_ERROR = "TEMPLATE_COMPILE_ERROR"
    TEMPLATE_RENDER_ERROR = "TEMPLATE_RENDER_ERROR"
    NO_LAYOUT = "NO_LAYOUT"

    # Serialization errors
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"


class RenderException(Exception):
    """Base exception for rendering errors with HTTP status code support.

    All custom exceptions inherit from this class so a single handler can
    turn any of them into a response.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RENDER_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize render exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class TemplateCompileError(RenderException):
    """A template directory could not be compiled.

    Raised at setup time for unreadable files and syntax errors. Callers
    treat it as fatal: a server must not start with broken templates.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.TEMPLATE_COMPILE_ERROR,
            status_code=500,
            details=details,
        )


class TemplateRenderError(RenderException):
    """A template failed while executing."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TEMPLATE_RENDER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=500, details=details)


class NoLayoutError(TemplateRenderError):
    """`yield` was called while no layout was in effect."""

    def __init__(self, message: str = "yield called with no layout defined"):
        super().__init__(message, code=ErrorCode.NO_LAYOUT)


class SerializationError(RenderException):
    """A value could not be serialized to JSON or XML."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.SERIALIZATION_ERROR,
            status_code=500,
            details=details,
        )
