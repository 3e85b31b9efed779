"""Tests for custom exception classes."""

from renderkit.exceptions import (
    ErrorCode,
    NoLayoutError,
    RenderException,
    SerializationError,
    TemplateCompileError,
    TemplateRenderError,
)


class TestErrorCodes:
    """Tests for ErrorCode enum."""

    def test_error_code_values(self):
        """Test that error codes have correct values."""
        assert ErrorCode.RENDER_ERROR == "RENDER_ERROR"
        assert ErrorCode.TEMPLATE_COMPILE_ERROR == "TEMPLATE_COMPILE_ERROR"
        assert ErrorCode.NO_LAYOUT == "NO_LAYOUT"
        assert ErrorCode.SERIALIZATION_ERROR == "SERIALIZATION_ERROR"


class TestRenderException:
    """Tests for RenderException."""

    def test_render_exception_basic(self):
        """Test creating basic render exception."""
        exc = RenderException(message="Test error")

        assert exc.message == "Test error"
        assert exc.code == ErrorCode.RENDER_ERROR
        assert exc.status_code == 500
        assert exc.details == {}
        assert str(exc) == "Test error"

    def test_render_exception_with_details(self):
        """Test render exception with details."""
        exc = RenderException(
            message="Test error", code=ErrorCode.INTERNAL_ERROR, status_code=503, details={"template": "index"}
        )

        assert exc.code == ErrorCode.INTERNAL_ERROR
        assert exc.status_code == 503
        assert exc.details["template"] == "index"


class TestSubclasses:
    """Tests for the specialised render exceptions."""

    def test_template_compile_error(self):
        exc = TemplateCompileError("bad template", details={"template": "bad"})

        assert isinstance(exc, RenderException)
        assert exc.code == ErrorCode.TEMPLATE_COMPILE_ERROR
        assert exc.status_code == 500
        assert exc.details == {"template": "bad"}

    def test_template_render_error(self):
        exc = TemplateRenderError("boom")

        assert exc.code == ErrorCode.TEMPLATE_RENDER_ERROR
        assert exc.status_code == 500

    def test_no_layout_error_message(self):
        exc = NoLayoutError()

        assert isinstance(exc, TemplateRenderError)
        assert exc.code == ErrorCode.NO_LAYOUT
        assert str(exc) == "yield called with no layout defined"

    def test_serialization_error(self):
        exc = SerializationError("json: unsupported value")

        assert exc.code == ErrorCode.SERIALIZATION_ERROR
        assert exc.message == "json: unsupported value"
