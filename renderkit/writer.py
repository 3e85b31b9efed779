"""Buffered response stream the renderer writes into."""

from fastapi.responses import Response
from starlette.datastructures import MutableHeaders

from renderkit.config import CONTENT_PLAIN, CONTENT_TYPE
from renderkit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


class ResponseWriter:
    """Collects headers, a status code and body bytes for one response.

    The first status written wins; later attempts are logged and ignored.
    Writing body bytes before any status implies 200.
    """

    def __init__(self):
        self.headers = MutableHeaders()
        self.status_code: int | None = None
        self._body = bytearray()

    def write_header(self, status_code: int) -> None:
        if self.status_code is not None:
            log_with_context(
                logger,
                "warning",
                "Superfluous write_header call",
                status_code=self.status_code,
                ignored_status_code=status_code,
                event_type="superfluous_write_header",
            )
            return
        self.status_code = status_code

    def write(self, data: bytes) -> int:
        if self.status_code is None:
            self.write_header(200)
        self._body.extend(data)
        return len(data)

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def to_response(self) -> Response:
        """Build a Starlette response; Content-Length is derived from the body."""
        return Response(
            content=bytes(self._body),
            status_code=self.status_code or 200,
            headers=self.headers,
        )


def http_error(writer: ResponseWriter, message: str, status_code: int) -> None:
    """Reply with a plain-text error message and status code."""
    writer.headers[CONTENT_TYPE] = f"{CONTENT_PLAIN}; charset=utf-8"
    writer.headers["X-Content-Type-Options"] = "nosniff"
    writer.write_header(status_code)
    writer.write(message.encode("utf-8"))
