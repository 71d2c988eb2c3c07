"""FastAPI middleware for request tracing, request limits and the error boundary."""

import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from api_template.exceptions import BadHttpRequestError
from api_template.failures import ClientRequestMalformed, classify
from api_template.logging import get_logger
from api_template.problem_details import map_failure, problem_response

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to every request for tracing.

    - Reads X-Request-ID from request headers, or generates a UUID if missing
    - Binds request_id to structlog context (auto-included in all logs)
    - Adds X-Request-ID to response headers

    Usage:
        app.add_middleware(RequestIDMiddleware)

        # In any endpoint or dependency:
        logger.info("something_happened")  # request_id automatically included
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        # Use existing request ID or generate new one
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        # Bind to structlog context so all logs in this request will include it
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)

        # Add to response headers for client tracing
        response.headers[REQUEST_ID_HEADER] = request_id

        return response


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Terminal error boundary.

    Any exception escaping the rest of the stack is classified and answered
    with an application/problem+json body. With ``diagnostic`` set, unexpected
    errors carry the exception text and traceback in ``detail``.

    Usage:
        app.add_middleware(ExceptionHandlerMiddleware, diagnostic=settings.is_development)
    """

    def __init__(self, app: ASGIApp, diagnostic: bool = False) -> None:
        super().__init__(app)
        self.diagnostic = diagnostic

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            failure = classify(exc)
            if isinstance(failure, ClientRequestMalformed):
                logger.warning(
                    "invalid_request",
                    status=failure.status,
                    error=failure.message,
                    path=request.scope["path"],
                )
            else:
                logger.exception(
                    "unhandled_exception", path=request.scope["path"], method=request.method
                )
            problem = map_failure(failure, request.scope["path"], diagnostic=self.diagnostic)
            return problem_response(problem)


class RequestLimitsMiddleware(BaseHTTPMiddleware):
    """Reject requests whose framing exceeds the configured limits.

    Runs before routing and raises BadHttpRequestError, which the
    exception handler turns into an "Invalid request." problem:

    - request line longer than ``max_request_line_size`` -> 414
    - more than ``max_request_header_count`` headers -> 431
    - header names + values longer than ``max_request_headers_total_size`` -> 431
    """

    def __init__(
        self,
        app: ASGIApp,
        max_request_line_size: int = 8192,
        max_request_header_count: int = 100,
        max_request_headers_total_size: int = 32768,
    ) -> None:
        super().__init__(app)
        self.max_request_line_size = max_request_line_size
        self.max_request_header_count = max_request_header_count
        self.max_request_headers_total_size = max_request_headers_total_size

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if _request_line_size(request) > self.max_request_line_size:
            raise BadHttpRequestError("Request line too long.", status_code=414)

        raw_headers = request.scope["headers"]
        if len(raw_headers) > self.max_request_header_count:
            raise BadHttpRequestError("Request contains too many headers.", status_code=431)
        if sum(len(name) + len(value) for name, value in raw_headers) > (
            self.max_request_headers_total_size
        ):
            raise BadHttpRequestError("Request headers too long.", status_code=431)

        return await call_next(request)


def _request_line_size(request: Request) -> int:
    """Size of "METHOD SP target SP HTTP/x.y" as received, percent-encoding included."""
    scope = request.scope
    # Some servers leave the query string on raw_path; count it once.
    target = (scope.get("raw_path") or scope["path"].encode()).split(b"?", 1)[0]
    if scope.get("query_string"):
        target += b"?" + scope["query_string"]
    http_version = f"HTTP/{scope.get('http_version', '1.1')}"
    return len(scope["method"]) + len(target) + len(http_version) + 2
