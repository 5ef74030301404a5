"""Request logging middleware."""
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from songvault.core.logging import clear_log_context, get_logger, log_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by orchestrators; only logged at debug level
QUIET_PATHS = frozenset({"/health", "/live", "/ready"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one line when it finishes.

    The id is taken from the caller's ``X-Request-ID`` header when present,
    stored on ``request.state.request_id`` and echoed on the response, so
    coordinator and store logs for a song upload or delete can be grouped.
    Server errors are logged at warning level.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        path = request.url.path
        log_context(request_id=request_id, method=request.method, path=path)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("Request failed", error=str(e), duration_ms=_elapsed_ms(started))
            raise
        finally:
            clear_log_context()

        duration_ms = _elapsed_ms(started)
        if response.status_code >= 500:
            log = logger.warning
        elif path in QUIET_PATHS:
            log = logger.debug
        else:
            log = logger.info
        log(
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
