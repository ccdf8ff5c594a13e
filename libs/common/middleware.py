"""Request tracing middleware.

Every request gets an id (taken from X-Request-ID when the caller supplies
one) that is bound to the logging context for the duration of the request and
echoed back on the response. One log line is written per finished request.
"""

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNLOGGED_PATHS = frozenset({"/health"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _log_completion(request: Request, response: Response, started: float) -> None:
    fields = {
        "status_code": response.status_code,
        "duration_ms": _elapsed_ms(started),
    }
    user = getattr(request.state, "user", None)
    if user is not None:
        fields["user_id"] = user.user_id
    # Client and server errors alike are surfaced as warnings.
    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(level, "Request completed", extra={"extra_fields": fields})


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            if request.url.path not in UNLOGGED_PATHS:
                _log_completion(request, response, started)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        # Unhandled errors propagate to the exception handlers, which log them.
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    app.add_middleware(RequestContextMiddleware)
