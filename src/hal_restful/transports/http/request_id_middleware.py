from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from hal_restful.core.observability import log_event

REQUEST_ID_HEADER = "X-Request-Id"
CORRELATION_ID_HEADER = "X-Correlation-Id"

log = logging.getLogger(__name__)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a request_id so problem logs can be correlated.
    - Accepts X-Request-Id or X-Correlation-Id, else generates a UUID4 hex
    - Stores it on request.state.request_id and echoes X-Request-Id
    """

    async def dispatch(self, request: Request, call_next):
        rid = (
            request.headers.get(REQUEST_ID_HEADER)
            or request.headers.get(CORRELATION_ID_HEADER)
            or ""
        ).strip()
        if not rid:
            rid = uuid.uuid4().hex

        request.state.request_id = rid

        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            if response is not None:
                response.headers.setdefault(REQUEST_ID_HEADER, rid)

            # Logged even when the request failed with an exception
            log_event(
                "http_request",
                log,
                level=logging.DEBUG,
                request_id=rid,
                method=request.method.upper(),
                path=request.url.path,
                status=response.status_code if response is not None else "exception",
                duration_ms=duration_ms,
            )


__all__ = ["RequestIdMiddleware", "REQUEST_ID_HEADER", "CORRELATION_ID_HEADER"]
