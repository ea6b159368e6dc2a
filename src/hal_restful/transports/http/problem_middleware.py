from __future__ import annotations

import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from hal_restful.core.negotiation import accepts_json
from hal_restful.core.observability import log_event
from hal_restful.core.problem import ApiProblem
from hal_restful.transports.http.config import HttpConfig
from hal_restful.transports.http.responses import problem_response

log = logging.getLogger(__name__)


class ApiProblemMiddleware(BaseHTTPMiddleware):
    """
    Render unhandled exceptions as Problem-API responses.
    - Only when the client accepts JSON (unless cfg.problems_json_only is off)
    - Status comes from ProblemError, or an exception's status_code/code in range
    - Everything else is re-raised for the server error handler
    """

    def __init__(self, app, cfg: HttpConfig):
        super().__init__(app)
        self.cfg = cfg

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except Exception as exc:
            if self.cfg.problems_json_only and not accepts_json(
                request.headers.get("accept")
            ):
                raise

            problem = ApiProblem.from_exception(exc)
            log_event(
                "api_problem",
                log,
                level=logging.ERROR if problem.status >= 500 else logging.WARNING,
                request_id=getattr(request.state, "request_id", None),
                method=request.method.upper(),
                path=request.url.path,
                status=problem.status,
                error_type=type(exc).__name__,
            )
            return problem_response(request, problem)


async def http_exception_handler(request: Request, exc: Exception):
    """Starlette exception handler turning HTTPException into a problem."""
    status = getattr(exc, "status_code", 500)
    detail = getattr(exc, "detail", None) or str(exc)
    headers = getattr(exc, "headers", None)
    log_event(
        "api_problem",
        log,
        level=logging.WARNING,
        request_id=getattr(request.state, "request_id", None),
        method=request.method.upper(),
        path=request.url.path,
        status=status,
        error_type=type(exc).__name__,
    )
    return problem_response(request, ApiProblem(status, detail), headers)


__all__ = ["ApiProblemMiddleware", "http_exception_handler"]
