from .app import configure_app
from .config import HttpConfig
from .context import HalState, paginate_from_request, renderer_for
from .problem_middleware import ApiProblemMiddleware, http_exception_handler
from .request_id_middleware import RequestIdMiddleware
from .responses import HalResponse, ProblemResponse, problem_response, render_response
from .routing import StarletteRouteResolver

__all__ = [
    "configure_app",
    "HttpConfig",
    "HalState",
    "renderer_for",
    "paginate_from_request",
    "ApiProblemMiddleware",
    "http_exception_handler",
    "RequestIdMiddleware",
    "HalResponse",
    "ProblemResponse",
    "problem_response",
    "render_response",
    "StarletteRouteResolver",
]
