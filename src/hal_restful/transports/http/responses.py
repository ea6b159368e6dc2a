from __future__ import annotations

from typing import Any, Mapping, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from hal_restful.core.negotiation import (
    HAL_JSON,
    PROBLEM_JSON,
    is_problem_payload,
    normalize_status,
    select_content_type,
)
from hal_restful.core.problem import ApiProblem
from hal_restful.core.renderer import HalRenderer, render
from hal_restful.core.resources import HalCollection, HalResource
from hal_restful.transports.http.context import (
    STATE_ATTR,
    http_config_for,
    renderer_for,
)


class HalResponse(JSONResponse):
    media_type = HAL_JSON


class ProblemResponse(JSONResponse):
    """JSON response for an ApiProblem; the status always lands in 100-599."""

    media_type = PROBLEM_JSON

    def __init__(
        self,
        problem: ApiProblem,
        *,
        media_type: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.problem = problem
        super().__init__(
            problem.to_dict(),
            status_code=normalize_status(problem.status),
            headers=headers,
            media_type=media_type,
        )


def problem_response(
    request: Request,
    problem: ApiProblem,
    headers: Optional[Mapping[str, str]] = None,
) -> ProblemResponse:
    """ProblemResponse using the app's media type and stack trace settings."""
    cfg = http_config_for(request)
    state = getattr(request.app.state, STATE_ATTR, None)
    if state is not None and state.renderer_config.include_stack_trace:
        problem = problem.with_stack_trace(True)
    return ProblemResponse(
        problem, media_type=cfg.problem_media_type, headers=headers
    )


def render_response(
    request: Request,
    value: Any,
    *,
    renderer: Optional[HalRenderer] = None,
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
) -> Response:
    """
    Render `value` into a Starlette response.
    - ApiProblem values (returned directly or by collection rendering) become
      problem responses with the problem's status
    - HAL wrappers are rendered with the request-bound renderer
    - Plain payloads pass through; the content type follows their shape
    """
    if isinstance(value, (HalResource, HalCollection)):
        value = render(renderer or renderer_for(request), value)

    if isinstance(value, ApiProblem):
        return problem_response(request, value, headers)

    cfg = http_config_for(request)
    media_type = select_content_type(value, cfg.problem_media_type)
    if media_type == HAL_JSON:
        return HalResponse(value, status_code=status_code, headers=headers)
    if is_problem_payload(value):
        status_code = value.get("httpStatus")
    return JSONResponse(
        value,
        status_code=normalize_status(status_code),
        headers=headers,
        media_type=media_type,
    )


__all__ = ["HalResponse", "ProblemResponse", "problem_response", "render_response"]
