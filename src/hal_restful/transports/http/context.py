from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

from starlette.requests import Request

from hal_restful.core.config import RendererConfig
from hal_restful.core.errors import InvalidPageError
from hal_restful.core.hydrators import Hydrator, HydratorRegistry
from hal_restful.core.metadata import MetadataMap
from hal_restful.core.problem import ApiProblem
from hal_restful.core.renderer import INVALID_PAGE_DETAIL, HalRenderer, Interceptor
from hal_restful.core.resources import HalCollection
from hal_restful.transports.http.config import HttpConfig
from hal_restful.transports.http.routing import StarletteRouteResolver

STATE_ATTR = "hal"
RENDERER_ATTR = "hal_renderer"


@dataclass
class HalState:
    """Per-application settings shared by every request."""

    metadata_map: MetadataMap
    http_config: HttpConfig = field(default_factory=HttpConfig)
    renderer_config: RendererConfig = field(default_factory=RendererConfig)
    interceptors: Sequence[Interceptor] = ()
    hydrators: Optional[Mapping[type, Union[str, Hydrator]]] = None
    default_hydrator: Optional[Union[str, Hydrator]] = None
    hydrator_registry: Optional[HydratorRegistry] = None


def get_state(request: Request) -> HalState:
    state = getattr(request.app.state, STATE_ATTR, None)
    if state is None:
        raise RuntimeError("HAL support is not configured; call configure_app(app)")
    return state


def http_config_for(request: Request) -> HttpConfig:
    state = getattr(request.app.state, STATE_ATTR, None)
    return state.http_config if state is not None else HttpConfig()


def renderer_for(request: Request) -> HalRenderer:
    """HalRenderer bound to this request's router, base URL and path params."""
    cached = getattr(request.state, RENDERER_ATTR, None)
    if cached is not None:
        return cached

    state = get_state(request)
    resolver = StarletteRouteResolver(request, base_url=state.http_config.base_url)
    renderer = HalRenderer(
        resolver,
        state.metadata_map,
        hydrators=state.hydrators,
        default_hydrator=state.default_hydrator,
        interceptors=state.interceptors,
        config=state.renderer_config,
        hydrator_registry=state.hydrator_registry,
    )
    setattr(request.state, RENDERER_ATTR, renderer)
    return renderer


def paginate_from_request(
    request: Request, collection: HalCollection
) -> Union[HalCollection, ApiProblem]:
    """Apply the page query parameter to `collection`."""
    page_param = get_state(request).renderer_config.page_param
    raw = request.query_params.get(page_param)
    if raw is None or not raw.strip():
        return collection
    try:
        page = int(raw)
    except ValueError:
        return ApiProblem(400, f"Query parameter {page_param!r} must be an integer")
    try:
        return collection.with_page(page)
    except InvalidPageError:
        return ApiProblem(409, INVALID_PAGE_DETAIL)


__all__ = [
    "HalState",
    "get_state",
    "http_config_for",
    "renderer_for",
    "paginate_from_request",
]
