from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from starlette.applications import Starlette
from starlette.exceptions import HTTPException

from hal_restful.core.config import RendererConfig, load_metadata_map
from hal_restful.core.hydrators import Hydrator, HydratorRegistry
from hal_restful.core.metadata import MetadataMap
from hal_restful.core.renderer import Interceptor
from hal_restful.transports.http.config import HttpConfig
from hal_restful.transports.http.context import STATE_ATTR, HalState
from hal_restful.transports.http.problem_middleware import (
    ApiProblemMiddleware,
    http_exception_handler,
)
from hal_restful.transports.http.request_id_middleware import RequestIdMiddleware

log = logging.getLogger(__name__)


def configure_app(
    app: Starlette,
    metadata_map: Optional[Union[MetadataMap, Mapping[str, Any]]] = None,
    *,
    cfg: HttpConfig | None = None,
    renderer_config: RendererConfig | None = None,
    interceptors: Sequence[Interceptor] = (),
    hydrators: Optional[Mapping[type, Union[str, Hydrator]]] = None,
    default_hydrator: Optional[Union[str, Hydrator]] = None,
    hydrator_registry: HydratorRegistry | None = None,
) -> Starlette:
    """
    Attach HAL rendering state to `app` and install problem handling.
    metadata_map may be a MetadataMap or the raw configuration mapping.
    """
    cfg = cfg or HttpConfig.from_env()
    renderer_config = renderer_config or RendererConfig.from_env(use_dotenv=False)
    registry = hydrator_registry or HydratorRegistry()

    if metadata_map is None:
        metadata_map = MetadataMap(
            match_ancestors=renderer_config.match_ancestors, hydrators=registry
        )
    elif not isinstance(metadata_map, MetadataMap):
        metadata_map = load_metadata_map(
            metadata_map, hydrators=registry, renderer_config=renderer_config
        )

    setattr(
        app.state,
        STATE_ATTR,
        HalState(
            metadata_map=metadata_map,
            http_config=cfg,
            renderer_config=renderer_config,
            interceptors=tuple(interceptors),
            hydrators=hydrators,
            default_hydrator=default_hydrator,
            hydrator_registry=registry,
        ),
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    # Starlette inserts at the front; exec order: RequestId -> ApiProblem -> app
    app.add_middleware(ApiProblemMiddleware, cfg=cfg)
    app.add_middleware(RequestIdMiddleware)

    log.info(
        "Configured HAL support (problem_media_type=%s, metadata_entries=%s)",
        cfg.problem_media_type,
        len(metadata_map),
    )
    return app


__all__ = ["configure_app"]
