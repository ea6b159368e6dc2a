"""hal_restful package exports."""

from .core import (
    ApiProblem,
    HalCollection,
    HalError,
    HalRenderer,
    HalResource,
    HydratorRegistry,
    Link,
    LinkCollection,
    ListPaginator,
    Metadata,
    MetadataMap,
    ProblemError,
    RendererConfig,
    RenderEvent,
    TemplateRouteResolver,
    get_embedded,
    get_link,
    get_link_href,
)
from .core.logging import setup_logging

__all__ = [
    # Rendering
    "HalRenderer",
    "RenderEvent",
    "RendererConfig",
    "TemplateRouteResolver",
    # Model
    "Link",
    "LinkCollection",
    "HalResource",
    "HalCollection",
    "ListPaginator",
    "Metadata",
    "MetadataMap",
    "HydratorRegistry",
    "ApiProblem",
    # Exceptions
    "HalError",
    "ProblemError",
    # HAL read helpers
    "get_link",
    "get_link_href",
    "get_embedded",
    # Logging
    "setup_logging",
]
