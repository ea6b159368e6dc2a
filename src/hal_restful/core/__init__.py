"""Core HAL surface for hal_restful (transport-agnostic)."""

from .config import RendererConfig, load_metadata_map
from .errors import (
    CreationError,
    ExtractionError,
    MissingIdentifierError,
    HalError,
    HydratorNotFoundError,
    IncompleteLinkError,
    InvalidCollectionError,
    InvalidLinkError,
    InvalidPageError,
    InvalidResourceError,
    LinkConflictError,
    MetadataError,
    ProblemError,
    UpdateError,
)
from .hal import (
    get_embedded,
    get_link,
    get_link_href,
    link_relations,
    parse_page_from_href,
)
from .hydrators import (
    DataclassHydrator,
    Hydrator,
    HydratorRegistry,
    MappingHydrator,
    ObjectPropertyHydrator,
    PydanticHydrator,
    SelfDescribing,
    extract_public_fields,
)
from .links import Link, LinkCollection
from .metadata import LinkSpec, Metadata, MetadataMap
from .negotiation import (
    API_PROBLEM_JSON,
    HAL_JSON,
    JSON,
    PROBLEM_JSON,
    accepts_json,
    normalize_status,
    select_content_type,
)
from .pagination import ListPaginator, PaginatedSource
from .problem import DEFAULT_DESCRIBED_BY, RESERVED_KEYS, ApiProblem
from .renderer import HalRenderer, Interceptor, RenderEvent, render
from .resources import HalCollection, HalResource
from .routing import RouteResolver, TemplateRouteResolver

__all__ = [
    # Renderer
    "HalRenderer",
    "RenderEvent",
    "Interceptor",
    "render",
    # Model
    "Link",
    "LinkCollection",
    "HalResource",
    "HalCollection",
    "ListPaginator",
    "PaginatedSource",
    "Metadata",
    "MetadataMap",
    "LinkSpec",
    "ApiProblem",
    "DEFAULT_DESCRIBED_BY",
    "RESERVED_KEYS",
    # Hydrators
    "Hydrator",
    "SelfDescribing",
    "HydratorRegistry",
    "MappingHydrator",
    "ObjectPropertyHydrator",
    "DataclassHydrator",
    "PydanticHydrator",
    "extract_public_fields",
    # Routing
    "RouteResolver",
    "TemplateRouteResolver",
    # Negotiation
    "HAL_JSON",
    "PROBLEM_JSON",
    "API_PROBLEM_JSON",
    "JSON",
    "accepts_json",
    "normalize_status",
    "select_content_type",
    # HAL read helpers
    "get_link",
    "get_link_href",
    "link_relations",
    "get_embedded",
    "parse_page_from_href",
    # Config
    "RendererConfig",
    "load_metadata_map",
    # Exceptions
    "HalError",
    "LinkConflictError",
    "IncompleteLinkError",
    "InvalidLinkError",
    "MetadataError",
    "HydratorNotFoundError",
    "ExtractionError",
    "MissingIdentifierError",
    "InvalidResourceError",
    "InvalidCollectionError",
    "InvalidPageError",
    "ProblemError",
    "CreationError",
    "UpdateError",
]
