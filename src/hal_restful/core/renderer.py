"""
HAL assembly: turn HalResource/HalCollection wrappers into payloads with
`_links` and `_embedded` members.

- Links are resolved through an injected RouteResolver
- Field extraction is driven by Metadata, a per-type hydrator map, a default
  hydrator, and finally a generic public-field fallback
- Pagination problems are returned as ApiProblem values, not raised
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .config import RendererConfig
from .errors import (
    ExtractionError,
    IncompleteLinkError,
    InvalidLinkError,
    MissingIdentifierError,
)
from .hydrators import (
    Hydrator,
    HydratorRegistry,
    SelfDescribing,
    extract_public_fields,
)
from .links import Link, LinkCollection
from .metadata import Metadata, MetadataMap
from .observability import log_event
from .problem import ApiProblem
from .resources import HalCollection, HalResource
from .routing import RouteResolver

HalTarget = Union[HalResource, HalCollection]

INVALID_PAGE_DETAIL = "Invalid page provided"
MISSING_IDENTIFIER_DETAIL = (
    "No resource identifier present following resource creation."
)


@dataclass
class RenderEvent:
    """
    Handed to each interceptor before `_links` is serialized. Interceptors may
    mutate `payload` and `embedded` or add Link objects to `links`.
    """

    target: HalTarget
    payload: Dict[str, Any]
    links: LinkCollection
    embedded: Dict[str, Any] = field(default_factory=dict)


Interceptor = Callable[[RenderEvent], None]


class HalRenderer:
    def __init__(
        self,
        route_resolver: RouteResolver,
        metadata_map: Optional[MetadataMap] = None,
        *,
        hydrators: Optional[Mapping[type, Union[str, Hydrator]]] = None,
        default_hydrator: Optional[Union[str, Hydrator]] = None,
        interceptors: Sequence[Interceptor] = (),
        config: Optional[RendererConfig] = None,
        hydrator_registry: Optional[HydratorRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.route_resolver = route_resolver
        self.config = config or RendererConfig()
        self.metadata_map = (
            metadata_map
            if metadata_map is not None
            else MetadataMap(match_ancestors=self.config.match_ancestors)
        )
        self.registry = hydrator_registry or HydratorRegistry()
        self.hydrators: Dict[type, Hydrator] = {
            entity_type: self.registry.resolve(h)
            for entity_type, h in (hydrators or {}).items()
        }
        self.default_hydrator = (
            self.registry.resolve(default_hydrator)
            if default_hydrator is not None
            else None
        )
        self.interceptors: Tuple[Interceptor, ...] = tuple(interceptors)
        self.log = logger or logging.getLogger("hal_restful.core.renderer")

    # --- Links ------------------------------------------------------------- #

    def create_link(
        self,
        route: str,
        id: Any = None,
        entity: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Absolute URL for `route`. A non-None id becomes the `id` param;
        id=False stops ambient matched-route params from being reused.
        """
        route_params = dict(params or {})
        reuse_matched_params = True
        if id is False:
            reuse_matched_params = False
        elif id is not None:
            route_params["id"] = id

        path = self.route_resolver.resolve(
            route, route_params, dict(options or {}), reuse_matched_params
        )
        log_event(
            "hal.link",
            self.log,
            level=logging.DEBUG,
            route=route,
            entity_type=type(entity).__name__ if entity is not None else None,
        )
        return self._absolute(path)

    def from_link(self, link: Link) -> Dict[str, str]:
        if not link.is_complete():
            raise IncompleteLinkError(
                f"Link {link.relation!r} is incomplete; must contain a URL or a route"
            )
        if link.has_url():
            return {"href": link.url}

        path = self.route_resolver.resolve(
            link.route, link.route_params, link.route_options, True
        )
        return {"href": self._absolute(path)}

    def from_link_collection(
        self, links: LinkCollection
    ) -> Dict[str, Union[Dict[str, str], List[Dict[str, str]]]]:
        rendered: Dict[str, Union[Dict[str, str], List[Dict[str, str]]]] = {}
        for rel, entry in links:
            if isinstance(entry, Link):
                rendered[rel] = self.from_link(entry)
                continue
            if not isinstance(entry, list):
                raise InvalidLinkError(
                    f"Link object for relation {rel!r} was malformed; "
                    "cannot generate link"
                )
            aggregate = []
            for sub in entry:
                if not isinstance(sub, Link):
                    raise InvalidLinkError(
                        f"Link object aggregated for relation {rel!r} was "
                        "malformed; cannot generate link"
                    )
                aggregate.append(self.from_link(sub))
            rendered[rel] = aggregate
        return rendered

    def _absolute(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return self.route_resolver.to_absolute(path)

    # --- Extraction -------------------------------------------------------- #

    def extract(
        self, entity: Any, default_hydrator: Optional[Union[str, Hydrator]] = None
    ) -> Dict[str, Any]:
        """
        Field map for an entity. Resolution order: mapping/self-describing,
        metadata hydrator, per-type hydrator, default hydrator, generic.
        """
        if isinstance(entity, Mapping):
            return dict(entity)
        if isinstance(entity, SelfDescribing):
            return dict(entity.to_serializable())

        metadata = self.metadata_map.get(entity)
        if metadata is not None and metadata.hydrator is not None:
            return dict(metadata.hydrator.extract(entity))

        hydrator = self.hydrators.get(type(entity))
        if hydrator is None and default_hydrator is not None:
            hydrator = self.registry.resolve(default_hydrator)
        if hydrator is None:
            hydrator = self.default_hydrator
        if hydrator is not None:
            return dict(hydrator.extract(entity))

        return extract_public_fields(entity)

    @staticmethod
    def get_id(entity: Any, identifier_name: str = "id") -> Any:
        """Identifier from a mapping key, attribute, or get_<name>() method."""
        if isinstance(entity, HalResource):
            return entity.id
        if isinstance(entity, Mapping):
            return entity.get(identifier_name)
        value = getattr(entity, identifier_name, None)
        if value is not None and not callable(value):
            return value
        getter = getattr(entity, f"get_{identifier_name}", None)
        if callable(getter):
            return getter()
        return None

    def _promote(self, value: Any) -> Any:
        if isinstance(value, (HalResource, HalCollection, Mapping)):
            return value
        metadata = self.metadata_map.get(value)
        if metadata is None:
            return value
        return self.create_resource_from_metadata(value, metadata)

    def _embed(
        self, fields: Dict[str, Any], default_hydrator: Any = None
    ) -> Dict[str, Any]:
        """Move nested resources/collections out of `fields`; return them."""
        embedded: Dict[str, Any] = {}
        for key, value in list(fields.items()):
            value = self._promote(value)
            if isinstance(value, HalResource):
                embedded[key] = self.render_resource(value, default_hydrator)
                del fields[key]
            elif isinstance(value, HalCollection):
                embedded[key] = self._extract_items(value, default_hydrator)
                del fields[key]
        return embedded

    # --- Resources --------------------------------------------------------- #

    def render_resource(
        self,
        resource: HalResource,
        default_hydrator: Optional[Union[str, Hydrator]] = None,
    ) -> Dict[str, Any]:
        entity = resource.entity
        fields = self.extract(entity, default_hydrator)
        embedded = self._embed(fields, default_hydrator)

        links = resource.links.copy()
        metadata = None
        if not isinstance(entity, Mapping):
            metadata = self.metadata_map.get(entity)
        if not links.has("self"):
            self_link = self._resource_self_link(resource, metadata)
            if self_link is not None:
                links.add(self_link)
        if metadata is not None:
            for link in metadata.build_links():
                links.add(link)

        log_event(
            "hal.render_resource",
            self.log,
            level=logging.DEBUG,
            entity_type=type(entity).__name__,
            route=resource.route,
        )
        return self._finish(RenderEvent(resource, fields, links, embedded))

    def _resource_self_link(
        self, resource: HalResource, metadata: Optional[Metadata]
    ) -> Optional[Link]:
        if resource.route:
            params = {**resource.route_params, resource.identifier_name: resource.id}
            return Link.from_route(
                "self", resource.route, params, resource.route_options
            )
        if metadata is None:
            return None
        if metadata.route:
            params = {**metadata.route_params, metadata.identifier_name: resource.id}
            return Link.from_route(
                "self", metadata.route, params, metadata.route_options
            )
        if metadata.url:
            return Link.from_url("self", metadata.url)
        return None

    def _finish(self, event: RenderEvent) -> Dict[str, Any]:
        for interceptor in self.interceptors:
            interceptor(event)

        payload = dict(event.payload)
        payload["_links"] = self.from_link_collection(event.links)
        if event.embedded:
            payload["_embedded"] = event.embedded
        return payload

    # --- Collections ------------------------------------------------------- #

    def render_collection(
        self,
        collection: HalCollection,
        default_hydrator: Optional[Union[str, Hydrator]] = None,
    ) -> Union[Dict[str, Any], ApiProblem]:
        links = collection.links.copy()
        metadata = self.metadata_map.get(collection.collection)
        static_links = metadata.build_links() if metadata is not None else []

        if collection.is_paginated:
            source = collection.collection
            source.set_page_size(collection.page_size)
            source.set_current_page(collection.page)
            count = source.count()

            if not count:
                if not links.has("self") and collection.collection_route:
                    links.add(self._page_link("self", collection, 1))
                for link in static_links:
                    links.add(link)
                event = RenderEvent(collection, dict(collection.attributes), links)
                return self._finish(event)

            if collection.page < 1 or collection.page > count:
                log_event(
                    "hal.invalid_page",
                    self.log,
                    page=collection.page,
                    page_count=count,
                    route=collection.collection_route,
                )
                return ApiProblem(409, INVALID_PAGE_DETAIL)

            if collection.collection_route:
                self._inject_pagination_links(collection, links, count)
        elif collection.collection_route and not links.has("self"):
            links.add(
                Link.from_route(
                    "self",
                    collection.collection_route,
                    collection.collection_route_params,
                    collection.collection_route_options,
                )
            )

        for link in static_links:
            links.add(link)

        items = self._extract_items(collection, default_hydrator, paginate=False)
        log_event(
            "hal.render_collection",
            self.log,
            level=logging.DEBUG,
            route=collection.collection_route,
            page=collection.page,
            items=len(items),
        )
        event = RenderEvent(
            collection,
            dict(collection.attributes),
            links,
            {collection.collection_name: items},
        )
        return self._finish(event)

    def _page_link(self, rel: str, collection: HalCollection, page: int) -> Link:
        options = dict(collection.collection_route_options)
        query = dict(options.get("query") or {})
        query.pop(self.config.page_param, None)
        if page != 1:
            query[self.config.page_param] = page
        if query:
            options["query"] = query
        else:
            options.pop("query", None)
        link = Link(rel).set_route(collection.collection_route)
        link.set_route_params(collection.collection_route_params)
        link.set_route_options(options)
        return link

    def _inject_pagination_links(
        self, collection: HalCollection, links: LinkCollection, count: int
    ) -> None:
        page = collection.page
        links.add(self._page_link("self", collection, page), overwrite=True)
        if page != 1:
            links.add(self._page_link("first", collection, 1), overwrite=True)
        if count != 1:
            links.add(self._page_link("last", collection, count), overwrite=True)
        if page > 1:
            links.add(self._page_link("prev", collection, page - 1), overwrite=True)
        if page < count:
            links.add(self._page_link("next", collection, page + 1), overwrite=True)

    def _extract_items(
        self,
        collection: HalCollection,
        default_hydrator: Any = None,
        *,
        paginate: bool = True,
    ) -> List[Any]:
        if paginate and collection.is_paginated:
            collection.collection.set_page_size(collection.page_size)
            collection.collection.set_current_page(collection.page)
        return [
            self._render_item(item, collection, default_hydrator)
            for item in collection.collection
        ]

    def _render_item(
        self, item: Any, collection: HalCollection, default_hydrator: Any
    ) -> Any:
        item = self._promote(item)

        if isinstance(item, HalResource):
            if not item.route and collection.resource_route:
                item = replace(
                    item,
                    route=collection.resource_route,
                    route_params={
                        **collection.resource_route_params,
                        **item.route_params,
                    },
                    route_options={
                        **collection.resource_route_options,
                        **item.route_options,
                    },
                    identifier_name=collection.identifier_name,
                )
            return self.render_resource(item, default_hydrator)
        if isinstance(item, HalCollection):
            return self._extract_items(item, default_hydrator)

        fields = self.extract(item, default_hydrator)
        embedded = self._embed(fields, default_hydrator)
        identifier = self.get_id(fields, collection.identifier_name)
        if identifier is None:
            # Items without an identifier cannot be linked; emit as-is
            if embedded:
                fields["_embedded"] = embedded
            return fields

        links = LinkCollection()
        if collection.resource_route:
            params = {
                **collection.resource_route_params,
                collection.identifier_name: identifier,
            }
            links.add(
                Link.from_route(
                    "self",
                    collection.resource_route,
                    params,
                    collection.resource_route_options,
                )
            )
        payload = dict(fields)
        payload["_links"] = self.from_link_collection(links)
        if embedded:
            payload["_embedded"] = embedded
        return payload

    # --- Synthesis --------------------------------------------------------- #

    def create_resource_from_metadata(
        self, entity: Any, metadata: Metadata
    ) -> HalTarget:
        if metadata.is_collection:
            return self.create_collection_from_metadata(entity, metadata)

        data = self.extract(entity)
        identifier_name = metadata.identifier_name
        identifier = data.get(identifier_name)
        if identifier is None:
            raise MissingIdentifierError(
                f"Unable to determine identifier for object of type "
                f"{type(entity).__name__!r}; no field matching {identifier_name!r}"
            )

        resource = HalResource(
            data,
            identifier,
            route=metadata.route,
            route_params=dict(metadata.route_params),
            route_options=dict(metadata.route_options),
            identifier_name=identifier_name,
        )
        self_link = self._resource_self_link(resource, metadata)
        if self_link is None:
            raise ExtractionError(
                f"Unable to create a self link for resource of type "
                f"{type(entity).__name__!r}; metadata does not contain a route or a url"
            )
        resource.links.add(self_link)
        for link in metadata.build_links():
            resource.links.add(link)
        return resource

    def create_collection_from_metadata(
        self, entity: Any, metadata: Metadata
    ) -> HalCollection:
        collection = HalCollection(
            entity,
            collection_route=metadata.route,
            resource_route=metadata.resource_route,
            collection_name=metadata.collection_name,
            page_size=self.config.default_page_size,
            collection_route_params=dict(metadata.route_params),
            collection_route_options=dict(metadata.route_options),
            identifier_name=metadata.identifier_name,
        )
        return collection

    def create_resource(
        self, entity: Any, route: str, identifier_name: Optional[str] = None
    ) -> Union[HalTarget, ApiProblem]:
        """Wrap `entity` (if needed) and give it a self link."""
        identifier_name = identifier_name or self.config.identifier_name
        try:
            entity = self._promote(entity)
        except MissingIdentifierError:
            return ApiProblem(422, MISSING_IDENTIFIER_DETAIL)
        if isinstance(entity, HalCollection):
            return entity

        if not isinstance(entity, HalResource):
            identifier = self.get_id(entity, identifier_name)
            if identifier is None:
                return ApiProblem(422, MISSING_IDENTIFIER_DETAIL)
            entity = HalResource(
                entity, identifier, route=route, identifier_name=identifier_name
            )

        self.inject_self_link(entity, route, identifier_name)
        return entity

    def create_collection(
        self, collection: Any, route: Optional[str] = None
    ) -> HalCollection:
        if not isinstance(collection, HalCollection):
            metadata = self.metadata_map.get(collection)
            if metadata is not None and metadata.is_collection:
                collection = self.create_collection_from_metadata(collection, metadata)
            else:
                collection = HalCollection(
                    collection,
                    collection_route=route,
                    collection_name=self.config.collection_name,
                    page_size=self.config.default_page_size,
                    identifier_name=self.config.identifier_name,
                )

        self.inject_self_link(collection, route or collection.collection_route)
        return collection

    def inject_self_link(
        self, target: HalTarget, route: Optional[str], identifier_name: str = "id"
    ) -> None:
        """Add a route-based self link unless one is already present."""
        if not route or target.links.has("self"):
            return
        link = Link("self").set_route(route)
        if isinstance(target, HalResource):
            link.set_route_params({**target.route_params, identifier_name: target.id})
        else:
            link.set_route_params(target.collection_route_params)
        target.links.add(link)


def render(renderer: HalRenderer, value: Any) -> Union[Dict[str, Any], ApiProblem]:
    """Dispatch on wrapper type; other values pass through unchanged."""
    if isinstance(value, HalCollection):
        return renderer.render_collection(value)
    if isinstance(value, HalResource):
        return renderer.render_resource(value)
    return value


__all__ = [
    "HalRenderer",
    "RenderEvent",
    "Interceptor",
    "render",
    "INVALID_PAGE_DETAIL",
    "MISSING_IDENTIFIER_DETAIL",
]
