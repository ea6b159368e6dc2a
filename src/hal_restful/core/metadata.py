"""Per-type HAL metadata and the lookup map keyed by entity type."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .errors import HydratorNotFoundError, InvalidLinkError, MetadataError
from .hydrators import Hydrator, HydratorRegistry, _import_object
from .links import Link
from .resources import DEFAULT_COLLECTION_NAME

log = logging.getLogger("hal_restful.core.metadata")


class LinkSpec(BaseModel):
    """Statically declared link: rel plus either a URL or a route."""

    rel: str
    url: Optional[str] = None
    route: Optional[str] = None
    params: Dict[str, Any] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "LinkSpec":
        if bool(self.url) == bool(self.route):
            raise MetadataError(
                f"Link {self.rel!r} must declare exactly one of 'url' or 'route'"
            )
        return self

    def to_link(self) -> Link:
        if self.url:
            return Link.from_url(self.rel, self.url)
        return Link.from_route(self.rel, self.route, self.params, self.options)


class Metadata(BaseModel):
    """
    How to render entities of one type.

    Accepts snake_case or camelCase keys (identifierName, isCollection,
    resourceRoute, routeParams, ...). Unknown keys are ignored.
    """

    entity_type: type
    hydrator: Optional[Any] = None
    identifier_name: str = "id"
    is_collection: bool = False
    route: Optional[str] = None
    route_params: Dict[str, Any] = Field(default_factory=dict)
    route_options: Dict[str, Any] = Field(default_factory=dict)
    url: Optional[str] = None
    resource_route: Optional[str] = None
    collection_name: str = DEFAULT_COLLECTION_NAME
    links: List[LinkSpec] = Field(default_factory=list)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("entity_type", mode="before")
    @classmethod
    def _resolve_entity_type(cls, value: Any) -> type:
        if isinstance(value, str):
            try:
                value = _import_object(value)
            except ImportError as exc:
                raise MetadataError(
                    f"Class provided to Metadata must exist; received {value!r}"
                ) from exc
        if not isinstance(value, type):
            raise MetadataError(
                f"Class provided to Metadata must exist; received {value!r}"
            )
        return value

    @field_validator("hydrator", mode="before")
    @classmethod
    def _resolve_hydrator(cls, value: Any, info: ValidationInfo) -> Optional[Hydrator]:
        if value is None:
            return None
        registry = (info.context or {}).get("hydrators") or HydratorRegistry()
        try:
            return registry.resolve(value)
        except HydratorNotFoundError as exc:
            raise MetadataError(str(exc)) from exc

    @model_validator(mode="after")
    def _default_resource_route(self) -> "Metadata":
        if self.resource_route is None:
            object.__setattr__(self, "resource_route", self.route or self.url)
        return self

    def has_hydrator(self) -> bool:
        return self.hydrator is not None

    def has_route(self) -> bool:
        return self.route is not None

    def has_url(self) -> bool:
        return self.url is not None

    def build_links(self) -> List[Link]:
        try:
            return [spec.to_link() for spec in self.links]
        except InvalidLinkError as exc:
            raise MetadataError(
                f"Invalid link declared for {self.entity_type.__name__}: {exc}"
            ) from exc


def _build_metadata(
    entity_type: Any, options: Mapping[str, Any], hydrators: Optional[HydratorRegistry]
) -> Metadata:
    data = {k: v for k, v in options.items() if k not in ("class", "entityType")}
    data["entity_type"] = entity_type
    try:
        return Metadata.model_validate(data, context={"hydrators": hydrators})
    except ValidationError as exc:
        raise MetadataError(f"Invalid metadata for {entity_type!r}: {exc}") from exc


def _is_subclass(cls: type, candidate: type) -> bool:
    try:
        return issubclass(cls, candidate)
    except TypeError:
        # protocols with data members refuse issubclass
        return False


class MetadataMap:
    """
    Type -> Metadata lookup.

    Exact type matches always win. With match_ancestors, registered types are
    tried as issubclass predicates, subclasses before their bases, so ABCs and
    runtime-checkable protocols match as well as real ancestors.
    """

    def __init__(
        self,
        map: Optional[Mapping[Any, Any]] = None,
        *,
        match_ancestors: bool = False,
        hydrators: Optional[HydratorRegistry] = None,
    ):
        self.match_ancestors = match_ancestors
        self._hydrators = hydrators
        self._map: Dict[type, Metadata] = {}
        self._order: List[type] = []
        if map:
            self.set_map(map)

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], hydrators: Optional[HydratorRegistry] = None
    ) -> "MetadataMap":
        """
        Build from configuration, either a bare {type: options} mapping or
        {"metadata_map": {...}, "match_ancestors": bool}.
        """
        if "metadata_map" in config:
            entries = config.get("metadata_map") or {}
            match_ancestors = bool(config.get("match_ancestors", False))
        else:
            entries, match_ancestors = config, False
        return cls(entries, match_ancestors=match_ancestors, hydrators=hydrators)

    def set_map(self, map: Mapping[Any, Any]) -> None:
        for entity_type, options in map.items():
            if isinstance(options, Metadata):
                metadata = options
            elif isinstance(options, Mapping):
                metadata = _build_metadata(entity_type, options, self._hydrators)
            else:
                raise MetadataError(
                    "MetadataMap expects each entry to be a mapping or a Metadata "
                    f"instance; received {type(options).__name__}"
                )
            self.add(metadata)

    def add(self, metadata: Metadata) -> None:
        entity_type = metadata.entity_type
        self._map[entity_type] = metadata
        if entity_type in self._order:
            self._order.remove(entity_type)
        index = next(
            (
                i
                for i, registered in enumerate(self._order)
                if _is_subclass(entity_type, registered)
            ),
            len(self._order),
        )
        self._order.insert(index, entity_type)
        log.debug("metadata registered for %s", metadata.entity_type.__qualname__)

    def get(self, target: Any) -> Optional[Metadata]:
        cls = target if isinstance(target, type) else type(target)
        found = self._map.get(cls)
        if found is not None or not self.match_ancestors:
            return found
        for registered in self._order:
            if _is_subclass(cls, registered):
                return self._map[registered]
        return None

    def has(self, target: Any) -> bool:
        return self.get(target) is not None

    def __contains__(self, target: Any) -> bool:
        return self.has(target)

    def __getitem__(self, target: Any) -> Metadata:
        found = self.get(target)
        if found is None:
            cls = target if isinstance(target, type) else type(target)
            raise KeyError(cls.__name__)
        return found

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self) -> Iterator[Metadata]:
        return iter(list(self._map.values()))


__all__ = ["LinkSpec", "Metadata", "MetadataMap"]
