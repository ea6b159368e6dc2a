"""Wrappers marking entities and collections for HAL rendering."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional

from .errors import InvalidCollectionError, InvalidPageError, InvalidResourceError
from .links import LinkCollection
from .pagination import PaginatedSource

DEFAULT_COLLECTION_NAME = "items"
DEFAULT_PAGE_SIZE = 30


def _positive_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidPageError(f"{what} must be an integer; received bool")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidPageError(
            f"{what} must be an integer; received {type(value).__name__}"
        ) from exc
    if number < 1:
        raise InvalidPageError(f"{what} must be a positive integer; received {number}")
    return number


@dataclass(frozen=True)
class HalResource:
    entity: Any
    id: Any
    route: Optional[str] = None
    route_params: Dict[str, Any] = field(default_factory=dict)
    route_options: Dict[str, Any] = field(default_factory=dict)
    identifier_name: str = "id"
    links: LinkCollection = field(default_factory=LinkCollection, compare=False)

    def __post_init__(self) -> None:
        entity = self.entity
        if entity is None or isinstance(entity, (str, bytes, int, float, bool)):
            raise InvalidResourceError(
                "HalResource expects a mapping or an object; "
                f"received {type(entity).__name__}"
            )


@dataclass(frozen=True)
class HalCollection:
    collection: Any
    collection_route: Optional[str] = None
    resource_route: Optional[str] = None
    collection_name: str = DEFAULT_COLLECTION_NAME
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    collection_route_params: Dict[str, Any] = field(default_factory=dict)
    collection_route_options: Dict[str, Any] = field(default_factory=dict)
    resource_route_params: Dict[str, Any] = field(default_factory=dict)
    resource_route_options: Dict[str, Any] = field(default_factory=dict)
    identifier_name: str = "id"
    attributes: Mapping[str, Any] = field(default_factory=dict)
    links: LinkCollection = field(default_factory=LinkCollection, compare=False)

    def __post_init__(self) -> None:
        source = self.collection
        if isinstance(source, (str, bytes, Mapping)) or not isinstance(
            source, Iterable
        ):
            raise InvalidCollectionError(
                "HalCollection expects an iterable or paginated source; "
                f"received {type(source).__name__}"
            )
        object.__setattr__(self, "page", _positive_int(self.page, "Page"))
        object.__setattr__(
            self, "page_size", _positive_int(self.page_size, "Page size")
        )

    @property
    def is_paginated(self) -> bool:
        return isinstance(self.collection, PaginatedSource)

    def with_page(
        self, page: Any = None, page_size: Any = None
    ) -> "HalCollection":
        """Copy with a new page and/or page size; links are shared."""
        changes: Dict[str, Any] = {}
        if page is not None:
            changes["page"] = page
        if page_size is not None:
            changes["page_size"] = page_size
        return replace(self, **changes, links=self.links)


__all__ = [
    "HalResource",
    "HalCollection",
    "DEFAULT_COLLECTION_NAME",
    "DEFAULT_PAGE_SIZE",
]
