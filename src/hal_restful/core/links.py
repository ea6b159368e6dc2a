"""Link relations and ordered link collections for HAL payloads."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import httpx

from .errors import InvalidLinkError, LinkConflictError


def _as_dict(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (str, bytes)):
        raise InvalidLinkError(f"{what} expects a mapping; received str")
    try:
        return dict(value)
    except (TypeError, ValueError) as exc:
        raise InvalidLinkError(
            f"{what} expects a mapping; received {type(value).__name__}"
        ) from exc


class Link:
    """
    A single link relation.

    Either an absolute URL or a route (plus params/options used to assemble
    it) identifies the target; never both.
    """

    def __init__(self, relation: str):
        self._relation = str(relation)
        self._route: Optional[str] = None
        self._route_params: Dict[str, Any] = {}
        self._route_options: Dict[str, Any] = {}
        self._url: Optional[str] = None

    @classmethod
    def from_route(
        cls,
        relation: str,
        route: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "Link":
        return cls(relation).set_route(route, params, options)

    @classmethod
    def from_url(cls, relation: str, url: str) -> "Link":
        return cls(relation).set_url(url)

    def __repr__(self) -> str:
        target = self._url if self._url else f"route={self._route!r}"
        return f"Link({self._relation!r}, {target})"

    @property
    def relation(self) -> str:
        return self._relation

    @property
    def route(self) -> Optional[str]:
        return self._route

    @property
    def route_params(self) -> Dict[str, Any]:
        return dict(self._route_params)

    @property
    def route_options(self) -> Dict[str, Any]:
        return dict(self._route_options)

    @property
    def url(self) -> Optional[str]:
        return self._url

    def set_route(
        self,
        route: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "Link":
        if self.has_url():
            raise LinkConflictError(
                f"Link {self._relation!r} already has a URL set; cannot set route"
            )
        self._route = str(route) if route else None
        if params:
            self.set_route_params(params)
        if options:
            self.set_route_options(options)
        return self

    def set_route_params(self, params: Mapping[str, Any]) -> "Link":
        self._route_params = _as_dict(params, "set_route_params")
        return self

    def set_route_options(self, options: Mapping[str, Any]) -> "Link":
        self._route_options = _as_dict(options, "set_route_options")
        return self

    def set_url(self, url: str) -> "Link":
        if self.has_route():
            raise LinkConflictError(
                f"Link {self._relation!r} already has a route set; cannot set URL"
            )
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise InvalidLinkError(f"Received invalid URL: {exc}") from exc

        if not parsed.scheme or not parsed.host:
            raise InvalidLinkError(f"Received invalid URL: {url!r} is not absolute")

        self._url = str(parsed)
        return self

    def has_route(self) -> bool:
        return bool(self._route)

    def has_url(self) -> bool:
        return bool(self._url)

    def is_complete(self) -> bool:
        return self.has_url() or self.has_route()


LinkEntry = Union[Link, List[Link]]


class LinkCollection:
    """Ordered relation -> Link (or list of Links) mapping."""

    def __init__(self, links: Optional[List[Link]] = None):
        self._links: Dict[str, LinkEntry] = {}
        for link in links or ():
            self.add(link)

    def __len__(self) -> int:
        return len(self._links)

    def __iter__(self) -> Iterator[Tuple[str, LinkEntry]]:
        return iter(list(self._links.items()))

    def __contains__(self, relation: object) -> bool:
        return relation in self._links

    def __repr__(self) -> str:
        return f"LinkCollection({list(self._links)!r})"

    def copy(self) -> "LinkCollection":
        """Shallow copy; Link objects are shared, relation lists are not."""
        clone = LinkCollection()
        for relation, entry in self._links.items():
            clone._links[relation] = list(entry) if isinstance(entry, list) else entry
        return clone

    def add(self, link: Link, overwrite: bool = False) -> "LinkCollection":
        if not isinstance(link, Link):
            raise InvalidLinkError(
                f"LinkCollection.add expects a Link; received {type(link).__name__}"
            )
        relation = link.relation
        current = self._links.get(relation)
        if current is None or overwrite:
            self._links[relation] = link
        elif isinstance(current, Link):
            self._links[relation] = [current, link]
        else:
            current.append(link)
        return self

    def get(self, relation: str) -> Optional[LinkEntry]:
        return self._links.get(relation)

    def has(self, relation: str) -> bool:
        return relation in self._links

    def remove(self, relation: str) -> bool:
        if relation not in self._links:
            return False
        del self._links[relation]
        return True


__all__ = ["Link", "LinkCollection", "LinkEntry"]
