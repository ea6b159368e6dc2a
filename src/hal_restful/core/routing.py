"""Route resolution contract plus a template-based implementation."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable
from urllib.parse import quote, urlencode

from .errors import InvalidLinkError

_OPTIONAL_SEGMENT = re.compile(r"\[([^\[\]]*)\]")
_PLACEHOLDER = re.compile(r"\{(\w+)\}")


@runtime_checkable
class RouteResolver(Protocol):
    def resolve(
        self,
        route: str,
        params: Mapping[str, Any],
        options: Mapping[str, Any],
        reuse_matched_params: bool = True,
    ) -> str: ...

    def to_absolute(self, path: str) -> str: ...


def apply_route_options(path: str, options: Mapping[str, Any]) -> str:
    """Append `query` (mapping) and `fragment` route options to a path."""
    query = options.get("query") or {}
    if query:
        encoded = urlencode(
            [(k, v) for k, v in dict(query).items() if v is not None], doseq=True
        )
        if encoded:
            path = f"{path}{'&' if '?' in path else '?'}{encoded}"
    fragment = options.get("fragment")
    if fragment:
        path = f"{path}#{fragment}"
    return path


def merge_params(
    matched: Mapping[str, Any], params: Mapping[str, Any], reuse: bool
) -> Dict[str, Any]:
    """Explicit params override ambient matched params; reuse=False drops them."""
    if not reuse:
        return dict(params)
    return {**dict(matched), **dict(params)}


def expand_template(template: str, params: Mapping[str, Any]) -> str:
    """
    Expand "/users[/{id}]"-style templates. Bracketed segments are kept only
    when every placeholder inside them has a value.
    """

    def _optional(match: re.Match) -> str:
        segment = match.group(1)
        names = _PLACEHOLDER.findall(segment)
        if all(params.get(name) is not None for name in names):
            return segment
        return ""

    expanded = _OPTIONAL_SEGMENT.sub(_optional, template)
    missing = [n for n in _PLACEHOLDER.findall(expanded) if params.get(n) is None]
    if missing:
        raise InvalidLinkError(
            f"Missing route parameter(s) {', '.join(missing)} for {template!r}"
        )
    return _PLACEHOLDER.sub(
        lambda m: quote(str(params[m.group(1)]), safe=""), expanded
    )


class TemplateRouteResolver:
    """Resolve named routes from path templates against a base URL."""

    def __init__(
        self,
        routes: Mapping[str, str],
        base_url: str,
        *,
        matched_params: Optional[Mapping[str, Any]] = None,
    ):
        base_url = (base_url or "").rstrip("/")
        if not base_url:
            raise ValueError("base_url must be provided.")
        self.routes = dict(routes)
        self.base_url = base_url
        self.matched_params = dict(matched_params or {})

    def resolve(
        self,
        route: str,
        params: Mapping[str, Any],
        options: Mapping[str, Any],
        reuse_matched_params: bool = True,
    ) -> str:
        try:
            template = self.routes[route]
        except KeyError:
            raise InvalidLinkError(f"Unknown route {route!r}") from None
        merged = merge_params(self.matched_params, params, reuse_matched_params)
        return apply_route_options(expand_template(template, merged), options)

    def to_absolute(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path


__all__ = [
    "RouteResolver",
    "TemplateRouteResolver",
    "apply_route_options",
    "expand_template",
    "merge_params",
]
