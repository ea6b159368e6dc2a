from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Set

from starlette.requests import Request
from starlette.routing import BaseRoute, Mount, NoMatchFound, Router

from hal_restful.core.errors import InvalidLinkError
from hal_restful.core.routing import apply_route_options, merge_params


def _route_params(routes: Iterable[BaseRoute], name: str) -> Optional[Set[str]]:
    """Path parameter names accepted by the route called `name`, if found."""
    for route in routes:
        if isinstance(route, Mount):
            prefix = f"{route.name}:" if route.name else ""
            if prefix and not name.startswith(prefix):
                continue
            found = _route_params(route.routes, name[len(prefix) :])
            if found is not None:
                return found | set(route.param_convertors)
            continue
        if getattr(route, "name", None) == name and hasattr(route, "param_convertors"):
            return set(route.param_convertors)
    return None


class StarletteRouteResolver:
    """
    RouteResolver backed by a Starlette router.
    - Ambient params come from the matched request path params
    - Params the named route does not declare are dropped before assembly
    - Absolute URLs use the configured base URL, else the request base URL
    """

    def __init__(
        self,
        request: Optional[Request] = None,
        *,
        router: Optional[Router] = None,
        base_url: Optional[str] = None,
        matched_params: Optional[Mapping[str, Any]] = None,
    ):
        if request is None and (router is None or base_url is None):
            raise ValueError("Either a request or a router and base_url are required")

        if router is None:
            router = request.scope.get("router") or request.app.router
        self.router = router
        self.base_url = (base_url or str(request.base_url)).rstrip("/")
        if matched_params is None and request is not None:
            matched_params = request.path_params
        self.matched_params = dict(matched_params or {})

    def resolve(
        self,
        route: str,
        params: Mapping[str, Any],
        options: Mapping[str, Any],
        reuse_matched_params: bool = True,
    ) -> str:
        merged = merge_params(self.matched_params, params, reuse_matched_params)
        accepted = _route_params(self.router.routes, route)
        if accepted is not None:
            merged = {k: v for k, v in merged.items() if k in accepted}
        try:
            path = self.router.url_path_for(route, **merged)
        except NoMatchFound as exc:
            raise InvalidLinkError(
                f"Unable to assemble route {route!r} with params {sorted(merged)}"
            ) from exc
        return apply_route_options(str(path), options)

    def to_absolute(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path


__all__ = ["StarletteRouteResolver"]
