import pytest
from hal_restful.core.errors import InvalidLinkError
from hal_restful.core.routing import (
    RouteResolver,
    TemplateRouteResolver,
    apply_route_options,
    expand_template,
    merge_params,
)
from hal_restful.transports.http.routing import StarletteRouteResolver
from starlette.responses import PlainTextResponse
from starlette.routing import Mount, Route, Router


async def _endpoint(request):
    return PlainTextResponse("ok")


def test_expand_template_optional_segments():
    assert expand_template("/users[/{id}]", {}) == "/users"
    assert expand_template("/users[/{id}]", {"id": 5}) == "/users/5"
    assert expand_template("/users[/{id}]", {"id": None}) == "/users"


def test_expand_template_requires_mandatory_params():
    with pytest.raises(InvalidLinkError):
        expand_template("/users/{id}", {})


def test_expand_template_quotes_values():
    assert expand_template("/files/{name}", {"name": "a b/c"}) == "/files/a%20b%2Fc"


def test_apply_route_options_query_and_fragment():
    options = {"query": {"page": 2, "skip": None}, "fragment": "top"}
    assert apply_route_options("/users", options) == "/users?page=2#top"
    assert apply_route_options("/users?x=1", {"query": {"page": 3}}) == (
        "/users?x=1&page=3"
    )
    assert apply_route_options("/users", {}) == "/users"


def test_merge_params_reuse_and_override():
    matched = {"id": 1, "tenant": "acme"}
    assert merge_params(matched, {"id": 2}, True) == {"id": 2, "tenant": "acme"}
    assert merge_params(matched, {"id": 2}, False) == {"id": 2}


def test_template_resolver_resolves_and_absolutizes():
    resolver = TemplateRouteResolver(
        {"users": "/users[/{id}]"}, "http://localhost/", matched_params={"id": 4}
    )
    assert isinstance(resolver, RouteResolver)
    assert resolver.resolve("users", {}, {}) == "/users/4"
    assert resolver.resolve("users", {}, {}, False) == "/users"
    assert resolver.to_absolute("/users") == "http://localhost/users"
    assert resolver.to_absolute("users") == "http://localhost/users"
    assert resolver.to_absolute("https://other/x") == "https://other/x"


def test_template_resolver_errors():
    with pytest.raises(ValueError):
        TemplateRouteResolver({}, "")
    with pytest.raises(InvalidLinkError):
        TemplateRouteResolver({}, "http://localhost").resolve("nope", {}, {})


@pytest.fixture
def starlette_resolver():
    router = Router(
        routes=[
            Route("/users", _endpoint, name="users"),
            Route("/users/{id:int}", _endpoint, name="user"),
            Mount(
                "/api",
                routes=[
                    Route(
                        "/tenants/{tenant}/users/{id}", _endpoint, name="tenant_user"
                    )
                ],
                name="api",
            ),
        ]
    )
    return StarletteRouteResolver(
        router=router,
        base_url="http://testserver/",
        matched_params={"id": 7, "tenant": "acme"},
    )


def test_starlette_resolver_drops_undeclared_params(starlette_resolver):
    assert starlette_resolver.resolve("users", {}, {}) == "/users"


def test_starlette_resolver_reuses_matched_params(starlette_resolver):
    assert starlette_resolver.resolve("user", {}, {}) == "/users/7"
    assert starlette_resolver.resolve("user", {"id": 3}, {"query": {"page": 2}}) == (
        "/users/3?page=2"
    )


def test_starlette_resolver_mounted_routes(starlette_resolver):
    assert starlette_resolver.resolve("api:tenant_user", {}, {}) == (
        "/api/tenants/acme/users/7"
    )


def test_starlette_resolver_missing_params_raise(starlette_resolver):
    with pytest.raises(InvalidLinkError):
        starlette_resolver.resolve("user", {}, {}, reuse_matched_params=False)
    with pytest.raises(InvalidLinkError):
        starlette_resolver.resolve("unknown", {}, {})


def test_starlette_resolver_absolute_urls(starlette_resolver):
    assert starlette_resolver.to_absolute("/users") == "http://testserver/users"


def test_starlette_resolver_requires_request_or_router():
    with pytest.raises(ValueError):
        StarletteRouteResolver()
