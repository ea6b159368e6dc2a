import pytest
from hal_restful.core.renderer import HalRenderer
from hal_restful.core.routing import TemplateRouteResolver

ROUTES = {
    "users": "/users[/{id}]",
    "user": "/users/{id}",
    "address": "/addresses/{id}",
    "friends": "/users/{id}/friends",
}


@pytest.fixture
def resolver():
    return TemplateRouteResolver(ROUTES, "http://localhost")


@pytest.fixture
def renderer(resolver):
    return HalRenderer(resolver)
