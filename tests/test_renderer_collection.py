import pytest
from hal_restful.core.config import RendererConfig
from hal_restful.core.errors import InvalidCollectionError, InvalidPageError
from hal_restful.core.metadata import MetadataMap
from hal_restful.core.pagination import ListPaginator, PaginatedSource
from hal_restful.core.problem import ApiProblem
from hal_restful.core.renderer import INVALID_PAGE_DETAIL, HalRenderer, RenderEvent
from hal_restful.core.resources import HalCollection, HalResource


class UserList(list):
    pass


def _users(n):
    return [{"id": i, "name": f"user-{i}"} for i in range(1, n + 1)]


def _paginated(n, page, page_size=5, **kwargs):
    return HalCollection(
        ListPaginator(_users(n)),
        collection_route="users",
        resource_route="user",
        page=page,
        page_size=page_size,
        **kwargs,
    )


def _hrefs(payload):
    return {rel: link["href"] for rel, link in payload["_links"].items()}


def test_list_paginator_counts_pages():
    paginator = ListPaginator(_users(11), page_size=5)
    assert isinstance(paginator, PaginatedSource)
    assert paginator.count() == 3
    paginator.set_current_page(3)
    assert [u["id"] for u in paginator] == [11]
    assert ListPaginator([]).count() == 0


def test_middle_page_links(renderer):
    payload = renderer.render_collection(_paginated(100, 3))
    assert _hrefs(payload) == {
        "self": "http://localhost/users?page=3",
        "first": "http://localhost/users",
        "last": "http://localhost/users?page=20",
        "prev": "http://localhost/users?page=2",
        "next": "http://localhost/users?page=4",
    }
    assert list(payload["_links"]) == ["self", "first", "last", "prev", "next"]
    items = payload["_embedded"]["items"]
    assert [item["id"] for item in items] == [11, 12, 13, 14, 15]
    assert items[0]["_links"]["self"] == {"href": "http://localhost/users/11"}


def test_first_page_links(renderer):
    payload = renderer.render_collection(_paginated(100, 1))
    assert _hrefs(payload) == {
        "self": "http://localhost/users",
        "last": "http://localhost/users?page=20",
        "next": "http://localhost/users?page=2",
    }


def test_last_page_links(renderer):
    payload = renderer.render_collection(_paginated(100, 20))
    assert _hrefs(payload) == {
        "self": "http://localhost/users?page=20",
        "first": "http://localhost/users",
        "prev": "http://localhost/users?page=19",
    }


def test_single_page_has_only_self(renderer):
    payload = renderer.render_collection(_paginated(3, 1))
    assert _hrefs(payload) == {"self": "http://localhost/users"}
    assert len(payload["_embedded"]["items"]) == 3


def test_page_out_of_range_is_conflict(renderer):
    problem = renderer.render_collection(_paginated(100, 21))
    assert isinstance(problem, ApiProblem)
    assert problem.status == 409
    assert problem.to_dict()["detail"] == INVALID_PAGE_DETAIL


def test_empty_paginated_collection_has_self_only(renderer):
    collection = _paginated(0, 1, attributes={"total": 0})
    payload = renderer.render_collection(collection)
    assert payload == {
        "total": 0,
        "_links": {"self": {"href": "http://localhost/users"}},
    }


def test_empty_collection_ignores_page(renderer):
    payload = renderer.render_collection(_paginated(0, 4))
    assert "_embedded" not in payload


def test_paginated_collection_without_route_has_no_page_links(renderer):
    payload = renderer.render_collection(
        HalCollection(ListPaginator(_users(7)), page=2, page_size=5)
    )
    assert payload["_links"] == {}
    assert [u["id"] for u in payload["_embedded"]["items"]] == [6, 7]

    empty = renderer.render_collection(HalCollection(ListPaginator([]), page=1))
    assert empty == {"_links": {}}


def test_paginated_collection_without_route_still_checks_page(renderer):
    problem = renderer.render_collection(
        HalCollection(ListPaginator(_users(3)), page=2, page_size=5)
    )
    assert isinstance(problem, ApiProblem)
    assert problem.status == 409


def test_metadata_links_added_to_empty_and_filled_pages(resolver):
    class UserPages(ListPaginator):
        pass

    metadata_map = MetadataMap(
        {UserPages: {"links": [{"rel": "docs", "url": "http://example.com/docs"}]}}
    )
    renderer = HalRenderer(resolver, metadata_map)

    empty = renderer.render_collection(
        HalCollection(UserPages([]), collection_route="users")
    )
    filled = renderer.render_collection(
        HalCollection(UserPages(_users(2)), collection_route="users")
    )

    assert _hrefs(empty) == {
        "self": "http://localhost/users",
        "docs": "http://example.com/docs",
    }
    assert _hrefs(filled) == _hrefs(empty)


def test_pagination_keeps_other_query_options(renderer):
    collection = _paginated(
        30, 2, collection_route_options={"query": {"sort": "name", "page": 9}}
    )
    hrefs = _hrefs(renderer.render_collection(collection))
    assert hrefs["self"] == "http://localhost/users?sort=name&page=2"
    assert hrefs["first"] == "http://localhost/users?sort=name"
    assert hrefs["next"] == "http://localhost/users?sort=name&page=3"


def test_custom_page_param(resolver):
    renderer = HalRenderer(resolver, config=RendererConfig(page_param="p"))
    hrefs = _hrefs(renderer.render_collection(_paginated(20, 2)))
    assert hrefs["self"] == "http://localhost/users?p=2"
    assert hrefs["first"] == "http://localhost/users"


def test_render_collection_is_repeatable(renderer):
    collection = _paginated(100, 3)
    payload = renderer.render_collection(collection)
    again = renderer.render_collection(collection)
    assert payload == again
    assert len(collection.links) == 0


def test_plain_iterable_collection(renderer):
    collection = HalCollection(
        _users(2),
        collection_route="users",
        resource_route="user",
        attributes={"count": 2},
    )
    payload = renderer.render_collection(collection)
    assert payload["count"] == 2
    assert _hrefs(payload) == {"self": "http://localhost/users"}
    assert [i["_links"]["self"]["href"] for i in payload["_embedded"]["items"]] == [
        "http://localhost/users/1",
        "http://localhost/users/2",
    ]


def test_items_without_identifier_are_emitted_as_is(renderer):
    collection = HalCollection([{"name": "anonymous"}], resource_route="user")
    payload = renderer.render_collection(collection)
    assert payload["_embedded"]["items"] == [{"name": "anonymous"}]


def test_resource_items_inherit_resource_route(renderer):
    collection = HalCollection(
        [HalResource({"id": 7}, 7)], collection_name="people", resource_route="user"
    )
    payload = renderer.render_collection(collection)
    assert payload["_embedded"]["people"] == [
        {"id": 7, "_links": {"self": {"href": "http://localhost/users/7"}}}
    ]


def test_collection_interceptor_sees_embedded(resolver):
    events = []

    def interceptor(event: RenderEvent):
        events.append(event)
        event.payload["seen"] = len(event.embedded["items"])

    renderer = HalRenderer(resolver, interceptors=[interceptor])
    payload = renderer.render_collection(HalCollection(_users(3)))
    assert payload["seen"] == 3
    assert isinstance(events[0].target, HalCollection)


def test_create_collection_applies_config_and_self_link(resolver):
    renderer = HalRenderer(
        resolver, config=RendererConfig(collection_name="entries", default_page_size=2)
    )
    collection = renderer.create_collection(ListPaginator(_users(5)), "users")
    assert collection.collection_name == "entries"
    assert collection.page_size == 2
    payload = renderer.render_collection(collection)
    assert _hrefs(payload)["self"] == "http://localhost/users"
    assert _hrefs(payload)["last"] == "http://localhost/users?page=3"
    assert len(payload["_embedded"]["entries"]) == 2


def test_create_collection_from_metadata(resolver):
    metadata_map = MetadataMap(
        {
            UserList: {
                "isCollection": True,
                "route": "users",
                "resourceRoute": "user",
                "collectionName": "users",
                "links": [{"rel": "docs", "url": "http://example.com/docs"}],
            }
        }
    )
    renderer = HalRenderer(resolver, metadata_map)
    collection = renderer.create_collection(UserList(_users(2)))
    payload = renderer.render_collection(collection)

    assert _hrefs(payload) == {
        "self": "http://localhost/users",
        "docs": "http://example.com/docs",
    }
    assert [u["_links"]["self"]["href"] for u in payload["_embedded"]["users"]] == [
        "http://localhost/users/1",
        "http://localhost/users/2",
    ]


def test_collection_validation():
    with pytest.raises(InvalidCollectionError):
        HalCollection("not a collection")
    with pytest.raises(InvalidCollectionError):
        HalCollection({"a": 1})
    with pytest.raises(InvalidCollectionError):
        HalCollection(42)
    with pytest.raises(InvalidPageError):
        HalCollection([], page=0)
    with pytest.raises(InvalidPageError):
        HalCollection([], page_size="many")
    assert HalCollection([], page="2").page == 2


def test_with_page_copies_and_shares_links():
    collection = HalCollection([], collection_route="users")
    paged = collection.with_page(3, 10)
    assert (paged.page, paged.page_size) == (3, 10)
    assert collection.page == 1
    assert paged.links is collection.links
