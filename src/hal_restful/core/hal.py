"""Read helpers for rendered HAL payloads."""

from typing import Any, Dict, List, Optional, Union
from urllib.parse import parse_qs, urlsplit

LinkObject = Dict[str, Any]


def get_link(
    payload: Dict[str, Any], relation: str
) -> Optional[Union[LinkObject, List[LinkObject]]]:
    """
    Retrieves a link object (or list of link objects for multi-valued
    relations) from the _links dictionary.
    """
    if not payload or "_links" not in payload:
        return None
    return payload["_links"].get(relation)


def get_link_href(
    payload: Dict[str, Any], relation: str, index: int = 0
) -> Optional[str]:
    """
    Extracts the 'href' from a link relation.
    For multi-valued relations, `index` picks the entry.
    Example: get_link_href(user_json, 'self') -> 'http://localhost/users/1'
    """
    link = get_link(payload, relation)
    if isinstance(link, list):
        if not -len(link) <= index < len(link):
            return None
        link = link[index]
    return link.get("href") if link else None


def link_relations(payload: Dict[str, Any]) -> List[str]:
    """Relation names present in _links, in payload order."""
    if not payload or "_links" not in payload:
        return []
    return list(payload["_links"])


def get_embedded(payload: Dict[str, Any], relation: str) -> Optional[Any]:
    """
    Extracts an embedded resource (dict) or collection (list) from _embedded.
    Example: get_embedded(user_json, 'address') -> {'street': ..., '_links': ...}
    """
    if not payload or "_embedded" not in payload:
        return None
    return payload["_embedded"].get(relation)


def parse_page_from_href(
    href: Optional[str], page_param: str = "page"
) -> Optional[int]:
    """
    Extracts the page number from a pagination link.
    Example: 'http://localhost/users?page=3' -> 3; no page parameter -> 1
    """
    if not href:
        return None
    values = parse_qs(urlsplit(href).query).get(page_param)
    if not values:
        return 1
    try:
        return int(values[-1])
    except ValueError:
        return None


__all__ = [
    "get_link",
    "get_link_href",
    "link_relations",
    "get_embedded",
    "parse_page_from_href",
]
