from __future__ import annotations

from typing import Any, Mapping

from .problem import RESERVED_KEYS

HAL_JSON = "application/hal+json"
PROBLEM_JSON = "application/problem+json"
API_PROBLEM_JSON = "application/api-problem+json"
JSON = "application/json"


def is_problem_payload(payload: Any) -> bool:
    return isinstance(payload, Mapping) and all(k in payload for k in RESERVED_KEYS)


def is_hal_payload(payload: Any) -> bool:
    return isinstance(payload, Mapping) and "_links" in payload


def select_content_type(payload: Any, problem_media_type: str = PROBLEM_JSON) -> str:
    """Content type for a rendered payload, chosen by its shape."""
    if is_problem_payload(payload):
        return problem_media_type
    if is_hal_payload(payload):
        return HAL_JSON
    return JSON


def normalize_status(value: Any) -> int:
    """Clamp anything outside the HTTP status range to 500."""
    if isinstance(value, bool):
        return 500
    try:
        status = int(value)
    except (TypeError, ValueError):
        return 500
    if 100 <= status <= 599:
        return status
    return 500


def accepts_json(header_value: str | None) -> bool:
    """
    True when an Accept header admits a JSON rendition, considering wildcards
    and structured suffixes (*/json, application/*+json). q-values are ignored.
    A missing header is treated as JSON acceptable.
    """
    if not header_value or not header_value.strip():
        return True

    for part in header_value.split(","):
        media_range = part.strip()
        if not media_range:
            continue
        if ";" in media_range:
            media_range = media_range.split(";", 1)[0].strip()
        media_range = media_range.lower()
        if media_range in ("*", "*/*", "application/*"):
            return True
        _, _, subtype = media_range.partition("/")
        if subtype == "json" or subtype.endswith("+json"):
            return True
    return False


__all__ = [
    "HAL_JSON",
    "PROBLEM_JSON",
    "API_PROBLEM_JSON",
    "JSON",
    "is_problem_payload",
    "is_hal_payload",
    "select_content_type",
    "normalize_status",
    "accepts_json",
]
