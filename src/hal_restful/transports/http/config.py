from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from hal_restful.core.negotiation import API_PROBLEM_JSON, PROBLEM_JSON

PROBLEM_MEDIA_TYPES = (PROBLEM_JSON, API_PROBLEM_JSON)


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean environment variable with a safe default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _normalize_base_url(raw: str | None) -> str | None:
    if raw is None or not raw.strip():
        return None
    parts = urlsplit(raw.strip())
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"HAL_BASE_URL must be an absolute http(s) URL: {raw!r}")
    if parts.query or parts.fragment:
        raise ValueError("HAL_BASE_URL must not include query or fragment")
    return raw.strip().rstrip("/")


@dataclass(frozen=True)
class HttpConfig:
    """Settings for the Starlette adapter."""

    problem_media_type: str = PROBLEM_JSON
    # Only render unhandled errors as problems when the client accepts JSON
    problems_json_only: bool = True
    # Overrides the request base URL when building absolute links
    base_url: str | None = None

    def __post_init__(self) -> None:
        if self.problem_media_type not in PROBLEM_MEDIA_TYPES:
            raise ValueError(
                "problem_media_type must be one of " + ", ".join(PROBLEM_MEDIA_TYPES)
            )
        object.__setattr__(self, "base_url", _normalize_base_url(self.base_url))

    @classmethod
    def from_env(cls) -> "HttpConfig":
        media_type = (os.getenv("HAL_PROBLEM_MEDIA_TYPE") or "").strip().lower()
        return cls(
            problem_media_type=media_type or cls.problem_media_type,
            problems_json_only=_get_bool_env(
                "HAL_PROBLEMS_JSON_ONLY", cls.problems_json_only
            ),
            base_url=os.getenv("HAL_BASE_URL"),
        )


__all__ = ["HttpConfig", "PROBLEM_MEDIA_TYPES"]
