from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .hydrators import HydratorRegistry
from .metadata import MetadataMap
from .resources import DEFAULT_COLLECTION_NAME, DEFAULT_PAGE_SIZE


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean; received {raw!r}")


def _get_str_env(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


@dataclass(frozen=True)
class RendererConfig:
    """Defaults applied by HalRenderer and the HTTP adapter."""

    page_param: str = "page"
    default_page_size: int = DEFAULT_PAGE_SIZE
    collection_name: str = DEFAULT_COLLECTION_NAME
    identifier_name: str = "id"
    match_ancestors: bool = False
    include_stack_trace: bool = False

    @classmethod
    def from_env(cls, *, use_dotenv: bool = True) -> "RendererConfig":
        if use_dotenv:
            load_dotenv()

        raw_size = (os.getenv("HAL_DEFAULT_PAGE_SIZE") or "").strip()
        page_size = int(raw_size) if raw_size else cls.default_page_size
        if page_size <= 0:
            raise ValueError("HAL_DEFAULT_PAGE_SIZE must be greater than zero")

        return cls(
            page_param=_get_str_env("HAL_PAGE_PARAM", cls.page_param),
            default_page_size=page_size,
            collection_name=_get_str_env("HAL_COLLECTION_NAME", cls.collection_name),
            identifier_name=_get_str_env("HAL_IDENTIFIER_NAME", cls.identifier_name),
            match_ancestors=_get_bool_env("HAL_MATCH_ANCESTORS", cls.match_ancestors),
            include_stack_trace=_get_bool_env(
                "HAL_INCLUDE_STACK_TRACE", cls.include_stack_trace
            ),
        )


def load_metadata_map(
    config: Mapping[str, Any],
    *,
    hydrators: Optional[HydratorRegistry] = None,
    renderer_config: Optional[RendererConfig] = None,
) -> MetadataMap:
    """Build a MetadataMap from configuration; env decides ancestor matching
    unless the config sets match_ancestors itself."""
    metadata_map = MetadataMap.from_config(config, hydrators=hydrators)
    if renderer_config is not None and "match_ancestors" not in config:
        metadata_map.match_ancestors = renderer_config.match_ancestors
    return metadata_map


__all__ = ["RendererConfig", "load_metadata_map"]
