"""Field extraction strategies ("hydrators") for entities."""

from __future__ import annotations

import dataclasses
import importlib
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from pydantic import BaseModel

from .errors import HydratorNotFoundError


@runtime_checkable
class Hydrator(Protocol):
    def extract(self, entity: Any) -> Dict[str, Any]: ...


@runtime_checkable
class SelfDescribing(Protocol):
    """Entities that know how to turn themselves into a field map."""

    def to_serializable(self) -> Mapping[str, Any]: ...


class MappingHydrator:
    def extract(self, entity: Any) -> Dict[str, Any]:
        return dict(entity)


class ObjectPropertyHydrator:
    """Public instance attributes (no leading underscore)."""

    def extract(self, entity: Any) -> Dict[str, Any]:
        return {k: v for k, v in vars(entity).items() if not k.startswith("_")}


class DataclassHydrator:
    def extract(self, entity: Any) -> Dict[str, Any]:
        # Shallow: nested resources stay objects so they can be embedded.
        return {f.name: getattr(entity, f.name) for f in dataclasses.fields(entity)}


class PydanticHydrator:
    def __init__(self, *, by_alias: bool = False):
        self.by_alias = by_alias

    def extract(self, entity: BaseModel) -> Dict[str, Any]:
        data = entity.model_dump(by_alias=self.by_alias)
        # Keep nested BaseModel values as objects so they can be embedded
        for name in type(entity).model_fields:
            value = getattr(entity, name)
            if isinstance(value, BaseModel):
                key = name
                if self.by_alias:
                    key = type(entity).model_fields[name].alias or name
                data[key] = value
        return data


def extract_public_fields(entity: Any) -> Dict[str, Any]:
    """
    Generic best-effort extraction used when nothing else is configured.
    Never raises for unknown shapes; returns {} when nothing is readable.
    """
    if isinstance(entity, Mapping):
        return dict(entity)
    if isinstance(entity, SelfDescribing):
        return dict(entity.to_serializable())
    if isinstance(entity, BaseModel):
        return PydanticHydrator().extract(entity)
    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        return DataclassHydrator().extract(entity)
    if hasattr(entity, "__dict__"):
        return ObjectPropertyHydrator().extract(entity)

    slots = getattr(type(entity), "__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    return {
        name: getattr(entity, name)
        for name in slots
        if not name.startswith("_") and hasattr(entity, name)
    }


HydratorFactory = Callable[[], Hydrator]


def _import_object(path: str) -> Any:
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ImportError(f"{path!r} is not a dotted import path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ImportError(f"{module_name!r} has no attribute {attr!r}") from exc


class HydratorRegistry:
    """Named hydrators, with dotted import paths as a fallback."""

    def __init__(self, hydrators: Optional[Mapping[str, Any]] = None):
        self._factories: Dict[str, Union[Hydrator, HydratorFactory]] = {
            "mapping": MappingHydrator,
            "object": ObjectPropertyHydrator,
            "dataclass": DataclassHydrator,
            "pydantic": PydanticHydrator,
        }
        for name, hydrator in (hydrators or {}).items():
            self.register(name, hydrator)

    def register(self, name: str, hydrator: Union[Hydrator, HydratorFactory]) -> None:
        self._factories[name.lower()] = hydrator

    def has(self, name: str) -> bool:
        return name.lower() in self._factories

    def get(self, name: str) -> Hydrator:
        target: Any = self._factories.get(name.lower())
        if target is None:
            try:
                target = _import_object(name)
            except ImportError as exc:
                raise HydratorNotFoundError(
                    f"Invalid hydrator instance or name provided; received {name!r}"
                ) from exc

        if isinstance(target, type) or (
            callable(target) and not isinstance(target, Hydrator)
        ):
            hydrator = target()
        else:
            hydrator = target
        if not isinstance(hydrator, Hydrator):
            raise HydratorNotFoundError(
                f"{name!r} does not provide an extract() method"
            )
        return hydrator

    def resolve(self, hydrator: Union[str, Hydrator]) -> Hydrator:
        """Accept a hydrator instance or a name/path to look up."""
        if isinstance(hydrator, str):
            return self.get(hydrator)
        if isinstance(hydrator, Hydrator):
            return hydrator
        raise HydratorNotFoundError(
            f"Invalid hydrator instance or name provided; "
            f"received {type(hydrator).__name__}"
        )


__all__ = [
    "Hydrator",
    "SelfDescribing",
    "MappingHydrator",
    "ObjectPropertyHydrator",
    "DataclassHydrator",
    "PydanticHydrator",
    "HydratorRegistry",
    "extract_public_fields",
]
