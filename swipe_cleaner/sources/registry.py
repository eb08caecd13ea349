"""Media source registration."""

from typing import Optional
from .base import BaseMediaSource

_registry: dict[str, type[BaseMediaSource]] = {}


def register_source(source_cls: type[BaseMediaSource]) -> type[BaseMediaSource]:
    _registry[source_cls.source_id] = source_cls
    return source_cls


def get_source_class(source_id: str) -> Optional[type[BaseMediaSource]]:
    return _registry.get(source_id)


def get_all_sources() -> dict[str, type[BaseMediaSource]]:
    return dict(_registry)
