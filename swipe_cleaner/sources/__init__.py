"""Media sources."""

from .registry import get_source_class, get_all_sources, register_source
from .base import BaseMediaSource, DeleteFailed, MediaSourceError, UserCancelledDelete
from .filesystem import FilesystemMediaSource

__all__ = [
    "get_source_class",
    "get_all_sources",
    "register_source",
    "BaseMediaSource",
    "DeleteFailed",
    "MediaSourceError",
    "UserCancelledDelete",
    "FilesystemMediaSource",
]
