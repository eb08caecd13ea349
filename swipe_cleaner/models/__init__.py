"""Data models."""

from .common import (
    ALL_ALBUM,
    ALL_ALBUM_ID,
    Album,
    DateFilter,
    FilterState,
    MediaFilter,
    MediaItem,
    MediaType,
)
from .session import (
    AuthorizationState,
    AuthorizationStatus,
    BatchState,
    CommitOutcome,
    CommitResult,
    FilterOption,
    SessionStats,
    TriageState,
)

__all__ = [
    "ALL_ALBUM",
    "ALL_ALBUM_ID",
    "Album",
    "DateFilter",
    "FilterState",
    "MediaFilter",
    "MediaItem",
    "MediaType",
    "AuthorizationState",
    "AuthorizationStatus",
    "BatchState",
    "CommitOutcome",
    "CommitResult",
    "FilterOption",
    "SessionStats",
    "TriageState",
]
