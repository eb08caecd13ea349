"""Triage session and engine state models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from .common import Album, DateFilter, FilterState, MediaFilter, MediaItem


class AuthorizationStatus(str, Enum):
    """Status reported by a media source."""
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    LIMITED = "limited"
    DENIED = "denied"

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationStatus.AUTHORIZED, AuthorizationStatus.LIMITED)


class AuthorizationState(str, Enum):
    """Engine-side view of authorization, including the in-flight request."""
    IDLE = "idle"
    REQUESTING = "requesting"
    AUTHORIZED = "authorized"
    LIMITED = "limited"
    DENIED = "denied"

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationState.AUTHORIZED, AuthorizationState.LIMITED)

    @classmethod
    def from_status(cls, status: AuthorizationStatus) -> "AuthorizationState":
        return {
            AuthorizationStatus.AUTHORIZED: cls.AUTHORIZED,
            AuthorizationStatus.LIMITED: cls.LIMITED,
            AuthorizationStatus.DENIED: cls.DENIED,
            AuthorizationStatus.NOT_DETERMINED: cls.IDLE,
        }[status]


class SessionStats(BaseModel):
    kept: int = 0
    deleted: int = 0
    skipped: int = 0

    @property
    def processed(self) -> int:
        return self.kept + self.deleted + self.skipped

    def reset(self) -> None:
        self.kept = 0
        self.deleted = 0
        self.skipped = 0


class BatchState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    COMMITTING = "committing"


class CommitOutcome(str, Enum):
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


class CommitResult(BaseModel):
    outcome: CommitOutcome
    item_ids: list[str] = Field(default_factory=list)
    message: Optional[str] = None
    finished_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))


class FilterOption(BaseModel):
    value: str
    title: str
    hint: Optional[str] = None


class TriageState(BaseModel):
    """Everything a UI needs to render the deck."""
    authorization: AuthorizationState
    current: Optional[MediaItem] = None
    preview: Optional[MediaItem] = None
    is_loading: bool = False
    stats: SessionStats = Field(default_factory=SessionStats)
    pending_delete_count: int = 0
    batch_state: BatchState = BatchState.IDLE
    filters: FilterState = Field(default_factory=FilterState)
    albums: list[Album] = Field(default_factory=list)
    album_title: str = ""
    date_filter_title: str = DateFilter.ALL.label
    date_filter_hint: Optional[str] = None
    media_filter_title: str = MediaFilter.ALL.label
    media_filter_hint: Optional[str] = MediaFilter.ALL.hint
    queue_length: int = 0
    error_message: Optional[str] = None
    notice_message: Optional[str] = None
