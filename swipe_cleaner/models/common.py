"""Core shared models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class MediaType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"


class MediaItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    media_type: MediaType = MediaType.PHOTO
    creation_date: Optional[datetime] = None
    filename: str = ""
    size: int = 0
    access_path: str = ""  # internal: where the adapter reads/deletes the file


class DateFilter(str, Enum):
    ALL = "all"
    LAST_SEVEN_DAYS = "last_seven_days"
    LAST_THIRTY_DAYS = "last_thirty_days"
    THIS_YEAR = "this_year"
    OLDER = "older"

    @property
    def label(self) -> str:
        return {
            DateFilter.ALL: "All time",
            DateFilter.LAST_SEVEN_DAYS: "Last 7 days",
            DateFilter.LAST_THIRTY_DAYS: "Last 30 days",
            DateFilter.THIS_YEAR: "This year",
            DateFilter.OLDER: "Older",
        }[self]

    def hint(self, now: Optional[datetime] = None) -> Optional[str]:
        year = (now or datetime.now()).year
        return {
            DateFilter.ALL: None,
            DateFilter.LAST_SEVEN_DAYS: "The past week",
            DateFilter.LAST_THIRTY_DAYS: "The past month",
            DateFilter.THIS_YEAR: f"Throughout {year}",
            DateFilter.OLDER: f"{year - 1} and earlier",
        }[self]

    def bounds(self, now: datetime) -> tuple[Optional[datetime], Optional[datetime]]:
        """Return (lower inclusive, upper exclusive) creation-date bounds."""
        start_of_year = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        if self is DateFilter.LAST_SEVEN_DAYS:
            return now - timedelta(days=7), None
        if self is DateFilter.LAST_THIRTY_DAYS:
            return now - timedelta(days=30), None
        if self is DateFilter.THIS_YEAR:
            return start_of_year, None
        if self is DateFilter.OLDER:
            return None, start_of_year
        return None, None


class MediaFilter(str, Enum):
    ALL = "all"
    PHOTOS_ONLY = "photos_only"
    VIDEOS_ONLY = "videos_only"

    @property
    def label(self) -> str:
        return {
            MediaFilter.ALL: "Everything",
            MediaFilter.PHOTOS_ONLY: "Photos only",
            MediaFilter.VIDEOS_ONLY: "Videos only",
        }[self]

    @property
    def hint(self) -> str:
        return {
            MediaFilter.ALL: "Photos and videos",
            MediaFilter.PHOTOS_ONLY: "Show only photos",
            MediaFilter.VIDEOS_ONLY: "Show only videos",
        }[self]

    @property
    def media_type(self) -> Optional[MediaType]:
        if self is MediaFilter.PHOTOS_ONLY:
            return MediaType.PHOTO
        if self is MediaFilter.VIDEOS_ONLY:
            return MediaType.VIDEO
        return None


class Album(BaseModel):
    id: str
    title: str
    asset_count: int = 0


ALL_ALBUM_ID = "all"
ALL_ALBUM = Album(id=ALL_ALBUM_ID, title="All photos")


class FilterState(BaseModel):
    album_id: str = ALL_ALBUM_ID
    date_filter: DateFilter = DateFilter.ALL
    media_filter: MediaFilter = MediaFilter.ALL
    include_videos: bool = False
    randomize: bool = False

    @property
    def album_scope(self) -> Optional[str]:
        """Album id to scope a fetch to, or None for the whole library."""
        return None if self.album_id == ALL_ALBUM_ID else self.album_id

    def allowed_media_types(self) -> set[MediaType]:
        media_type = self.media_filter.media_type
        if media_type is not None:
            return {media_type}
        if self.include_videos:
            return {MediaType.PHOTO, MediaType.VIDEO}
        return {MediaType.PHOTO}
