"""Centralized date and media-type filtering logic."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from ..models.common import DateFilter, FilterState, MediaItem


def item_matches_date_filter(
    item: MediaItem, date_filter: DateFilter, now: Optional[datetime] = None,
) -> bool:
    """Check if an item's creation date falls within the filter's bounds.

    If the item has no creation date, include it (conservative).
    """
    if date_filter is DateFilter.ALL:
        return True
    if item.creation_date is None:
        return True

    lower, upper = date_filter.bounds(_normalize(now or datetime.now(tz=timezone.utc)))
    check = _normalize(item.creation_date)

    if lower is not None and check < lower:
        return False
    if upper is not None and check >= upper:
        return False
    return True


def apply_filters(
    items: Iterable[MediaItem], filters: FilterState, now: Optional[datetime] = None,
) -> list[MediaItem]:
    """Keep items matching the media-type and date selections, newest first."""
    allowed = filters.allowed_media_types()
    matched = [
        item for item in items
        if item.media_type in allowed
        and item_matches_date_filter(item, filters.date_filter, now)
    ]
    return sort_newest_first(matched)


def sort_newest_first(items: list[MediaItem]) -> list[MediaItem]:
    """Order by creation date descending; undated items go last, then by id."""
    dated = [i for i in items if i.creation_date is not None]
    undated = [i for i in items if i.creation_date is None]
    dated.sort(key=lambda i: (_normalize(i.creation_date), i.id), reverse=True)
    undated.sort(key=lambda i: i.id)
    return dated + undated


def _normalize(dt: datetime) -> datetime:
    """Strip timezone for comparison."""
    return dt.astimezone(timezone.utc).replace(tzinfo=None) if dt.tzinfo else dt
