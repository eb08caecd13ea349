import asyncio
import random
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pytest

from swipe_cleaner.models.common import Album, FilterState, MediaItem, MediaType
from swipe_cleaner.models.session import AuthorizationStatus
from swipe_cleaner.services.date_filter import apply_filters
from swipe_cleaner.sources.base import BaseMediaSource

BASE_DATE = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_items(*names: str, media_type: MediaType = MediaType.PHOTO) -> list[MediaItem]:
    """Items named in newest-first order."""
    return [
        MediaItem(
            id=name,
            media_type=media_type,
            creation_date=BASE_DATE - timedelta(minutes=i),
            filename=f"{name}.jpg",
        )
        for i, name in enumerate(names)
    ]


class FakeMediaSource(BaseMediaSource):
    """In-memory library whose delete outcome can be scripted per test."""

    source_id = "fake"
    name = "Fake library"

    def __init__(
        self,
        items: Iterable[MediaItem] = (),
        status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        granted: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        albums: Optional[dict[str, list[str]]] = None,
    ):
        self.items = list(items)
        self.status = status
        self.granted = granted
        self.albums = albums or {}
        self.fail_with: Optional[BaseException] = None
        self.fetch_error: Optional[Exception] = None
        self.album_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.delete_calls: list[list[str]] = []
        self.fetch_calls: list[FilterState] = []
        self.events: list[str] = []
        self.active_deletes = 0
        self.max_active_deletes = 0
        self.authorization_requests = 0

    def current_authorization_status(self) -> AuthorizationStatus:
        return self.status

    async def request_authorization(self) -> AuthorizationStatus:
        self.authorization_requests += 1
        self.status = self.granted
        return self.status

    async def fetch(self, filters: FilterState) -> list[MediaItem]:
        self.fetch_calls.append(filters)
        self.events.append("fetch")
        if self.fetch_error:
            raise self.fetch_error
        items = self.items
        if filters.album_scope is not None:
            member_ids = set(self.albums.get(filters.album_scope, []))
            items = [item for item in items if item.id in member_ids]
        matched = apply_filters(items, filters, now=BASE_DATE)
        if filters.randomize:
            random.shuffle(matched)
        return matched

    async def fetch_albums(self) -> list[Album]:
        if self.album_error:
            raise self.album_error
        return [
            Album(id=album_id, title=album_id.title(), asset_count=len(ids))
            for album_id, ids in self.albums.items()
        ]

    async def delete(self, items: Iterable[MediaItem]) -> None:
        batch = list(items)
        if not batch:
            return
        self.delete_calls.append([item.id for item in batch])
        self.events.append("delete")
        self.active_deletes += 1
        self.max_active_deletes = max(self.max_active_deletes, self.active_deletes)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if self.fail_with is not None:
                raise self.fail_with
            removed = {item.id for item in batch}
            self.items = [item for item in self.items if item.id not in removed]
        finally:
            self.active_deletes -= 1

    async def read_bytes(self, item: MediaItem) -> Optional[bytes]:
        return item.id.encode()


@pytest.fixture
def fake_source():
    return FakeMediaSource(make_items("A", "B", "C", "D", "E"))
