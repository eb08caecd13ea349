"""Triage session lifecycle: decisions, filters, authorization and reloads."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..models.common import ALL_ALBUM, ALL_ALBUM_ID, Album, DateFilter, FilterState, MediaFilter, MediaItem
from ..models.session import (
    AuthorizationState,
    CommitOutcome,
    CommitResult,
    SessionStats,
    TriageState,
)
from ..sources.base import BaseMediaSource
from .asset_queue import AssetQueue
from .delete_batcher import DEFAULT_BATCH_THRESHOLD, DEFAULT_DELETE_DELAY, DeleteBatcher
from .processed_store import ProcessedStore

logger = logging.getLogger(__name__)

DEFAULT_NOTICE_DISMISS = 3.5

StateListener = Callable[[TriageState], Awaitable[None]]


class UnknownAlbumError(LookupError):
    pass


class TriageManager:
    def __init__(
        self,
        source: BaseMediaSource,
        store: ProcessedStore,
        delete_delay: float = DEFAULT_DELETE_DELAY,
        batch_threshold: int = DEFAULT_BATCH_THRESHOLD,
        notice_dismiss: float = DEFAULT_NOTICE_DISMISS,
    ):
        self.source = source
        self.store = store
        self.notice_dismiss = notice_dismiss
        self.queue = AssetQueue()
        self.stats = SessionStats()
        self.batcher = DeleteBatcher(
            source,
            self.queue,
            self.stats,
            delay=delete_delay,
            threshold=batch_threshold,
            on_result=self._on_commit_result,
        )
        self.authorization = AuthorizationState.IDLE
        self.filters = FilterState()
        self.albums: list[Album] = [ALL_ALBUM]
        self.is_loading = False
        self.error_message: Optional[str] = None
        self.notice_message: Optional[str] = None
        self._bootstrapped = False
        self._notice_task: Optional[asyncio.Task] = None
        self._listeners: list[StateListener] = []

    # Lifecycle

    async def bootstrap(self) -> None:
        if self._bootstrapped:
            return
        self._bootstrapped = True
        self.store.load_if_needed()
        await self.ensure_authorization()

    async def close(self) -> None:
        self._cancel_notice_dismiss()
        await self.batcher.close()

    def add_state_listener(self, callback: StateListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_state_listener(self, callback: StateListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # Decisions

    @property
    def current(self) -> Optional[MediaItem]:
        return self.queue.current

    @property
    def preview(self) -> Optional[MediaItem]:
        return self.queue.preview

    async def keep_current(self) -> Optional[MediaItem]:
        item = self.queue.current
        if item is None:
            return None
        self.batcher.batch.release(item.id)
        self.store.mark_processed(item.id)
        self.stats.kept += 1
        self._advance()
        await self._notify()
        return item

    async def delete_current(self) -> Optional[MediaItem]:
        item = self.queue.current
        if item is None:
            return None
        self.batcher.batch.release(item.id)
        self.batcher.enqueue(item)
        self.store.mark_processed(item.id)
        self._advance()
        await self._notify()
        return item

    async def skip_current(self) -> Optional[MediaItem]:
        item = self.queue.current
        if item is None:
            return None
        self.batcher.batch.release(item.id)
        self.stats.skipped += 1
        self.store.mark_processed(item.id)
        self.queue.return_to_back(item)
        self._advance()
        await self._notify()
        return item

    async def reset_stats(self) -> None:
        self._reset_stats()
        await self._notify()

    async def flush_pending_deletes_if_needed(self) -> Optional[CommitResult]:
        """Commit queued deletes right away, e.g. when the client goes to background."""
        if not self.batcher.pending_count:
            return None
        return await self.batcher.flush()

    # Filters

    async def reload_library(self, reset_stats: bool = False) -> None:
        await self._reload(reset_stats)

    async def select_album(self, album_id: str) -> None:
        if album_id == self.filters.album_id:
            return
        if album_id not in {album.id for album in self.albums}:
            raise UnknownAlbumError(album_id)
        await self._update_filters(album_id=album_id)

    async def set_date_filter(self, date_filter: DateFilter) -> None:
        if date_filter != self.filters.date_filter:
            await self._update_filters(date_filter=date_filter)

    async def set_media_filter(self, media_filter: MediaFilter) -> None:
        if media_filter != self.filters.media_filter:
            await self._update_filters(media_filter=media_filter)

    async def set_include_videos(self, include: bool) -> None:
        if include != self.filters.include_videos:
            await self._update_filters(include_videos=include)

    async def set_randomize(self, randomize: bool) -> None:
        if randomize != self.filters.randomize:
            await self._update_filters(randomize=randomize)

    async def refresh_albums(self) -> list[Album]:
        try:
            fetched = await self.source.fetch_albums()
        except Exception as e:
            logger.warning(f"Could not list albums: {e}")
            fetched = []
        fetched.sort(key=lambda album: album.title.lower())
        all_entry = ALL_ALBUM.model_copy(update={"asset_count": len(self.queue)})
        self.albums = [all_entry] + [album for album in fetched if album.id != ALL_ALBUM_ID]
        if self.filters.album_id not in {album.id for album in self.albums}:
            self.filters = self.filters.model_copy(update={"album_id": ALL_ALBUM_ID})
        return self.albums

    # Authorization

    async def refresh_authorization_status(self) -> None:
        await self.ensure_authorization(request_if_needed=False)

    async def ensure_authorization(self, request_if_needed: bool = True) -> None:
        previous = self.authorization
        status = self.source.current_authorization_status()
        self.authorization = AuthorizationState.from_status(status)

        if request_if_needed and not status.is_authorized:
            self.authorization = AuthorizationState.REQUESTING
            await self._notify()
            status = await self.source.request_authorization()
            self.authorization = AuthorizationState.from_status(status)

        if previous != self.authorization:
            logger.info(f"Authorization {previous.value} -> {self.authorization.value}")

        if self.authorization.is_authorized:
            should_reset = not previous.is_authorized
            if should_reset or not self.queue:
                await self._reload(should_reset)
                return
        else:
            self.queue.clear()
            self.batcher.discard()
        await self._notify()

    # Messages

    async def clear_error(self) -> None:
        self.error_message = None
        await self._notify()

    async def clear_notice(self) -> None:
        self._cancel_notice_dismiss()
        self.notice_message = None
        await self._notify()

    # State

    def find_item(self, item_id: str) -> Optional[MediaItem]:
        if self.queue.current and self.queue.current.id == item_id:
            return self.queue.current
        return next((item for item in self.queue if item.id == item_id), None)

    def snapshot(self) -> TriageState:
        album = next((a for a in self.albums if a.id == self.filters.album_id), ALL_ALBUM)
        return TriageState(
            authorization=self.authorization,
            current=self.queue.current,
            preview=self.queue.preview,
            is_loading=self.is_loading,
            stats=self.stats.model_copy(),
            pending_delete_count=self.batcher.pending_count,
            batch_state=self.batcher.state,
            filters=self.filters.model_copy(),
            albums=list(self.albums),
            album_title=album.title,
            date_filter_title=self.filters.date_filter.label,
            date_filter_hint=self.filters.date_filter.hint(),
            media_filter_title=self.filters.media_filter.label,
            media_filter_hint=self.filters.media_filter.hint,
            queue_length=len(self.queue),
            error_message=self.error_message,
            notice_message=self.notice_message,
        )

    # Internals

    def _advance(self) -> None:
        if self.queue.advance() is None and self.stats.processed > 0:
            # Drained deck closes the session
            self._reset_stats()

    def _reset_stats(self) -> None:
        self.stats.reset()
        self.batcher.reset_optimistic()

    async def _update_filters(self, **changes) -> None:
        self.filters = self.filters.model_copy(update=changes)
        await self._reload(reset_stats=False)

    async def _reload(self, reset_stats: bool) -> None:
        if not self.authorization.is_authorized:
            return

        await self.batcher.flush()

        self.is_loading = True
        await self._notify()
        try:
            fetched = await self.source.fetch(self.filters)
        except Exception as e:
            logger.exception("Fetching the library failed")
            self.queue.clear()
            self.error_message = f"Could not load the library: {e}"
            self.is_loading = False
            await self._notify()
            return

        self.store.load_if_needed()
        excluded = self.store.ids | self.batcher.batch.excluded_ids()
        fetched_ids = {item.id for item in fetched}
        held = [item for item in self.batcher.batch.held if item.id in fetched_ids]
        fresh = [item for item in fetched if item.id not in excluded]
        logger.info(f"Loaded {len(fetched)} items, {len(fresh)} unreviewed, {len(held)} returned after failed deletes")

        self.queue.replace(held + fresh)
        self._advance()

        if reset_stats:
            self._reset_stats()

        self.is_loading = False
        await self.refresh_albums()
        await self._notify()

    async def _on_commit_result(self, result: CommitResult) -> None:
        if result.outcome is CommitOutcome.CANCELLED:
            self._present_notice(result.message)
        elif result.outcome is CommitOutcome.FAILED:
            self.error_message = result.message
        await self._notify()

    def _present_notice(self, message: str) -> None:
        self._cancel_notice_dismiss()
        self.notice_message = message
        self._notice_task = asyncio.get_running_loop().create_task(self._dismiss_notice_later())

    async def _dismiss_notice_later(self) -> None:
        await asyncio.sleep(self.notice_dismiss)
        self._notice_task = None
        self.notice_message = None
        await self._notify()

    def _cancel_notice_dismiss(self) -> None:
        if self._notice_task is not None:
            self._notice_task.cancel()
            self._notice_task = None

    async def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.snapshot()
        for cb in list(self._listeners):
            try:
                await cb(state)
            except Exception as e:
                logger.warning(f"State listener failed: {e}")
