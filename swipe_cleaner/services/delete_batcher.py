"""Pending-delete batching, commit and rollback."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..models.common import MediaItem
from ..models.session import BatchState, CommitOutcome, CommitResult, SessionStats
from ..sources.base import BaseMediaSource, DeleteFailed, UserCancelledDelete
from .asset_queue import AssetQueue

logger = logging.getLogger(__name__)

DEFAULT_DELETE_DELAY = 3.5
DEFAULT_BATCH_THRESHOLD = 15

CANCELLED_NOTICE = "Deletion cancelled. Your photos are safe."
UNKNOWN_FAILURE = "Deletion failed for an unknown reason."


class PendingDeleteBatch:
    """Delete decisions not yet confirmed by the media source.

    Three groups of ids are tracked:

    - queued: waiting for the next commit, in decision order
    - in flight: handed to the source by a commit that has not returned
    - held: returned to the user after a failed commit; retried ahead of
      the queued items unless the user decides on them again

    All three stay excluded from queue rebuilds.
    """

    def __init__(self):
        self._items: list[MediaItem] = []
        self._pending_ids: set[str] = set()
        self._held: dict[str, MediaItem] = {}

    def __len__(self) -> int:
        return len(self._items) + len(self._held)

    def __bool__(self) -> bool:
        return bool(self._items or self._held)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._pending_ids

    @property
    def items(self) -> list[MediaItem]:
        return list(self._items)

    @property
    def held(self) -> list[MediaItem]:
        return list(self._held.values())

    def queued_ids(self) -> set[str]:
        return {item.id for item in self._items}

    def excluded_ids(self) -> set[str]:
        return self._pending_ids | set(self._held)

    def add(self, item: MediaItem) -> bool:
        if item.id in self._pending_ids:
            return False
        self._held.pop(item.id, None)
        self._items.append(item)
        self._pending_ids.add(item.id)
        return True

    @property
    def queued_count(self) -> int:
        return len(self._items)

    def take_snapshot(self) -> list[MediaItem]:
        """Empty held and queued items, held first; the ids stay pending until confirm/roll_back."""
        snapshot = list(self._held.values()) + self._items
        self._pending_ids.update(self._held)
        self._held = {}
        self._items = []
        return snapshot

    def confirm(self, items: list[MediaItem]) -> None:
        for item in items:
            self._pending_ids.discard(item.id)

    def roll_back(self, items: list[MediaItem]) -> None:
        for item in items:
            self._pending_ids.discard(item.id)
            self._held[item.id] = item

    def release(self, item_id: str) -> bool:
        """Drop a held item once the user has decided on it again."""
        return self._held.pop(item_id, None) is not None

    def discard(self) -> None:
        self._items = []
        self._pending_ids.clear()
        self._held.clear()


class DeleteBatcher:
    """
    Accumulates delete decisions and commits them to the media source.

    A commit fires when the debounce delay elapses after the last enqueue,
    when the batch reaches the size threshold, or when flush() is called.
    At most one commit is in flight. Commit outcomes are reconciled against
    the asset queue and the session statistics; failures never propagate
    to the caller that enqueued the item.

    Must be used from a single event loop.
    """

    def __init__(
        self,
        source: BaseMediaSource,
        queue: AssetQueue,
        stats: SessionStats,
        delay: float = DEFAULT_DELETE_DELAY,
        threshold: int = DEFAULT_BATCH_THRESHOLD,
        on_result: Optional[Callable[[CommitResult], Awaitable[None]]] = None,
    ):
        self.source = source
        self.queue = queue
        self.stats = stats
        self.delay = delay
        self.threshold = threshold
        self.on_result = on_result
        self.batch = PendingDeleteBatch()
        self.optimistic_count = 0
        self._committing = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> BatchState:
        if self._committing:
            return BatchState.COMMITTING
        if self.batch or self._timer is not None:
            return BatchState.ACCUMULATING
        return BatchState.IDLE

    @property
    def pending_count(self) -> int:
        return len(self.batch)

    @property
    def is_committing(self) -> bool:
        return self._committing

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def enqueue(self, item: MediaItem) -> bool:
        """Add a delete decision. Returns False if the item is already pending."""
        if not self.batch.add(item):
            return False
        self.optimistic_count += 1
        self.stats.deleted += 1
        self._schedule()
        return True

    async def flush(self) -> Optional[CommitResult]:
        """Commit whatever is queued now, waiting out any commit in flight."""
        while self._committing:
            await self._idle.wait()
        return await self.commit()

    async def commit(self) -> Optional[CommitResult]:
        """Hand the queued batch to the source. No-op while a commit is in flight."""
        if self._committing:
            return None
        self._cancel_timer()
        if not self.batch:
            return None

        self._committing = True
        self._idle.clear()
        # Retried items were already taken off the stats when they failed
        fresh = self.batch.queued_count
        snapshot = self.batch.take_snapshot()
        ids = [item.id for item in snapshot]
        logger.info(f"Committing {len(snapshot)} deletes ({len(snapshot) - fresh} retried)")

        try:
            await self.source.delete(snapshot)
        except UserCancelledDelete:
            self._roll_back(snapshot, fresh)
            result = CommitResult(outcome=CommitOutcome.CANCELLED, item_ids=ids, message=CANCELLED_NOTICE)
        except DeleteFailed as e:
            self._roll_back(snapshot, fresh)
            result = CommitResult(outcome=CommitOutcome.FAILED, item_ids=ids, message=e.message)
        except asyncio.CancelledError:
            self._roll_back(snapshot, fresh)
            raise
        except Exception as e:
            logger.exception("Unclassified error while deleting")
            self._roll_back(snapshot, fresh)
            result = CommitResult(outcome=CommitOutcome.FAILED, item_ids=ids, message=str(e) or UNKNOWN_FAILURE)
        else:
            self.optimistic_count = max(0, self.optimistic_count - fresh)
            self.batch.confirm(snapshot)
            # Retried items are still on the deck
            self.queue.remove(ids)
            result = CommitResult(outcome=CommitOutcome.SUCCESS, item_ids=ids)
            logger.info(f"Deleted {len(snapshot)} items")
        finally:
            self._committing = False
            self._idle.set()

        if self.batch.queued_count:
            # Decisions made while the commit was in flight
            self._schedule()

        if self.on_result:
            await self.on_result(result)
        return result

    def reset_optimistic(self) -> None:
        self.optimistic_count = 0

    def discard(self) -> None:
        """Forget every pending decision without committing."""
        self._cancel_timer()
        if self.batch:
            logger.warning(f"Discarding {self.batch.queued_count} pending and {len(self.batch.held)} held deletes")
        self.batch.discard()
        self.optimistic_count = 0

    async def close(self) -> None:
        self._cancel_timer()
        # A commit in flight has already handed its files to the source
        await self._idle.wait()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _roll_back(self, snapshot: list[MediaItem], fresh: int) -> None:
        amount = min(fresh, self.optimistic_count)
        self.optimistic_count -= amount
        self.stats.deleted = max(0, self.stats.deleted - amount)
        self.batch.roll_back(snapshot)
        self.queue.return_to_front(snapshot)
        logger.warning(f"Rolled back {len(snapshot)} deletes (stats -{amount})")

    def _schedule(self) -> None:
        self._cancel_timer()
        if len(self.batch) >= self.threshold:
            self._spawn_commit()
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._spawn_commit()

    def _spawn_commit(self) -> None:
        task = asyncio.get_running_loop().create_task(self.commit())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
