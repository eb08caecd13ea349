"""In-memory working set of not-yet-reviewed items."""

from collections import deque
from typing import Iterable, Optional

from ..models.common import MediaItem


class AssetQueue:
    """FIFO of items waiting for a decision, plus the item on screen.

    ``current`` is the item being decided on and is no longer part of the
    queue. ``preview`` is the new front, exposed so callers can pre-cache it.
    """

    def __init__(self):
        self._items: deque[MediaItem] = deque()
        self.current: Optional[MediaItem] = None
        self.preview: Optional[MediaItem] = None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __contains__(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self._items)

    def ids(self) -> set[str]:
        return {item.id for item in self._items}

    def replace(self, items: Iterable[MediaItem]) -> None:
        """Swap the contents wholesale; current/preview are left to advance()."""
        self._items = deque(items)
        self._refresh_preview()

    def clear(self) -> None:
        self._items.clear()
        self.current = None
        self.preview = None

    def advance(self) -> Optional[MediaItem]:
        """Pop the front item into ``current``; both slots empty when drained."""
        if not self._items:
            self.current = None
            self.preview = None
            return None
        self.current = self._items.popleft()
        self._refresh_preview()
        return self.current

    def return_to_back(self, item: MediaItem) -> None:
        self._items.append(item)
        self._refresh_preview()

    def return_to_front(self, items: Iterable[MediaItem]) -> None:
        """Prepend items in their original order, skipping ids already queued.

        If nothing is on screen the first returned item becomes current.
        """
        present = self.ids()
        if self.current is not None:
            present.add(self.current.id)
        fresh = []
        for item in items:
            if item.id not in present:
                present.add(item.id)
                fresh.append(item)
        self._items.extendleft(reversed(fresh))
        if self.current is None:
            self.advance()
        else:
            self._refresh_preview()

    def remove(self, ids: Iterable[str]) -> None:
        """Drop items by id; advances if the current item is one of them."""
        gone = set(ids)
        self._items = deque(item for item in self._items if item.id not in gone)
        if self.current is not None and self.current.id in gone:
            self.advance()
        else:
            self._refresh_preview()

    def _refresh_preview(self) -> None:
        self.preview = self._items[0] if self._items else None
