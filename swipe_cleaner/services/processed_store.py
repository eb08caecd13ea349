"""Durable record of item ids the user already decided on."""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 12000
DEFAULT_KEY = "processedAssetIdentifiers"


class ProcessedStore:
    """
    Bounded, insertion-ordered set of processed item ids.

    The in-memory set and order log are the source of truth for the process
    lifetime; every mutation is written through to a JSON state file under
    a single named key. Oldest entries are evicted first once the limit is
    exceeded. Write failures are logged and otherwise ignored.

    Args:
        path: JSON state file, or None to keep the record in memory only.
        limit: Maximum number of ids retained.
        key: Name of the record inside the state file.
    """

    def __init__(self, path: Optional[Path] = None, limit: int = DEFAULT_LIMIT, key: str = DEFAULT_KEY):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.path = Path(path) if path else None
        self.limit = limit
        self.key = key
        self._ids: set[str] = set()
        self._order: list[str] = []
        self._loaded = False

    def __contains__(self, item_id: str) -> bool:
        return self.is_processed(item_id)

    def __len__(self) -> int:
        self.load_if_needed()
        return len(self._order)

    @property
    def ids(self) -> frozenset[str]:
        self.load_if_needed()
        return frozenset(self._ids)

    def ordered_ids(self) -> list[str]:
        self.load_if_needed()
        return list(self._order)

    def is_processed(self, item_id: str) -> bool:
        self.load_if_needed()
        return item_id in self._ids

    def mark_processed(self, item_id: str) -> bool:
        """Record a decision. Returns False when the id was already present."""
        self.load_if_needed()
        if item_id in self._ids:
            return False
        self._ids.add(item_id)
        self._order.append(item_id)
        self._trim()
        self.save()
        return True

    def load_if_needed(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        stored = self._read()
        # Dedupe while keeping first-seen order
        seen: set[str] = set()
        order = []
        for item_id in stored:
            if item_id not in seen:
                seen.add(item_id)
                order.append(item_id)
        self._order = order
        self._ids = seen
        self._trim()

    def save(self) -> None:
        """Write the order log to disk. Failures are logged, never raised."""
        if self.path is None:
            return
        data = self._read_document()
        data[self.key] = self._order
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except OSError as e:
            logger.warning(f"Could not persist processed ids to {self.path}: {e}")

    def _trim(self) -> None:
        overflow = len(self._order) - self.limit
        if overflow > 0:
            removed = self._order[:overflow]
            del self._order[:overflow]
            self._ids.difference_update(removed)

    def _read(self) -> Iterable[str]:
        stored = self._read_document().get(self.key, [])
        if not isinstance(stored, list):
            logger.warning(f"Ignoring malformed '{self.key}' record in {self.path}")
            return []
        return [str(item_id) for item_id in stored]

    def _read_document(self) -> dict:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # Corrupted state file, start fresh
            logger.warning(f"Could not load {self.path}, starting fresh: {e}")
            return {}
        return data if isinstance(data, dict) else {}
