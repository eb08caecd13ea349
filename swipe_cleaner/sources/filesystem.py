"""Local directory media library."""

import asyncio
import logging
import os
import random
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from ..models.common import Album, FilterState, MediaItem, MediaType
from ..models.session import AuthorizationStatus
from ..services.date_filter import apply_filters
from ..utils.permissions import check_path_readable, check_path_writable
from .base import BaseMediaSource, DeleteFailed
from .registry import register_source

logger = logging.getLogger(__name__)

PHOTO_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".heif",
    ".tif", ".tiff", ".bmp", ".dng",
}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".avi", ".mkv", ".webm"}


def media_type_for(path: Path) -> Optional[MediaType]:
    ext = path.suffix.lower()
    if ext in PHOTO_EXTENSIONS:
        return MediaType.PHOTO
    if ext in VIDEO_EXTENSIONS:
        return MediaType.VIDEO
    return None


@register_source
class FilesystemMediaSource(BaseMediaSource):
    source_id = "filesystem"
    name = "Local folder"
    description = "Photos and videos under a local directory; deletes move files to a trash folder"

    def __init__(self, library_dir: Path, trash_dir: Path):
        self.library_dir = Path(library_dir)
        self.trash_dir = Path(trash_dir)

    @classmethod
    def from_settings(cls, settings) -> "FilesystemMediaSource":
        return cls(settings.library_dir, settings.resolved_trash_dir)

    def current_authorization_status(self) -> AuthorizationStatus:
        if not self.library_dir.exists():
            return AuthorizationStatus.NOT_DETERMINED
        if not check_path_readable(self.library_dir):
            return AuthorizationStatus.DENIED
        if not check_path_writable(self.library_dir):
            return AuthorizationStatus.LIMITED
        return AuthorizationStatus.AUTHORIZED

    async def request_authorization(self) -> AuthorizationStatus:
        if not self.library_dir.exists():
            try:
                self.library_dir.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created library directory {self.library_dir}")
            except OSError as e:
                logger.warning(f"Cannot create library directory {self.library_dir}: {e}")
                return AuthorizationStatus.DENIED
        return self.current_authorization_status()

    async def fetch(self, filters: FilterState) -> list[MediaItem]:
        scope = self._scope_dir(filters.album_scope)
        if scope is None:
            return []
        items = await asyncio.to_thread(self._walk, scope)
        matched = apply_filters(items, filters)
        if filters.randomize:
            random.shuffle(matched)
        logger.debug(f"Fetched {len(items)} media files from {scope}, {len(matched)} match filters")
        return matched

    async def fetch_albums(self) -> list[Album]:
        return await asyncio.to_thread(self._list_albums)

    async def delete(self, items: Iterable[MediaItem]) -> None:
        batch = list(items)
        if not batch:
            return
        await asyncio.to_thread(self._move_to_trash, batch)

    async def read_bytes(self, item: MediaItem) -> Optional[bytes]:
        try:
            p = Path(item.access_path)
            if p.exists() and p.is_file():
                return p.read_bytes()
        except (PermissionError, OSError):
            pass
        return None

    def _scope_dir(self, album_id: Optional[str]) -> Optional[Path]:
        if album_id is None:
            return self.library_dir
        candidate = self.library_dir / album_id
        if candidate.parent != self.library_dir or not candidate.is_dir():
            return None
        return candidate

    def _walk(self, root: Path) -> list[MediaItem]:
        items = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            for fname in filenames:
                if fname.startswith("."):
                    continue
                item = self._make_item(Path(dirpath) / fname)
                if item:
                    items.append(item)
        return items

    def _make_item(self, path: Path) -> Optional[MediaItem]:
        media_type = media_type_for(path)
        if media_type is None:
            return None
        try:
            stat = path.stat()
        except OSError:
            return None

        try:
            created = datetime.fromtimestamp(stat.st_birthtime, tz=timezone.utc)
        except AttributeError:
            created = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

        return MediaItem(
            id=path.relative_to(self.library_dir).as_posix(),
            media_type=media_type,
            creation_date=created,
            filename=path.name,
            size=stat.st_size,
            access_path=str(path),
        )

    def _list_albums(self) -> list[Album]:
        if not self.library_dir.is_dir():
            return []
        albums = []
        for entry in self.library_dir.iterdir():
            if not entry.is_dir() or entry.name.startswith("."):
                continue
            count = len(self._walk(entry))
            if count == 0:
                continue
            albums.append(Album(id=entry.name, title=entry.name, asset_count=count))
        return albums

    def _move_to_trash(self, batch: list[MediaItem]) -> None:
        """Move every file into the trash folder, restoring all on any failure."""
        moved: list[tuple[Path, Path]] = []
        try:
            for item in batch:
                source = Path(item.access_path)
                if not source.is_file():
                    raise DeleteFailed(f"File not found: {item.id}")
                dest = self._unique_path(self.trash_dir / item.id)
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(source), str(dest))
                moved.append((source, dest))
        except DeleteFailed:
            self._restore(moved)
            raise
        except PermissionError as e:
            self._restore(moved)
            raise DeleteFailed(f"Permission denied: {e}") from e
        except OSError as e:
            self._restore(moved)
            raise DeleteFailed(f"OS error: {e}") from e
        logger.info(f"Moved {len(moved)} files to {self.trash_dir}")

    def _restore(self, moved: list[tuple[Path, Path]]) -> None:
        for source, dest in reversed(moved):
            try:
                shutil.move(str(dest), str(source))
            except OSError as e:
                logger.error(f"Could not restore {dest} to {source}: {e}")

    def _unique_path(self, path: Path) -> Path:
        """If path exists, add a numeric suffix."""
        if not path.exists():
            return path
        stem = path.stem
        suffix = path.suffix
        parent = path.parent
        counter = 1
        while True:
            new_path = parent / f"{stem}_{counter}{suffix}"
            if not new_path.exists():
                return new_path
            counter += 1
