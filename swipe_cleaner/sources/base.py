"""Abstract media source interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..models.common import Album, FilterState, MediaItem
from ..models.session import AuthorizationStatus


class MediaSourceError(Exception):
    """Base class for errors raised by a media source."""


class UserCancelledDelete(MediaSourceError):
    """The user dismissed the store's delete confirmation."""

    def __init__(self, message: str = "Deletion was cancelled."):
        super().__init__(message)


class DeleteFailed(MediaSourceError):
    """The store could not remove the requested items."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BaseMediaSource(ABC):
    """All media sources implement this interface.

    Sources never hold engine state; the triage engine owns the queue and
    the pending-delete batch and only calls into a source to list or
    remove items.
    """

    source_id: str = ""
    name: str = ""
    description: str = ""

    @classmethod
    def from_settings(cls, settings) -> "BaseMediaSource":
        """Build the source from application settings."""
        raise NotImplementedError(f"{cls.__name__} cannot be configured from settings")

    @abstractmethod
    def current_authorization_status(self) -> AuthorizationStatus:
        """Report whether the library can be read (and written) right now."""
        ...

    @abstractmethod
    async def request_authorization(self) -> AuthorizationStatus:
        """Ask for access to the library and return the resolved status."""
        ...

    @abstractmethod
    async def fetch(self, filters: FilterState) -> list[MediaItem]:
        """List items matching the filters, newest first unless randomized."""
        ...

    @abstractmethod
    async def fetch_albums(self) -> list[Album]:
        """List the collections an item fetch can be scoped to."""
        ...

    @abstractmethod
    async def delete(self, items: Iterable[MediaItem]) -> None:
        """Remove all of the items or none of them.

        Raises UserCancelledDelete or DeleteFailed; any other exception is
        treated as an unclassified failure by the caller.
        """
        ...

    @abstractmethod
    async def read_bytes(self, item: MediaItem) -> Optional[bytes]:
        """Read item content for preview."""
        ...
