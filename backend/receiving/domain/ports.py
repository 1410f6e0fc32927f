"""Collaborator interfaces the workflow depends on.

The workflow never talks to a database or a bucket directly; it is handed a
``ReceiptStore`` and a ``PhotoStorage`` at construction time. Implementations
live in ``receiving.services`` (SQLAlchemy, local filesystem, in-memory).

Implementations must raise ``TransportError`` for infrastructure failures and
``NotFoundError`` / ``ConcurrencyError`` for the documented conditions; any
other exception type is a bug in the adapter.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .types import Location, Photo, Receipt, ReceiptEvent, ReceiptLine


class ReceiptStore(ABC):
    """Persistence collaborator for receipts and their children."""

    @abstractmethod
    def load_receipt(self, receipt_id: str) -> Receipt:
        """Return the full aggregate (plan lines, lines, slots, live photos).

        Raises NotFoundError if the receipt does not exist.
        """

    @abstractmethod
    def save_lines(self, receipt_id: str, lines: Sequence[ReceiptLine], expected_version: int,
                   actor: Optional[str] = None) -> int:
        """Upsert every line keyed by plan line id; return the new receipt version.

        Raises ConcurrencyError when the stored version differs from
        ``expected_version``.
        """

    @abstractmethod
    def update_status(self, receipt_id: str, status: str, expected_version: int,
                      has_issue: bool = False, actor: Optional[str] = None) -> int:
        """Compare-and-swap the receipt status; return the new version."""

    @abstractmethod
    def save_photo(self, receipt_id: str, photo: Photo) -> None:
        pass

    @abstractmethod
    def delete_photo(self, receipt_id: str, photo_id: str) -> None:
        """Soft-delete a photo record."""

    @abstractmethod
    def record_event(self, event: ReceiptEvent) -> None:
        pass

    @abstractmethod
    def list_locations(self, receipt_id: str) -> List[Location]:
        """Active put-away locations for the receipt's warehouse."""


class PhotoStorage(ABC):
    """Storage collaborator for photo bytes."""

    @abstractmethod
    def put(self, org_id: str, receipt_id: str, slot_id: str, data: bytes,
            mime_type: str, source: str) -> str:
        """Store the bytes and return an opaque storage path."""

    @abstractmethod
    def url(self, storage_path: str) -> str:
        """Displayable URL for a stored photo."""

    @abstractmethod
    def delete(self, storage_path: str) -> None:
        """Remove stored bytes; an unknown path is not an error."""
