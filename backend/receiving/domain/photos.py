# backend/receiving/domain/photos.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .constants import (
    DEFAULT_DETAIL_MAX_PHOTOS,
    DEFAULT_SLOT_TEMPLATE,
    DETAIL_SLOT_KEYS,
    PHOTO_SOURCES,
)
from .errors import NotFoundError, ReceivingError, SlotFullError, TransportError, ValidationError
from .ports import PhotoStorage, ReceiptStore
from .types import Photo, PhotoSlot, Receipt

logger = logging.getLogger(__name__)


def slot_capacity(key: str, min_photos: int, detail_max: int = DEFAULT_DETAIL_MAX_PHOTOS) -> int:
    """
    Capacity policy:
    - detail slots (box exterior, label close-up, unboxed) -> detail_max
    - everything else caps at its own minimum (single-shot for min=1)
    """
    required = max(1, min_photos)
    if key in DETAIL_SLOT_KEYS:
        return max(required, detail_max)
    return required


def build_default_slots(detail_max: int = DEFAULT_DETAIL_MAX_PHOTOS) -> List[PhotoSlot]:
    slots = []
    for idx, (key, title, step, min_photos) in enumerate(DEFAULT_SLOT_TEMPLATE):
        slots.append(
            PhotoSlot(
                id=uuid.uuid4().hex,
                key=key,
                title=title,
                step=step,
                min_photos=min_photos,
                max_photos=slot_capacity(key, min_photos, detail_max),
                sort_order=idx,
            )
        )
    return slots


@dataclass(frozen=True)
class SlotStatus:
    slot_id: str
    uploaded_count: int
    required: int
    max_photos: int
    ok: bool


class PhotoEvidenceTracker:
    """Counts and capacity of photo evidence per slot of one receipt."""

    def __init__(self, receipt: Receipt, store: ReceiptStore, storage: PhotoStorage):
        self.receipt = receipt
        self.store = store
        self.storage = storage

    # ---- reads ----
    @property
    def slots(self) -> List[PhotoSlot]:
        return sorted(self.receipt.slots, key=lambda s: (s.step, s.sort_order))

    def slot(self, slot_id: str) -> PhotoSlot:
        for s in self.receipt.slots:
            if s.id == slot_id:
                return s
        raise NotFoundError(f"Photo slot {slot_id} not found on receipt {self.receipt.id}")

    def slots_for_step(self, step: int) -> List[PhotoSlot]:
        return [s for s in self.slots if s.step == step]

    def slot_status(self, slot_id: str) -> SlotStatus:
        s = self.slot(slot_id)
        return SlotStatus(
            slot_id=s.id,
            uploaded_count=s.uploaded_count,
            required=s.required,
            max_photos=s.max_photos,
            ok=s.ok,
        )

    def step_complete(self, step: int) -> bool:
        # a step without slots has nothing to prove
        return all(s.ok for s in self.slots_for_step(step))

    def incomplete_slots(self, steps: Optional[Iterable[int]] = None) -> List[PhotoSlot]:
        wanted = set(steps) if steps is not None else None
        return [s for s in self.slots if not s.ok and (wanted is None or s.step in wanted)]

    def photos(self, slot_id: Optional[str] = None) -> List[Photo]:
        if slot_id is not None:
            self.slot(slot_id)
        return [p for p in self.receipt.photos if slot_id is None or p.slot_id == slot_id]

    def photo(self, photo_id: str) -> Photo:
        for p in self.receipt.photos:
            if p.id == photo_id:
                return p
        raise NotFoundError(f"Photo {photo_id} not found on receipt {self.receipt.id}")

    # ---- writes ----
    def upload_photo(
        self,
        slot_id: str,
        source: str,
        data: bytes = b"",
        mime_type: str = "image/jpeg",
        actor: Optional[str] = None,
    ) -> Photo:
        """
        Store the bytes, record the photo, bump the slot count.
        Order of checks: finalized -> unknown slot -> source tag -> capacity.
        Nothing changes locally unless both collaborators succeed.
        """
        self.receipt.ensure_mutable()
        s = self.slot(slot_id)
        if source not in PHOTO_SOURCES:
            raise ValidationError(f"source must be one of {sorted(PHOTO_SOURCES)}, got {source!r}")
        if s.is_full:
            logger.warning("upload rejected, slot full (receipt=%s, slot=%s, max=%s)",
                           self.receipt.id, s.key, s.max_photos)
            raise SlotFullError(s.key, s.max_photos)

        path = self.storage.put(self.receipt.org_id, self.receipt.id, s.id, data, mime_type, source)
        photo = Photo(
            id=uuid.uuid4().hex,
            slot_id=s.id,
            storage_path=path,
            source=source,
            mime_type=mime_type,
            uploaded_at=datetime.now(timezone.utc),
            uploaded_by=actor,
        )
        try:
            self.store.save_photo(self.receipt.id, photo)
        except ReceivingError:
            self._discard(path)
            raise

        self.receipt.photos.append(photo)
        s.uploaded_count += 1
        logger.info("photo uploaded (receipt=%s, slot=%s, %s/%s)",
                    self.receipt.id, s.key, s.uploaded_count, s.max_photos)
        return photo

    def _discard(self, storage_path: str) -> None:
        # bytes with no photo record behind them; failure here only leaks storage
        try:
            self.storage.delete(storage_path)
        except TransportError:
            logger.exception("orphaned photo bytes left at %s (receipt=%s)", storage_path, self.receipt.id)

    def delete_photo(self, photo_id: str) -> Photo:
        self.receipt.ensure_mutable()
        photo = self.photo(photo_id)
        s = self.slot(photo.slot_id)

        self.store.delete_photo(self.receipt.id, photo_id)

        self.receipt.photos.remove(photo)
        s.uploaded_count = max(0, s.uploaded_count - 1)
        logger.info("photo deleted (receipt=%s, slot=%s, %s/%s)",
                    self.receipt.id, s.key, s.uploaded_count, s.max_photos)
        return photo

    def photo_url(self, photo_id: str) -> str:
        return self.storage.url(self.photo(photo_id).storage_path)
