# backend/receiving/services/memory.py
"""In-memory collaborators.

Used by the test-suite and for local demos; they keep the same contracts as
the SQLAlchemy store (version compare-and-swap, soft-deleted photos, event
log) so a workflow cannot tell them apart.
"""
from __future__ import annotations

import copy
import uuid
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from receiving.domain.constants import (
    EVENT_CREATED,
    FINALIZED_STATUSES,
    STATUS_CONFIRMED,
    STATUS_DRAFT,
)
from receiving.domain.errors import ConcurrencyError, FinalizedReceiptError, NotFoundError, TransportError
from receiving.domain.photos import build_default_slots
from receiving.domain.ports import PhotoStorage, ReceiptStore
from receiving.domain.types import Location, Photo, Receipt, ReceiptEvent, ReceiptLine


class InMemoryReceiptStore(ReceiptStore):
    def __init__(self, detail_max_photos: int = 20):
        self.detail_max_photos = detail_max_photos
        self._receipts: Dict[str, Receipt] = {}
        self._deleted_photos: Dict[str, Photo] = {}
        self._locations: Dict[str, List[Location]] = {}
        self.events: List[ReceiptEvent] = []
        # failure injection: operation name -> exception to raise once
        self.fail_next: Dict[str, Exception] = {}

    def _maybe_fail(self, op: str) -> None:
        exc = self.fail_next.pop(op, None)
        if exc is not None:
            raise exc

    def _get(self, receipt_id: str) -> Receipt:
        try:
            return self._receipts[receipt_id]
        except KeyError:
            raise NotFoundError(f"Receipt {receipt_id} not found")

    @staticmethod
    def _check_mutable(stored: Receipt) -> None:
        if stored.status in FINALIZED_STATUSES:
            raise FinalizedReceiptError(stored.id, stored.status)

    @staticmethod
    def _check_version(stored: Receipt, expected_version: int) -> None:
        if stored.version != expected_version:
            raise ConcurrencyError(stored.id, expected_version, stored.version)

    # ---- planning side ----
    def create_receipt(self, receipt: Receipt, actor: Optional[str] = None) -> Receipt:
        stored = copy.deepcopy(receipt)
        stored.status = STATUS_DRAFT
        stored.version = 0
        if not stored.slots:
            stored.slots = build_default_slots(self.detail_max_photos)
        self._receipts[stored.id] = stored
        self.events.append(ReceiptEvent(stored.id, EVENT_CREATED, {"receipt_no": stored.receipt_no}, actor))
        return self.load_receipt(stored.id)

    def add_location(self, org_id: str, location: Location) -> Location:
        self._locations.setdefault(org_id, []).append(location)
        return location

    # ---- ReceiptStore ----
    def load_receipt(self, receipt_id: str) -> Receipt:
        self._maybe_fail("load_receipt")
        # callers get their own copy, like a fresh read from a database
        return copy.deepcopy(self._get(receipt_id))

    def save_lines(self, receipt_id: str, lines: Sequence[ReceiptLine], expected_version: int,
                   actor: Optional[str] = None) -> int:
        self._maybe_fail("save_lines")
        stored = self._get(receipt_id)
        self._check_mutable(stored)
        self._check_version(stored, expected_version)

        by_plan = {ln.plan_line_id: ln for ln in stored.lines}
        for ln in lines:
            saved = replace(ln, id=by_plan[ln.plan_line_id].id if ln.plan_line_id in by_plan else uuid.uuid4().hex)
            by_plan[ln.plan_line_id] = saved
        stored.lines = list(by_plan.values())
        stored.version += 1
        return stored.version

    def update_status(self, receipt_id: str, status: str, expected_version: int,
                      has_issue: bool = False, actor: Optional[str] = None) -> int:
        self._maybe_fail("update_status")
        stored = self._get(receipt_id)
        if stored.status in FINALIZED_STATUSES and status not in FINALIZED_STATUSES:
            raise FinalizedReceiptError(receipt_id, stored.status)
        self._check_version(stored, expected_version)
        stored.status = status
        stored.has_issue = bool(has_issue)
        if status == STATUS_CONFIRMED:
            stored.confirmed_by = actor
        stored.version += 1
        return stored.version

    def save_photo(self, receipt_id: str, photo: Photo) -> None:
        self._maybe_fail("save_photo")
        stored = self._get(receipt_id)
        self._check_mutable(stored)
        for s in stored.slots:
            if s.id == photo.slot_id:
                s.uploaded_count += 1
                stored.photos.append(photo)
                return
        raise NotFoundError(f"Photo slot {photo.slot_id} not found")

    def delete_photo(self, receipt_id: str, photo_id: str) -> None:
        self._maybe_fail("delete_photo")
        stored = self._get(receipt_id)
        self._check_mutable(stored)
        for p in stored.photos:
            if p.id == photo_id:
                stored.photos.remove(p)
                self._deleted_photos[p.id] = p
                for s in stored.slots:
                    if s.id == p.slot_id:
                        s.uploaded_count = max(0, s.uploaded_count - 1)
                return
        raise NotFoundError(f"Photo {photo_id} not found")

    def record_event(self, event: ReceiptEvent) -> None:
        self._maybe_fail("record_event")
        self.events.append(event)

    def list_locations(self, receipt_id: str) -> List[Location]:
        return list(self._locations.get(self._get(receipt_id).org_id, []))

    def list_events(self, receipt_id: str) -> List[ReceiptEvent]:
        return [e for e in self.events if e.receipt_id == receipt_id]


class InMemoryPhotoStorage(PhotoStorage):
    def __init__(self, base_url: str = "memory://inbound"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, bytes] = {}
        self.fail_next: Optional[Exception] = None

    def put(self, org_id: str, receipt_id: str, slot_id: str, data: bytes,
            mime_type: str, source: str) -> str:
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc
        path = f"{org_id}/{receipt_id}/{slot_id}/{uuid.uuid4().hex}"
        self.objects[path] = bytes(data)
        return path

    def url(self, storage_path: str) -> str:
        if storage_path not in self.objects:
            raise TransportError(f"Object {storage_path} not in storage")
        return f"{self.base_url}/{storage_path}"

    def delete(self, storage_path: str) -> None:
        self.objects.pop(storage_path, None)
