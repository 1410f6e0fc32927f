# backend/receiving/domain/workflow.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .barcode import BarcodeMatcher, ScanResult
from .constants import EVENT_PHOTO_DELETED, EVENT_PHOTO_UPLOADED, STEP_QUANTITY
from .lifecycle import ConfirmResult, ConfirmValidation, ReceiptLifecycle
from .photos import PhotoEvidenceTracker, SlotStatus
from .ports import PhotoStorage, ReceiptStore
from .quantities import ConservationResult, QuantityReconciler
from .steps import NavigationResult, StepGate
from .types import Location, Photo, Receipt, ReceiptLine

logger = logging.getLogger(__name__)


class ReceiptWorkflow:
    """
    One open receipt and everything that acts on it.

    Built from an injected ReceiptStore / PhotoStorage pair, so the same
    workflow runs against SQLAlchemy, a bucket, or in-memory fakes.
    """

    def __init__(
        self,
        receipt: Receipt,
        store: ReceiptStore,
        storage: PhotoStorage,
        allow_acknowledged_discrepancy: bool = True,
    ):
        self.receipt = receipt
        self.store = store
        self.storage = storage
        self.tracker = PhotoEvidenceTracker(receipt, store, storage)
        self.gate = StepGate(self.tracker)
        self.reconciler = QuantityReconciler(receipt, store)
        self.matcher = BarcodeMatcher(self.reconciler)
        self.lifecycle = ReceiptLifecycle(
            receipt,
            self.tracker,
            self.reconciler,
            store,
            allow_acknowledged_discrepancy=allow_acknowledged_discrepancy,
        )
        self._locations: Optional[List[Location]] = None

    @classmethod
    def open(cls, store: ReceiptStore, storage: PhotoStorage, receipt_id: str, **kwargs) -> "ReceiptWorkflow":
        receipt = store.load_receipt(receipt_id)
        logger.debug("opened receipt %s (status=%s, version=%s)", receipt.id, receipt.status, receipt.version)
        return cls(receipt, store, storage, **kwargs)

    # ---- photos ----
    def upload_photo(self, slot_id: str, source: str, data: bytes = b"",
                     mime_type: str = "image/jpeg", actor: Optional[str] = None) -> Photo:
        photo = self.tracker.upload_photo(slot_id, source, data=data, mime_type=mime_type, actor=actor)
        self.lifecycle.record_event(EVENT_PHOTO_UPLOADED, {"slot_id": slot_id, "photo_id": photo.id}, actor=actor)
        self.lifecycle.note_photo_activity(actor=actor)
        return photo

    def delete_photo(self, photo_id: str, actor: Optional[str] = None) -> Photo:
        photo = self.tracker.delete_photo(photo_id)
        self.lifecycle.record_event(EVENT_PHOTO_DELETED, {"slot_id": photo.slot_id, "photo_id": photo.id}, actor=actor)
        return photo

    def slot_status(self, slot_id: str) -> SlotStatus:
        return self.tracker.slot_status(slot_id)

    def photo_url(self, photo_id: str) -> str:
        return self.tracker.photo_url(photo_id)

    # ---- steps ----
    def navigate_to(self, step: int) -> NavigationResult:
        return self.gate.navigate_to(step)

    @property
    def current_step(self) -> int:
        return self.gate.current_step

    # ---- quantities (step 4) ----
    def set_line_quantities(self, line_id: str, received: int = 0, damaged: int = 0,
                            missing: int = 0, other: int = 0) -> ReceiptLine:
        self.receipt.ensure_mutable()
        self.gate.require_reachable(STEP_QUANTITY)
        return self.reconciler.set_line_quantities(line_id, received, damaged, missing, other)

    def scan(self, code: str) -> ScanResult:
        self.receipt.ensure_mutable()
        self.gate.require_reachable(STEP_QUANTITY)
        return self.matcher.scan(code)

    def conservation_check(self, line_id: str) -> ConservationResult:
        return self.reconciler.conservation_check(line_id)

    def locations(self) -> List[Location]:
        if self._locations is None:
            self._locations = self.store.list_locations(self.receipt.id)
        return self._locations

    def assign_location(self, line_id: str, location_id: Optional[str]) -> ReceiptLine:
        self.receipt.ensure_mutable()
        return self.reconciler.assign_location(line_id, location_id, self.locations())

    def save_lines(self, actor: Optional[str] = None) -> int:
        return self.lifecycle.save_lines(actor=actor)

    # ---- lifecycle ----
    def validate(self) -> ConfirmValidation:
        return self.lifecycle.validate()

    def confirm(self, acknowledge_discrepancy: bool = False, actor: Optional[str] = None) -> ConfirmResult:
        return self.lifecycle.confirm(acknowledge_discrepancy=acknowledge_discrepancy, actor=actor)

    def mark_putaway_ready(self, actor: Optional[str] = None) -> str:
        return self.lifecycle.mark_putaway_ready(actor=actor)

    # ---- view ----
    def snapshot(self) -> Dict[str, Any]:
        r = self.receipt
        plan = {pl.id: pl for pl in r.plan_lines}
        return {
            "receipt_id": r.id,
            "org_id": r.org_id,
            "client_ref": r.client_ref,
            "receipt_no": r.receipt_no,
            "status": r.status,
            "version": r.version,
            "finalized": r.is_finalized,
            "has_issue": r.has_issue,
            "current_step": self.gate.current_step,
            "max_accessible_step": self.gate.max_accessible_step(),
            "auto_advance": self.gate.auto_advance,
            "steps": {str(k): v for k, v in self.gate.states().items()},
            "slots": [
                {
                    "slot_id": s.id,
                    "key": s.key,
                    "title": s.title,
                    "step": s.step,
                    "uploaded_count": s.uploaded_count,
                    "required": s.required,
                    "max_photos": s.max_photos,
                    "ok": s.ok,
                }
                for s in self.tracker.slots
            ],
            "lines": [
                {
                    "line_id": ln.plan_line_id,
                    "product_ref": plan[ln.plan_line_id].product_ref,
                    "sku": plan[ln.plan_line_id].sku,
                    "barcode": plan[ln.plan_line_id].barcode,
                    "expected_qty": plan[ln.plan_line_id].expected_qty,
                    "received_qty": ln.received_qty,
                    "damaged_qty": ln.damaged_qty,
                    "missing_qty": ln.missing_qty,
                    "other_qty": ln.other_qty,
                    "location_id": ln.location_id,
                    "delta": ln.total - plan[ln.plan_line_id].expected_qty,
                }
                for ln in r.lines
            ],
        }
