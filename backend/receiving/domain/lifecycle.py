# backend/receiving/domain/lifecycle.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import (
    EVENT_CONFIRMED,
    EVENT_DISCREPANCY_FOUND,
    EVENT_PUTAWAY_READY,
    EVENT_QTY_UPDATED,
    PHOTO_STEPS,
    STATUS_CONFIRMED,
    STATUS_COUNTING,
    STATUS_PHOTO_REQUIRED,
    STATUS_PUTAWAY_READY,
    STATUS_RANK,
)
from .errors import DiscrepancyError, MissingEvidenceError, StateError, TransportError
from .photos import PhotoEvidenceTracker
from .ports import ReceiptStore
from .quantities import LineDiscrepancy, QuantityReconciler
from .types import Receipt, ReceiptEvent

logger = logging.getLogger(__name__)


class ValidationTier(str, Enum):
    PASS = "PASS"
    ACKNOWLEDGEABLE = "ACKNOWLEDGEABLE"  # may proceed with an issue marker
    BLOCKING = "BLOCKING"                # cannot proceed


@dataclass(frozen=True)
class ConfirmValidation:
    tier: ValidationTier
    missing_slots: List[str] = field(default_factory=list)
    discrepancies: List[LineDiscrepancy] = field(default_factory=list)

    def can_proceed(self, acknowledged: bool = False) -> bool:
        if self.tier is ValidationTier.PASS:
            return True
        return self.tier is ValidationTier.ACKNOWLEDGEABLE and acknowledged


@dataclass(frozen=True)
class ConfirmResult:
    status: str
    has_issue: bool
    version: int
    discrepancies: List[LineDiscrepancy] = field(default_factory=list)


class ReceiptLifecycle:
    """
    DRAFT -> PHOTO_REQUIRED -> COUNTING -> CONFIRMED -> PUTAWAY_READY

    The first three are working states; CONFIRMED and PUTAWAY_READY are
    finalized and freeze every mutator through Receipt.ensure_mutable().
    """

    def __init__(
        self,
        receipt: Receipt,
        tracker: PhotoEvidenceTracker,
        reconciler: QuantityReconciler,
        store: ReceiptStore,
        allow_acknowledged_discrepancy: bool = True,
    ):
        self.receipt = receipt
        self.tracker = tracker
        self.reconciler = reconciler
        self.store = store
        self.allow_acknowledged_discrepancy = allow_acknowledged_discrepancy

    @property
    def status(self) -> str:
        return self.receipt.status

    @property
    def is_finalized(self) -> bool:
        return self.receipt.is_finalized

    # ---- events ----
    def record_event(self, event_type: str, payload: Optional[Dict[str, Any]] = None,
                     actor: Optional[str] = None) -> None:
        """Audit trail; a failed event write is logged, never raised."""
        event = ReceiptEvent(
            receipt_id=self.receipt.id,
            event_type=event_type,
            payload=payload or {},
            actor=actor,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.store.record_event(event)
        except TransportError:
            logger.exception("failed to record %s event (receipt=%s)", event_type, self.receipt.id)

    # ---- progress ----
    def _advance(self, status: str, actor: Optional[str] = None) -> bool:
        """Forward-only progress within the working states."""
        if STATUS_RANK[status] <= STATUS_RANK[self.receipt.status]:
            return False
        version = self.store.update_status(self.receipt.id, status, self.receipt.version, actor=actor)
        logger.info("receipt %s: %s -> %s", self.receipt.id, self.receipt.status, status)
        self.receipt.status = status
        self.receipt.version = version
        return True

    def note_photo_activity(self, actor: Optional[str] = None) -> None:
        """Progress marker after a saved photo; a failed status write never undoes the upload."""
        try:
            self._advance(STATUS_PHOTO_REQUIRED, actor=actor)
        except (TransportError, StateError):
            logger.exception("failed to mark receipt %s %s", self.receipt.id, STATUS_PHOTO_REQUIRED)

    def save_lines(self, actor: Optional[str] = None) -> int:
        self.reconciler.save_lines(actor=actor)
        self._advance(STATUS_COUNTING, actor=actor)
        self.record_event(EVENT_QTY_UPDATED, {"lines_count": len(self.receipt.lines)}, actor=actor)
        return self.receipt.version

    # ---- confirm ----
    def validate(self) -> ConfirmValidation:
        missing = [s.title for s in self.tracker.incomplete_slots(PHOTO_STEPS)]
        discrepancies = self.reconciler.discrepancy_report()
        if missing:
            return ConfirmValidation(ValidationTier.BLOCKING, missing, discrepancies)
        if discrepancies:
            return ConfirmValidation(ValidationTier.ACKNOWLEDGEABLE, [], discrepancies)
        return ConfirmValidation(ValidationTier.PASS)

    def confirm(self, acknowledge_discrepancy: bool = False, actor: Optional[str] = None) -> ConfirmResult:
        """
        1) evidence   -> MissingEvidenceError, nothing written
        2) quantities -> DiscrepancyError unless acknowledged (and policy allows)
        3) save lines, then CAS status to CONFIRMED (issue marker if acknowledged)
        A failed status write leaves the receipt in its working state with lines
        saved; calling confirm() again is safe.
        """
        self.receipt.ensure_mutable()

        check = self.validate()
        if check.tier is ValidationTier.BLOCKING:
            logger.warning("confirm blocked, missing evidence (receipt=%s): %s",
                           self.receipt.id, ", ".join(check.missing_slots))
            raise MissingEvidenceError(check.missing_slots)

        if check.tier is ValidationTier.ACKNOWLEDGEABLE:
            details = [d.to_dict() for d in check.discrepancies]
            if not acknowledge_discrepancy:
                self.record_event(EVENT_DISCREPANCY_FOUND, {"details": details}, actor=actor)
                raise DiscrepancyError(check.discrepancies)
            if not self.allow_acknowledged_discrepancy:
                raise DiscrepancyError(
                    check.discrepancies,
                    "Receipts with quantity discrepancies cannot be confirmed; fix the counts first",
                )

        has_issue = bool(check.discrepancies)

        # phase 1: persist lines (idempotent)
        self.reconciler.save_lines(actor=actor)

        # phase 2: status CAS
        version = self.store.update_status(
            self.receipt.id, STATUS_CONFIRMED, self.receipt.version, has_issue=has_issue, actor=actor
        )
        self.receipt.status = STATUS_CONFIRMED
        self.receipt.version = version
        self.receipt.has_issue = has_issue
        self.receipt.confirmed_at = datetime.now(timezone.utc)
        self.receipt.confirmed_by = actor
        logger.info("receipt %s confirmed (issue=%s, version=%s)", self.receipt.id, has_issue, version)

        self.record_event(
            EVENT_CONFIRMED,
            {"has_issue": has_issue, "details": [d.to_dict() for d in check.discrepancies]},
            actor=actor,
        )
        return ConfirmResult(
            status=STATUS_CONFIRMED,
            has_issue=has_issue,
            version=version,
            discrepancies=list(check.discrepancies),
        )

    def mark_putaway_ready(self, actor: Optional[str] = None) -> str:
        if self.receipt.status == STATUS_PUTAWAY_READY:
            return self.receipt.status
        if self.receipt.status != STATUS_CONFIRMED:
            raise StateError(
                f"Receipt {self.receipt.id} is {self.receipt.status}; only a CONFIRMED receipt can become PUTAWAY_READY"
            )
        version = self.store.update_status(
            self.receipt.id, STATUS_PUTAWAY_READY, self.receipt.version,
            has_issue=self.receipt.has_issue, actor=actor,
        )
        self.receipt.status = STATUS_PUTAWAY_READY
        self.receipt.version = version
        self.record_event(EVENT_PUTAWAY_READY, {}, actor=actor)
        return self.receipt.status
