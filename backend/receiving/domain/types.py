# backend/receiving/domain/types.py
"""Typed records of the receiving workflow.

These are the only shapes that cross component boundaries. Stores map their
own rows (ORM models, dicts) into these and back; column names never leak
further in.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .constants import FINALIZED_STATUSES, STATUS_DRAFT
from .errors import FinalizedReceiptError


@dataclass(frozen=True)
class PlanLine:
    """Expected quantity for one product; read-only to the workflow."""

    id: str
    product_ref: str
    expected_qty: int
    sku: Optional[str] = None
    barcode: Optional[str] = None
    name: Optional[str] = None


@dataclass
class ReceiptLine:
    plan_line_id: str
    received_qty: int = 0
    damaged_qty: int = 0
    missing_qty: int = 0
    other_qty: int = 0
    location_id: Optional[str] = None
    id: Optional[str] = None  # store id, None until first save

    @property
    def total(self) -> int:
        return self.received_qty + self.damaged_qty + self.missing_qty + self.other_qty

    def quantities(self) -> "LineQuantities":
        return LineQuantities(self.received_qty, self.damaged_qty, self.missing_qty, self.other_qty)


@dataclass(frozen=True)
class LineQuantities:
    received: int = 0
    damaged: int = 0
    missing: int = 0
    other: int = 0


@dataclass
class PhotoSlot:
    id: str
    key: str
    title: str
    step: int
    min_photos: int = 1
    max_photos: int = 1
    uploaded_count: int = 0
    sort_order: int = 0

    @property
    def required(self) -> int:
        return max(1, self.min_photos)

    @property
    def ok(self) -> bool:
        return self.uploaded_count >= self.required

    @property
    def is_full(self) -> bool:
        return self.uploaded_count >= self.max_photos


@dataclass(frozen=True)
class Photo:
    id: str
    slot_id: str
    storage_path: str
    source: str
    uploaded_at: datetime
    mime_type: Optional[str] = None
    uploaded_by: Optional[str] = None


@dataclass(frozen=True)
class Location:
    id: str
    code: str
    type: str


@dataclass(frozen=True)
class ReceiptEvent:
    receipt_id: str
    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    actor: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Receipt:
    """Aggregate for one inbound shipment under verification."""

    id: str
    org_id: str
    client_ref: str
    receipt_no: str = ""
    status: str = STATUS_DRAFT
    version: int = 0
    has_issue: bool = False
    confirmed_at: Optional[datetime] = None
    confirmed_by: Optional[str] = None
    plan_lines: List[PlanLine] = field(default_factory=list)
    lines: List[ReceiptLine] = field(default_factory=list)
    slots: List[PhotoSlot] = field(default_factory=list)
    photos: List[Photo] = field(default_factory=list)

    @property
    def is_finalized(self) -> bool:
        return self.status in FINALIZED_STATUSES

    def ensure_mutable(self) -> None:
        if self.is_finalized:
            raise FinalizedReceiptError(self.id, self.status)
