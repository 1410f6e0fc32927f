# backend/receiving/domain/barcode.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import NoMatchError, ValidationError
from .quantities import QuantityReconciler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    line_id: str
    product_ref: str
    received_qty: int


class BarcodeMatcher:
    """Scanned code -> +1 received on the matching line (SKU or barcode)."""

    def __init__(self, reconciler: QuantityReconciler):
        self.reconciler = reconciler

    def scan(self, code: str) -> ScanResult:
        # every successful scan counts; repeated codes are not suppressed
        if not isinstance(code, str) or not code.strip():
            raise ValidationError("Scanned code is empty")
        code = code.strip()
        try:
            ln = self.reconciler.increment_from_scan(code)
        except NoMatchError:
            logger.warning("scan matched no line (receipt=%s, code=%s)", self.reconciler.receipt.id, code)
            raise
        pl = self.reconciler.plan_line(ln.plan_line_id)
        return ScanResult(line_id=ln.plan_line_id, product_ref=pl.product_ref, received_qty=ln.received_qty)
