# backend/receiving/domain/quantities.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .errors import NoMatchError, NotFoundError, ValidationError
from .ports import ReceiptStore
from .types import LineQuantities, Location, PlanLine, Receipt, ReceiptLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConservationResult:
    ok: bool
    delta: int  # actual - expected; negative = short, positive = over


@dataclass(frozen=True)
class LineDiscrepancy:
    line_id: str
    product_ref: str
    expected: int
    actual: int

    @property
    def delta(self) -> int:
        return self.actual - self.expected

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "product_ref": self.product_ref,
            "expected": self.expected,
            "actual": self.actual,
            "delta": self.delta,
        }


def _check_qty(name: str, value) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}")
    return value


def conservation_check(line: ReceiptLine, expected_qty: int) -> ConservationResult:
    delta = line.total - expected_qty
    return ConservationResult(ok=delta == 0, delta=delta)


class QuantityReconciler:
    """
    Per-line received/damaged/missing/other accounting for one receipt.

    Mutations are local until save_lines(); a save never checks conservation,
    only confirm does (through discrepancy_report()).
    """

    def __init__(self, receipt: Receipt, store: ReceiptStore):
        self.receipt = receipt
        self.store = store
        self._plan: Dict[str, PlanLine] = {pl.id: pl for pl in receipt.plan_lines}

        existing = {ln.plan_line_id: ln for ln in receipt.lines}
        lines: List[ReceiptLine] = []
        for pl in receipt.plan_lines:
            lines.append(existing.get(pl.id) or ReceiptLine(plan_line_id=pl.id))
        # one ReceiptLine per PlanLine, in plan order
        receipt.lines = lines

    # ---- reads ----
    @property
    def lines(self) -> List[ReceiptLine]:
        return list(self.receipt.lines)

    def line(self, line_id: str) -> ReceiptLine:
        for ln in self.receipt.lines:
            if ln.plan_line_id == line_id:
                return ln
        raise NotFoundError(f"Line {line_id} not found on receipt {self.receipt.id}")

    def plan_line(self, line_id: str) -> PlanLine:
        try:
            return self._plan[line_id]
        except KeyError:
            raise NotFoundError(f"Line {line_id} not found on receipt {self.receipt.id}")

    def conservation_check(self, line_id: str) -> ConservationResult:
        return conservation_check(self.line(line_id), self.plan_line(line_id).expected_qty)

    def discrepancy_report(self) -> List[LineDiscrepancy]:
        report = []
        for ln in self.receipt.lines:
            pl = self._plan[ln.plan_line_id]
            if not conservation_check(ln, pl.expected_qty).ok:
                report.append(
                    LineDiscrepancy(
                        line_id=ln.plan_line_id,
                        product_ref=pl.product_ref,
                        expected=pl.expected_qty,
                        actual=ln.total,
                    )
                )
        return report

    def find_line(self, code: str) -> Optional[ReceiptLine]:
        for ln in self.receipt.lines:
            pl = self._plan[ln.plan_line_id]
            if code in (pl.sku, pl.barcode):
                return ln
        return None

    # ---- writes ----
    def set_line_quantities(self, line_id: str, received: int = 0, damaged: int = 0,
                            missing: int = 0, other: int = 0) -> ReceiptLine:
        self.receipt.ensure_mutable()
        ln = self.line(line_id)
        q = LineQuantities(
            received=_check_qty("received", received),
            damaged=_check_qty("damaged", damaged),
            missing=_check_qty("missing", missing),
            other=_check_qty("other", other),
        )
        ln.received_qty = q.received
        ln.damaged_qty = q.damaged
        ln.missing_qty = q.missing
        ln.other_qty = q.other
        return ln

    def increment_from_scan(self, code: str) -> ReceiptLine:
        self.receipt.ensure_mutable()
        ln = self.find_line(code)
        if ln is None:
            raise NoMatchError(code)
        ln.received_qty += 1
        return ln

    def assign_location(self, line_id: str, location_id: Optional[str],
                        locations: Sequence[Location]) -> ReceiptLine:
        self.receipt.ensure_mutable()
        ln = self.line(line_id)
        if location_id is not None and location_id not in {loc.id for loc in locations}:
            raise NotFoundError(f"Location {location_id} is not available for receipt {self.receipt.id}")
        ln.location_id = location_id
        return ln

    def save_lines(self, actor: Optional[str] = None) -> int:
        """Checkpoint every line; discrepancies are allowed here."""
        self.receipt.ensure_mutable()
        version = self.store.save_lines(self.receipt.id, self.receipt.lines, self.receipt.version, actor=actor)
        self.receipt.version = version
        logger.info("lines saved (receipt=%s, lines=%s, version=%s)",
                    self.receipt.id, len(self.receipt.lines), version)
        return version
