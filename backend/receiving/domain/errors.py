# backend/receiving/domain/errors.py
"""
Error taxonomy of the receiving workflow.

Every operation raises one of these synchronously; nothing is retried inside
the core. The HTTP adapter maps the five families to status codes.
"""
from __future__ import annotations
from typing import List, Optional, Sequence


class ReceivingError(Exception):
    """Base class for workflow errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---- Validation ----
class ValidationError(ReceivingError):
    """Malformed input or a failed confirm-time validation."""


class MissingEvidenceError(ValidationError):
    def __init__(self, slot_titles: Sequence[str]):
        self.slot_titles: List[str] = list(slot_titles)
        super().__init__("Required photos are missing: " + ", ".join(self.slot_titles))


class DiscrepancyError(ValidationError):
    """Quantity breakdown does not add up to the expected quantity on some lines."""

    def __init__(self, discrepancies, message: Optional[str] = None):
        # list[LineDiscrepancy]
        self.discrepancies = list(discrepancies)
        if message is None:
            parts = [f"{d.line_id} ({d.delta:+d})" for d in self.discrepancies]
            message = "Quantity discrepancy on: " + ", ".join(parts)
        super().__init__(message)

    @property
    def delta(self) -> int:
        """Net delta over all mismatched lines."""
        return sum(d.delta for d in self.discrepancies)


# ---- Capacity ----
class CapacityError(ReceivingError):
    pass


class SlotFullError(CapacityError):
    def __init__(self, slot_key: str, max_photos: int):
        self.slot_key = slot_key
        self.max_photos = max_photos
        super().__init__(f"Slot {slot_key} already holds {max_photos} photo(s)")


# ---- Not found ----
class NotFoundError(ReceivingError):
    pass


class NoMatchError(NotFoundError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"No line matches code {code!r}")


# ---- State ----
class StateError(ReceivingError):
    pass


class FinalizedReceiptError(StateError):
    def __init__(self, receipt_id: str, status: str):
        self.receipt_id = receipt_id
        self.status = status
        super().__init__(f"Receipt {receipt_id} is {status}; it can no longer be modified")


class StepLockedError(StateError):
    def __init__(self, step: int, max_accessible: int):
        self.step = step
        self.max_accessible = max_accessible
        super().__init__(f"Step {step} is locked; highest reachable step is {max_accessible}")


class ConcurrencyError(StateError):
    def __init__(self, receipt_id: str, expected_version: int, actual_version: int):
        self.receipt_id = receipt_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Receipt {receipt_id} was modified elsewhere "
            f"(expected version {expected_version}, found {actual_version}); reload and retry"
        )


# ---- I/O ----
class TransportError(ReceivingError, IOError):
    """A collaborator (storage, database) call failed."""
