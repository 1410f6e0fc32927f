from .errors import (
    ReceivingError,
    ValidationError,
    MissingEvidenceError,
    DiscrepancyError,
    CapacityError,
    SlotFullError,
    NotFoundError,
    NoMatchError,
    StateError,
    FinalizedReceiptError,
    StepLockedError,
    ConcurrencyError,
    TransportError,
)
from .workflow import ReceiptWorkflow

__all__ = [
    "ReceivingError", "ValidationError", "MissingEvidenceError", "DiscrepancyError",
    "CapacityError", "SlotFullError", "NotFoundError", "NoMatchError", "StateError",
    "FinalizedReceiptError", "StepLockedError", "ConcurrencyError", "TransportError",
    "ReceiptWorkflow",
]
