# backend/receiving/core/api.py
from __future__ import annotations
from typing import Any, Dict, Optional, Sequence

from fastapi import status
from fastapi.responses import JSONResponse

from receiving.domain.errors import (
    CapacityError,
    ConcurrencyError,
    DiscrepancyError,
    MissingEvidenceError,
    NotFoundError,
    ReceivingError,
    SlotFullError,
    StateError,
    StepLockedError,
    TransportError,
    ValidationError,
)


# UTF-8 charset on every JSON response
class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def list_meta(items: Optional[Sequence[Any]] = None, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    meta: Dict[str, Any] = {}
    if items is not None:
        meta["count"] = len(items)
    if extra:
        meta.update(extra)
    return meta


def ok(data: Any = True, meta: Optional[Dict[str, Any]] = None, status_code: int = 200):
    payload: Dict[str, Any] = {"ok": True, "data": data}
    if meta:
        payload["meta"] = meta
    return UTF8JSONResponse(content=payload, status_code=status_code)


def fail(error: str, status_code: int = 400, meta: Optional[Dict[str, Any]] = None):
    payload: Dict[str, Any] = {"ok": False, "error": error}
    if meta:
        payload["meta"] = meta
    return UTF8JSONResponse(content=payload, status_code=status_code)


# ---- workflow errors -> envelope ----
def status_for(exc: ReceivingError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (StateError, CapacityError)):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, TransportError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST


def error_meta(exc: ReceivingError) -> Dict[str, Any]:
    """Machine-readable details a client needs to react without parsing the message."""
    if isinstance(exc, DiscrepancyError):
        return {"discrepancies": [d.to_dict() for d in exc.discrepancies], "delta": exc.delta}
    if isinstance(exc, MissingEvidenceError):
        return {"missing_slots": exc.slot_titles}
    if isinstance(exc, SlotFullError):
        return {"slot_key": exc.slot_key, "max_photos": exc.max_photos}
    if isinstance(exc, StepLockedError):
        return {"step": exc.step, "max_accessible_step": exc.max_accessible}
    if isinstance(exc, ConcurrencyError):
        return {"expected_version": exc.expected_version, "actual_version": exc.actual_version}
    return {}


def fail_from(exc: ReceivingError):
    return fail(exc.message, status_code=status_for(exc), meta=error_meta(exc) or None)
