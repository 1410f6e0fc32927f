# receiving/routers/inbound.py
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile, status

from receiving.core.api import ok, list_meta
from receiving.core.config import get_settings
from receiving.core.db import SessionLocal
from receiving.schemas.inbound import (
    ConfirmIn,
    ConfirmOut,
    DiscrepancyOut,
    LineQuantitiesIn,
    LocationAssignIn,
    NavigateIn,
    NavigationOut,
    PhotoOut,
    ScanIn,
    ScanOut,
    SlotStatusOut,
)
from receiving.services.persistence import SqlAlchemyReceiptStore
from receiving.services.storage import LocalPhotoStorage
from receiving.services.workflow_service import WorkflowRegistry

# Workflow errors (ReceivingError) propagate to the handler in main.py,
# which turns them into the fail() envelope with the mapped status code.
router = APIRouter(prefix="/inbound-receipts", tags=["inbound-receipts"])


@lru_cache(maxsize=1)
def get_registry() -> WorkflowRegistry:
    settings = get_settings()
    store = SqlAlchemyReceiptStore(SessionLocal, detail_max_photos=settings.detail_slot_max_photos)
    storage = LocalPhotoStorage(settings.photo_dir, settings.photo_base_url)
    return WorkflowRegistry(store, storage, settings)


def _photo_out(wf, photo) -> dict:
    out = PhotoOut.model_validate(photo)
    out.url = wf.photo_url(photo.id)
    return out.model_dump()


def _slot_out(wf, slot_id: str) -> dict:
    return SlotStatusOut.model_validate(wf.slot_status(slot_id)).model_dump()


@router.get("/{receipt_id}")
def get_receipt(receipt_id: str, registry: WorkflowRegistry = Depends(get_registry)):
    return ok(registry.get(receipt_id).snapshot())


@router.post("/{receipt_id}/reload")
def reload_receipt(receipt_id: str, registry: WorkflowRegistry = Depends(get_registry)):
    """Discard unsaved quantities and step position; read the receipt again."""
    return ok(registry.reload(receipt_id).snapshot())


# --- PHOTOS ---
@router.get("/{receipt_id}/slots/{slot_id}", response_model=SlotStatusOut)
def slot_status(receipt_id: str, slot_id: str, registry: WorkflowRegistry = Depends(get_registry)):
    return registry.get(receipt_id).slot_status(slot_id)


@router.get("/{receipt_id}/slots/{slot_id}/photos")
def list_slot_photos(receipt_id: str, slot_id: str, registry: WorkflowRegistry = Depends(get_registry)):
    wf = registry.get(receipt_id)
    items = [_photo_out(wf, p) for p in wf.tracker.photos(slot_id)]
    return ok(items, meta=list_meta(items))


@router.post("/{receipt_id}/slots/{slot_id}/photos", status_code=status.HTTP_201_CREATED)
def upload_photo(
    receipt_id: str,
    slot_id: str,
    file: UploadFile = File(...),
    source: str = Form("camera"),
    x_actor: Optional[str] = Header(None),
    registry: WorkflowRegistry = Depends(get_registry),
):
    data = file.file.read()
    wf = registry.get(receipt_id)
    photo = wf.upload_photo(
        slot_id,
        source,
        data=data,
        mime_type=file.content_type or "application/octet-stream",
        actor=x_actor,
    )
    return ok({"photo": _photo_out(wf, photo), "slot": _slot_out(wf, slot_id)}, status_code=status.HTTP_201_CREATED)


@router.delete("/{receipt_id}/photos/{photo_id}")
def delete_photo(
    receipt_id: str,
    photo_id: str,
    x_actor: Optional[str] = Header(None),
    registry: WorkflowRegistry = Depends(get_registry),
):
    wf = registry.get(receipt_id)
    photo = wf.delete_photo(photo_id, actor=x_actor)
    return ok({"photo_id": photo.id, "slot": _slot_out(wf, photo.slot_id)})


# --- STEPS ---
@router.post("/{receipt_id}/navigate", response_model=NavigationOut)
def navigate(receipt_id: str, payload: NavigateIn, registry: WorkflowRegistry = Depends(get_registry)):
    # beyond-reach requests come back clamped with a notice, not as an error
    return registry.get(receipt_id).navigate_to(payload.step)


# --- QUANTITIES ---
@router.put("/{receipt_id}/lines/{line_id}")
def set_line_quantities(
    receipt_id: str,
    line_id: str,
    payload: LineQuantitiesIn,
    registry: WorkflowRegistry = Depends(get_registry),
):
    wf = registry.get(receipt_id)
    wf.set_line_quantities(line_id, payload.received, payload.damaged, payload.missing, payload.other)
    check = wf.conservation_check(line_id)
    return ok({"line_id": line_id, "ok": check.ok, "delta": check.delta})


@router.put("/{receipt_id}/lines/{line_id}/location")
def assign_location(
    receipt_id: str,
    line_id: str,
    payload: LocationAssignIn,
    registry: WorkflowRegistry = Depends(get_registry),
):
    ln = registry.get(receipt_id).assign_location(line_id, payload.location_id)
    return ok({"line_id": ln.plan_line_id, "location_id": ln.location_id})


@router.get("/{receipt_id}/locations")
def list_locations(receipt_id: str, registry: WorkflowRegistry = Depends(get_registry)):
    items = [{"id": loc.id, "code": loc.code, "type": loc.type} for loc in registry.get(receipt_id).locations()]
    return ok(items, meta=list_meta(items))


@router.post("/{receipt_id}/scan", response_model=ScanOut)
def scan(receipt_id: str, payload: ScanIn, registry: WorkflowRegistry = Depends(get_registry)):
    return registry.get(receipt_id).scan(payload.code)


@router.post("/{receipt_id}/lines/save")
def save_lines(
    receipt_id: str,
    x_actor: Optional[str] = Header(None),
    registry: WorkflowRegistry = Depends(get_registry),
):
    wf = registry.get(receipt_id)
    version = wf.save_lines(actor=x_actor)
    return ok({"version": version, "status": wf.receipt.status})


# --- LIFECYCLE ---
@router.post("/{receipt_id}/confirm", response_model=ConfirmOut)
def confirm(
    receipt_id: str,
    payload: ConfirmIn,
    x_actor: Optional[str] = Header(None),
    registry: WorkflowRegistry = Depends(get_registry),
):
    """
    409/422 leave the receipt untouched.
    422 with meta.discrepancies means: resend with acknowledge_discrepancy=true.
    """
    result = registry.get(receipt_id).confirm(payload.acknowledge_discrepancy, actor=x_actor)
    registry.close(receipt_id)
    return ConfirmOut(
        status=result.status,
        has_issue=result.has_issue,
        version=result.version,
        discrepancies=[DiscrepancyOut(**d.to_dict()) for d in result.discrepancies],
    )


@router.post("/{receipt_id}/putaway-ready")
def putaway_ready(
    receipt_id: str,
    x_actor: Optional[str] = Header(None),
    registry: WorkflowRegistry = Depends(get_registry),
):
    new_status = registry.get(receipt_id).mark_putaway_ready(actor=x_actor)
    registry.close(receipt_id)
    return ok({"status": new_status})
