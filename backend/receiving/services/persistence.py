# backend/receiving/services/persistence.py
from __future__ import annotations
import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from receiving.domain.constants import EVENT_CREATED, FINALIZED_STATUSES, STATUS_CONFIRMED, STATUS_DRAFT
from receiving.domain.errors import (
    ConcurrencyError,
    FinalizedReceiptError,
    NotFoundError,
    ReceivingError,
    TransportError,
)
from receiving.domain.photos import build_default_slots
from receiving.domain.ports import ReceiptStore
from receiving.domain.types import Location, Photo, PhotoSlot, PlanLine, Receipt, ReceiptEvent, ReceiptLine
from receiving.models import (
    InboundEvent,
    InboundPhoto,
    InboundPhotoSlot,
    InboundPlanLine,
    InboundReceipt,
    InboundReceiptLine,
    Location as LocationRow,
    Product,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dialect(db: Session) -> str:
    bind = db.get_bind()
    return bind.dialect.name if bind is not None else "unknown"


# ---- row <-> record mapping ----
def plan_line_from_row(row: InboundPlanLine) -> PlanLine:
    product = row.product
    return PlanLine(
        id=row.PlanLineID,
        product_ref=row.ProductID,
        expected_qty=int(row.ExpectedQty or 0),
        sku=product.Sku if product else None,
        barcode=product.Barcode if product else None,
        name=product.Name if product else None,
    )


def line_from_row(row: InboundReceiptLine) -> ReceiptLine:
    return ReceiptLine(
        id=str(row.ReceiptLineID),
        plan_line_id=row.PlanLineID,
        received_qty=int(row.ReceivedQty or 0),
        damaged_qty=int(row.DamagedQty or 0),
        missing_qty=int(row.MissingQty or 0),
        other_qty=int(row.OtherQty or 0),
        location_id=row.LocationID,
    )


def slot_from_row(row: InboundPhotoSlot, uploaded_count: int) -> PhotoSlot:
    return PhotoSlot(
        id=row.SlotID,
        key=row.SlotKey,
        title=row.Title,
        step=int(row.Step),
        min_photos=int(row.MinPhotos or 0),
        max_photos=int(row.MaxPhotos or 1),
        uploaded_count=uploaded_count,
        sort_order=int(row.SortOrder or 0),
    )


def photo_from_row(row: InboundPhoto) -> Photo:
    return Photo(
        id=row.PhotoID,
        slot_id=row.SlotID,
        storage_path=row.StoragePath,
        source=row.Source,
        mime_type=row.MimeType,
        uploaded_at=row.UploadedAt,
        uploaded_by=row.UploadedBy,
    )


def location_from_row(row: LocationRow) -> Location:
    return Location(id=row.LocationID, code=row.Code, type=row.Type_s)


class SqlAlchemyReceiptStore(ReceiptStore):
    """ReceiptStore on the SQLAlchemy models; one short session per call."""

    def __init__(self, session_factory: sessionmaker, detail_max_photos: int = 20):
        self.session_factory = session_factory
        self.detail_max_photos = detail_max_photos

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db: Session = self.session_factory()
        try:
            yield db
            db.commit()
        except ReceivingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("%s error", action)
            raise TransportError(f"{action} error: {type(e).__name__}: {e}") from e
        finally:
            db.close()

    def _lock_receipt_for_update(self, db: Session, receipt_id: str) -> InboundReceipt:
        """
        Lock and freshly read the receipt row.
        MSSQL uses UPDLOCK+ROWLOCK; other dialects SELECT ... FOR UPDATE
        (a no-op on SQLite, where the write lock is per database).
        """
        if _dialect(db) == "mssql":
            db.execute(
                text("SELECT ReceiptID FROM InboundReceipt WITH (UPDLOCK, ROWLOCK) WHERE ReceiptID=:rid"),
                {"rid": receipt_id},
            )
            row = db.get(InboundReceipt, receipt_id)
        else:
            row = (
                db.query(InboundReceipt)
                .filter(InboundReceipt.ReceiptID == receipt_id)
                .with_for_update()
                .one_or_none()
            )
        if row is None:
            raise NotFoundError(f"Receipt {receipt_id} not found")
        return row

    def _lock_mutable_receipt(self, db: Session, receipt_id: str) -> InboundReceipt:
        row = self._lock_receipt_for_update(db, receipt_id)
        if row.Status_s in FINALIZED_STATUSES:
            raise FinalizedReceiptError(receipt_id, row.Status_s)
        return row

    @staticmethod
    def _check_version(row: InboundReceipt, expected_version: int) -> None:
        actual = int(row.Version or 0)
        if actual != expected_version:
            raise ConcurrencyError(row.ReceiptID, expected_version, actual)

    # ---- reads ----
    def load_receipt(self, receipt_id: str) -> Receipt:
        with self._session("load_receipt") as db:
            row = db.get(InboundReceipt, receipt_id)
            if row is None:
                raise NotFoundError(f"Receipt {receipt_id} not found")

            plan_rows = (
                db.query(InboundPlanLine)
                .filter(InboundPlanLine.ReceiptID == receipt_id)
                .order_by(InboundPlanLine.SortOrder.asc(), InboundPlanLine.PlanLineID.asc())
                .all()
            )
            line_rows = db.query(InboundReceiptLine).filter(InboundReceiptLine.ReceiptID == receipt_id).all()
            slot_rows = (
                db.query(InboundPhotoSlot)
                .filter(InboundPhotoSlot.ReceiptID == receipt_id)
                .order_by(InboundPhotoSlot.SortOrder.asc())
                .all()
            )
            photo_rows = (
                db.query(InboundPhoto)
                .filter(InboundPhoto.ReceiptID == receipt_id, InboundPhoto.IsDeleted == False)  # noqa: E712
                .order_by(InboundPhoto.UploadedAt.asc())
                .all()
            )

            counts: Dict[str, int] = {}
            for p in photo_rows:
                counts[p.SlotID] = counts.get(p.SlotID, 0) + 1

            return Receipt(
                id=row.ReceiptID,
                org_id=row.OrgID,
                client_ref=row.ClientRef,
                receipt_no=row.ReceiptNo,
                status=row.Status_s,
                version=int(row.Version or 0),
                has_issue=bool(row.HasIssue),
                confirmed_at=row.ConfirmedAt,
                confirmed_by=row.ConfirmedBy,
                plan_lines=[plan_line_from_row(r) for r in plan_rows],
                lines=[line_from_row(r) for r in line_rows],
                slots=[slot_from_row(r, counts.get(r.SlotID, 0)) for r in slot_rows],
                photos=[photo_from_row(r) for r in photo_rows],
            )

    def list_locations(self, receipt_id: str) -> List[Location]:
        with self._session("list_locations") as db:
            row = db.get(InboundReceipt, receipt_id)
            if row is None:
                raise NotFoundError(f"Receipt {receipt_id} not found")
            rows = (
                db.query(LocationRow)
                .filter(LocationRow.OrgID == row.OrgID, LocationRow.Status_s == "ACTIVE")
                .order_by(LocationRow.Code.asc())
                .all()
            )
            return [location_from_row(r) for r in rows]

    def list_events(self, receipt_id: str) -> List[ReceiptEvent]:
        with self._session("list_events") as db:
            rows = (
                db.query(InboundEvent)
                .filter(InboundEvent.ReceiptID == receipt_id)
                .order_by(InboundEvent.EventID.asc())
                .all()
            )
            return [
                ReceiptEvent(
                    receipt_id=r.ReceiptID,
                    event_type=r.EventType,
                    payload=json.loads(r.Payload) if r.Payload else {},
                    actor=r.ActorID,
                    created_at=r.CreatedAt,
                )
                for r in rows
            ]

    # ---- writes ----
    def save_lines(self, receipt_id: str, lines: Sequence[ReceiptLine], expected_version: int,
                   actor: Optional[str] = None) -> int:
        with self._session("save_lines") as db:
            receipt = self._lock_mutable_receipt(db, receipt_id)
            self._check_version(receipt, expected_version)

            existing = {
                r.PlanLineID: r
                for r in db.query(InboundReceiptLine).filter(InboundReceiptLine.ReceiptID == receipt_id).all()
            }
            now = _utcnow()
            for ln in lines:
                row = existing.get(ln.plan_line_id)
                if row is None:
                    row = InboundReceiptLine(ReceiptID=receipt_id, PlanLineID=ln.plan_line_id)
                    db.add(row)
                row.ReceivedQty = int(ln.received_qty)
                row.DamagedQty = int(ln.damaged_qty)
                row.MissingQty = int(ln.missing_qty)
                row.OtherQty = int(ln.other_qty)
                row.LocationID = ln.location_id
                row.InspectedBy = actor
                row.InspectedAt = now

            receipt.Version = int(receipt.Version or 0) + 1
            receipt.UpdatedAt = now
            db.flush()
            return int(receipt.Version)

    def update_status(self, receipt_id: str, status: str, expected_version: int,
                      has_issue: bool = False, actor: Optional[str] = None) -> int:
        with self._session("update_status") as db:
            receipt = self._lock_receipt_for_update(db, receipt_id)
            if receipt.Status_s in FINALIZED_STATUSES and status not in FINALIZED_STATUSES:
                raise FinalizedReceiptError(receipt_id, receipt.Status_s)
            self._check_version(receipt, expected_version)

            now = _utcnow()
            receipt.Status_s = status
            receipt.HasIssue = bool(has_issue)
            if status == STATUS_CONFIRMED:
                receipt.ConfirmedAt = now
                receipt.ConfirmedBy = actor
            receipt.Version = int(receipt.Version or 0) + 1
            receipt.UpdatedAt = now
            db.flush()
            return int(receipt.Version)

    def save_photo(self, receipt_id: str, photo: Photo) -> None:
        with self._session("save_photo") as db:
            self._lock_mutable_receipt(db, receipt_id)
            if db.get(InboundPhotoSlot, photo.slot_id) is None:
                raise NotFoundError(f"Photo slot {photo.slot_id} not found")
            db.add(
                InboundPhoto(
                    PhotoID=photo.id,
                    ReceiptID=receipt_id,
                    SlotID=photo.slot_id,
                    StoragePath=photo.storage_path,
                    Source=photo.source,
                    MimeType=photo.mime_type,
                    UploadedBy=photo.uploaded_by,
                    UploadedAt=photo.uploaded_at,
                    IsDeleted=False,
                )
            )

    def delete_photo(self, receipt_id: str, photo_id: str) -> None:
        with self._session("delete_photo") as db:
            self._lock_mutable_receipt(db, receipt_id)
            row = (
                db.query(InboundPhoto)
                .filter(InboundPhoto.PhotoID == photo_id, InboundPhoto.ReceiptID == receipt_id)
                .one_or_none()
            )
            if row is None or row.IsDeleted:
                raise NotFoundError(f"Photo {photo_id} not found")
            row.IsDeleted = True

    def record_event(self, event: ReceiptEvent) -> None:
        with self._session("record_event") as db:
            db.add(
                InboundEvent(
                    ReceiptID=event.receipt_id,
                    EventType=event.event_type,
                    Payload=json.dumps(event.payload, default=str, ensure_ascii=False),
                    ActorID=event.actor,
                    CreatedAt=event.created_at or _utcnow(),
                )
            )

    # ---- planning side (seed / import) ----
    def create_receipt(self, receipt: Receipt, actor: Optional[str] = None) -> Receipt:
        """
        Insert a receipt with its plan lines (products upserted by SKU) and
        photo slots; the default photo guide is used when none are given.
        """
        slots = receipt.slots or build_default_slots(self.detail_max_photos)
        with self._session("create_receipt") as db:
            db.add(
                InboundReceipt(
                    ReceiptID=receipt.id,
                    OrgID=receipt.org_id,
                    ClientRef=receipt.client_ref,
                    ReceiptNo=receipt.receipt_no or receipt.id,
                    Status_s=STATUS_DRAFT,
                    Version=0,
                    HasIssue=False,
                )
            )
            for idx, pl in enumerate(receipt.plan_lines):
                sku = pl.sku or pl.product_ref
                product = db.get(Product, pl.product_ref)
                if product is None:
                    product = db.query(Product).filter(Product.Sku == sku).one_or_none()
                if product is None:
                    product = Product(
                        ProductID=pl.product_ref,
                        Sku=sku,
                        Barcode=pl.barcode,
                        Name=pl.name or sku,
                    )
                    db.add(product)
                    db.flush()
                db.add(
                    InboundPlanLine(
                        PlanLineID=pl.id,
                        ReceiptID=receipt.id,
                        ProductID=product.ProductID,
                        ExpectedQty=int(pl.expected_qty),
                        SortOrder=idx,
                    )
                )
            for s in slots:
                db.add(
                    InboundPhotoSlot(
                        SlotID=s.id,
                        ReceiptID=receipt.id,
                        SlotKey=s.key,
                        Title=s.title,
                        Step=s.step,
                        MinPhotos=s.min_photos,
                        MaxPhotos=s.max_photos,
                        SortOrder=s.sort_order,
                    )
                )
            db.add(
                InboundEvent(
                    ReceiptID=receipt.id,
                    EventType=EVENT_CREATED,
                    Payload=json.dumps({"receipt_no": receipt.receipt_no or receipt.id}),
                    ActorID=actor,
                    CreatedAt=_utcnow(),
                )
            )
        logger.info("receipt %s created (%s plan lines, %s slots)", receipt.id, len(receipt.plan_lines), len(slots))
        return self.load_receipt(receipt.id)

    def add_location(self, org_id: str, location: Location) -> Location:
        with self._session("add_location") as db:
            db.add(
                LocationRow(
                    LocationID=location.id,
                    OrgID=org_id,
                    Code=location.code,
                    Type_s=location.type,
                    Status_s="ACTIVE",
                )
            )
        return location
