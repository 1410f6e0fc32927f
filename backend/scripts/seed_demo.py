# backend/scripts/seed_demo.py
"""
Demo receipt for local runs:
    python -m scripts.seed_demo          (from backend/, after `alembic upgrade head`)
"""
import uuid
from datetime import date

from receiving.core.config import get_settings
from receiving.core.db import SessionLocal
from receiving.core.logging import configure_logging
from receiving.domain.types import Location, PlanLine, Receipt
from receiving.models import InboundReceipt
from receiving.services.persistence import SqlAlchemyReceiptStore

DEMO_ORG = "org-demo"

PRODUCTS = [
    # (sku, barcode, name, expected)
    ("SKU-CUP-01", "8801234500011", "Ceramic cup 350ml", 24),
    ("SKU-PLT-02", "8801234500028", "Dinner plate 27cm", 12),
    ("SKU-BWL-03", "8801234500035", "Soup bowl", 18),
]

LOCATIONS = [
    ("A-01-01", "RACK"),
    ("A-01-02", "RACK"),
    ("FLOOR-01", "FLOOR"),
]


def seed():
    configure_logging()
    settings = get_settings()
    store = SqlAlchemyReceiptStore(SessionLocal, detail_max_photos=settings.detail_slot_max_photos)

    receipt_no = f"INR-{date.today():%Y%m%d}-DEMO"
    session = SessionLocal()
    try:
        existing = session.query(InboundReceipt).filter(InboundReceipt.ReceiptNo == receipt_no).first()
    finally:
        session.close()
    if existing:
        print(f"Demo receipt already exists: {existing.ReceiptID} ({receipt_no})")
        return existing.ReceiptID

    plan_lines = [
        PlanLine(id=uuid.uuid4().hex, product_ref=uuid.uuid4().hex, expected_qty=qty, sku=sku, barcode=bc, name=name)
        for sku, bc, name, qty in PRODUCTS
    ]
    receipt = store.create_receipt(
        Receipt(
            id=uuid.uuid4().hex,
            org_id=DEMO_ORG,
            client_ref="client-demo",
            receipt_no=receipt_no,
            plan_lines=plan_lines,
        ),
        actor="seed",
    )
    for code, kind in LOCATIONS:
        store.add_location(DEMO_ORG, Location(id=uuid.uuid4().hex, code=code, type=kind))

    print(f"Seeded receipt {receipt.id} ({receipt_no}) with {len(plan_lines)} lines, {len(receipt.slots)} photo slots")
    return receipt.id


if __name__ == "__main__":
    seed()
