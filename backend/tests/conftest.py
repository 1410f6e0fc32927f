import os

# before any receiving import: keep tests off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RECEIVING_ALLOW_ACKNOWLEDGED_DISCREPANCY", "true")

import pytest

from receiving.domain.types import PlanLine, Receipt
from receiving.domain.workflow import ReceiptWorkflow
from receiving.services.memory import InMemoryPhotoStorage, InMemoryReceiptStore


def make_receipt(receipt_id="r-1", plan_lines=None):
    if plan_lines is None:
        plan_lines = [
            PlanLine(id="pl-a", product_ref="prod-a", expected_qty=10, sku="A", barcode="880000000001", name="Cup"),
            PlanLine(id="pl-b", product_ref="prod-b", expected_qty=5, sku="B", barcode="880000000002", name="Plate"),
        ]
    return Receipt(id=receipt_id, org_id="org-1", client_ref="client-1", receipt_no=f"INR-{receipt_id}",
                   plan_lines=plan_lines)


def slot_by_key(wf, key):
    return next(s for s in wf.tracker.slots if s.key == key)


def fill_step(wf, step):
    for s in wf.tracker.slots_for_step(step):
        while not s.ok:
            wf.upload_photo(s.id, "camera", data=b"jpeg")


def fill_all_photos(wf):
    for step in (1, 2, 3):
        fill_step(wf, step)


@pytest.fixture
def store():
    return InMemoryReceiptStore()


@pytest.fixture
def storage():
    return InMemoryPhotoStorage()


@pytest.fixture
def workflow(store, storage):
    store.create_receipt(make_receipt())
    return ReceiptWorkflow.open(store, storage, "r-1")


@pytest.fixture
def counting_workflow(workflow):
    """Receipt with every photo slot satisfied (quantity entry reachable)."""
    fill_all_photos(workflow)
    return workflow
