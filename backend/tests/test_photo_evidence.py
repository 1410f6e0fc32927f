import pytest

from receiving.domain.errors import (
    FinalizedReceiptError,
    NotFoundError,
    SlotFullError,
    TransportError,
    ValidationError,
)
from receiving.domain.photos import build_default_slots, slot_capacity

from conftest import fill_all_photos, slot_by_key


def test_default_slots_capacity_policy():
    slots = {s.key: s for s in build_default_slots()}
    assert slots["VEHICLE_LEFT"].max_photos == 1
    assert slots["VEHICLE_RIGHT"].max_photos == 1
    assert slots["PRODUCT_FULL"].max_photos == 1
    assert slots["BOX_OUTER"].max_photos == 20
    assert slots["LABEL_CLOSEUP"].max_photos == 20
    assert slots["UNBOXED"].max_photos == 20
    assert [s.step for s in build_default_slots()] == [1, 1, 2, 3, 3, 3]


def test_slot_capacity_follows_minimum_for_ordinary_slots():
    assert slot_capacity("PALLET", 0) == 1
    assert slot_capacity("PALLET", 3) == 3
    assert slot_capacity("BOX_OUTER", 1, detail_max=8) == 8


def test_single_shot_slot_rejects_second_upload(workflow):
    slot = slot_by_key(workflow, "VEHICLE_LEFT")
    workflow.upload_photo(slot.id, "camera")

    with pytest.raises(SlotFullError):
        workflow.upload_photo(slot.id, "album")
    assert workflow.slot_status(slot.id).uploaded_count == 1


def test_detail_slot_accepts_twenty_and_rejects_the_21st(workflow):
    slot = slot_by_key(workflow, "LABEL_CLOSEUP")
    for i in range(20):
        workflow.upload_photo(slot.id, "camera", data=b"%d" % i)
    assert workflow.slot_status(slot.id).uploaded_count == 20

    with pytest.raises(SlotFullError) as exc:
        workflow.upload_photo(slot.id, "camera")
    assert exc.value.max_photos == 20
    assert workflow.slot_status(slot.id).uploaded_count == 20


def test_slot_status_reflects_min_photos(workflow):
    slot = slot_by_key(workflow, "BOX_OUTER")
    st = workflow.slot_status(slot.id)
    assert (st.uploaded_count, st.required, st.ok) == (0, 1, False)

    workflow.upload_photo(slot.id, "camera")
    st = workflow.slot_status(slot.id)
    assert (st.uploaded_count, st.ok) == (1, True)


def test_unknown_slot_and_bad_source(workflow):
    with pytest.raises(NotFoundError):
        workflow.upload_photo("nope", "camera")
    slot = slot_by_key(workflow, "VEHICLE_LEFT")
    with pytest.raises(ValidationError):
        workflow.upload_photo(slot.id, "scanner")
    assert workflow.slot_status(slot.id).uploaded_count == 0


def test_delete_photo_decrements_and_reopens_slot(workflow):
    slot = slot_by_key(workflow, "VEHICLE_LEFT")
    photo = workflow.upload_photo(slot.id, "camera")
    workflow.delete_photo(photo.id)

    assert workflow.slot_status(slot.id).uploaded_count == 0
    assert not workflow.slot_status(slot.id).ok
    # capacity is free again
    workflow.upload_photo(slot.id, "camera")

    with pytest.raises(NotFoundError):
        workflow.delete_photo(photo.id)


def test_storage_failure_leaves_count_unchanged(workflow, storage):
    slot = slot_by_key(workflow, "PRODUCT_FULL")
    storage.fail_next = TransportError("bucket unavailable")

    with pytest.raises(TransportError):
        workflow.upload_photo(slot.id, "camera")
    assert workflow.slot_status(slot.id).uploaded_count == 0
    assert workflow.tracker.photos(slot.id) == []


def test_upload_is_persisted_and_logged(workflow, store):
    slot = slot_by_key(workflow, "VEHICLE_RIGHT")
    photo = workflow.upload_photo(slot.id, "album", actor="worker-7")

    reloaded = store.load_receipt("r-1")
    assert [p.id for p in reloaded.photos] == [photo.id]
    assert next(s for s in reloaded.slots if s.id == slot.id).uploaded_count == 1
    assert reloaded.status == "PHOTO_REQUIRED"
    assert "PHOTO_UPLOADED" in [e.event_type for e in store.list_events("r-1")]
    assert workflow.photo_url(photo.id).startswith("memory://inbound/org-1/r-1/")


def test_photo_mutators_refuse_after_confirm(counting_workflow):
    wf = counting_workflow
    wf.set_line_quantities("pl-a", received=10)
    wf.set_line_quantities("pl-b", received=5)
    wf.confirm()

    slot = slot_by_key(wf, "BOX_OUTER")
    photo = wf.tracker.photos(slot.id)[0]
    with pytest.raises(FinalizedReceiptError):
        wf.upload_photo(slot.id, "camera")
    with pytest.raises(FinalizedReceiptError):
        wf.delete_photo(photo.id)
    assert wf.slot_status(slot.id).uploaded_count == 1


def test_fill_all_photos_makes_every_slot_ok(workflow):
    fill_all_photos(workflow)
    assert workflow.tracker.incomplete_slots() == []


def test_stale_session_cannot_touch_photos_of_confirmed_receipt(counting_workflow, store, storage):
    from receiving.domain.workflow import ReceiptWorkflow

    first = counting_workflow
    stale = ReceiptWorkflow.open(store, storage, "r-1")
    first.set_line_quantities("pl-a", received=10)
    first.set_line_quantities("pl-b", received=5)
    first.confirm()
    photos_before = len(store.load_receipt("r-1").photos)
    objects_before = len(storage.objects)

    box = slot_by_key(stale, "BOX_OUTER")
    with pytest.raises(FinalizedReceiptError):
        stale.upload_photo(box.id, "camera")
    with pytest.raises(FinalizedReceiptError):
        stale.delete_photo(stale.tracker.photos(box.id)[0].id)

    stored = store.load_receipt("r-1")
    assert stored.status == "CONFIRMED"
    assert len(stored.photos) == photos_before
    assert len(storage.objects) == objects_before
    assert stale.slot_status(box.id).uploaded_count == 1


def test_failed_status_write_does_not_fail_the_upload(workflow, store):
    slot = slot_by_key(workflow, "VEHICLE_LEFT")
    store.fail_next["update_status"] = TransportError("db down")

    photo = workflow.upload_photo(slot.id, "camera")

    assert workflow.slot_status(slot.id).uploaded_count == 1
    assert [p.id for p in store.load_receipt("r-1").photos] == [photo.id]
    assert workflow.receipt.status == "DRAFT"
    # the next upload catches the status up
    workflow.upload_photo(slot_by_key(workflow, "VEHICLE_RIGHT").id, "camera")
    assert store.load_receipt("r-1").status == "PHOTO_REQUIRED"


def test_failed_photo_record_discards_stored_bytes(workflow, store, storage):
    slot = slot_by_key(workflow, "PRODUCT_FULL")
    store.fail_next["save_photo"] = TransportError("db down")

    with pytest.raises(TransportError):
        workflow.upload_photo(slot.id, "camera", data=b"jpeg")
    assert storage.objects == {}
    assert workflow.slot_status(slot.id).uploaded_count == 0
