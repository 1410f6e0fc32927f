import pytest

from receiving.domain.errors import StepLockedError, ValidationError
from receiving.domain.steps import displayed_step

from conftest import fill_all_photos, fill_step, slot_by_key


def test_fresh_receipt_starts_on_step_one(workflow):
    assert workflow.current_step == 1
    assert workflow.gate.max_accessible_step() == 1
    assert workflow.gate.states() == {1: "unlocked", 2: "locked", 3: "locked", 4: "locked"}


def test_navigation_beyond_reach_is_clamped_with_notice(workflow):
    result = workflow.navigate_to(4)
    assert result.step == 1
    assert result.clamped
    assert "step 4" in result.notice
    assert workflow.current_step == 1


def test_step_opens_only_when_every_slot_of_previous_step_is_ok(workflow):
    workflow.upload_photo(slot_by_key(workflow, "VEHICLE_LEFT").id, "camera")
    assert workflow.gate.max_accessible_step() == 1
    workflow.upload_photo(slot_by_key(workflow, "VEHICLE_RIGHT").id, "camera")
    assert workflow.gate.max_accessible_step() == 2
    assert workflow.gate.step_state(1) == "complete"


def test_auto_advance_follows_completion(workflow):
    fill_step(workflow, 1)
    assert workflow.current_step == 2
    fill_step(workflow, 2)
    assert workflow.current_step == 3
    fill_step(workflow, 3)
    assert workflow.current_step == 4
    assert workflow.gate.step_complete(4)


def test_explicit_navigation_sticks(workflow):
    fill_step(workflow, 1)
    fill_step(workflow, 2)
    result = workflow.navigate_to(1)
    assert (result.step, result.clamped) == (1, False)
    assert not workflow.gate.auto_advance

    fill_step(workflow, 3)
    # completing more evidence no longer moves the operator
    assert workflow.current_step == 1
    assert workflow.gate.max_accessible_step() == 4


def test_sticky_step_falls_back_when_evidence_is_removed(workflow):
    fill_all_photos(workflow)
    workflow.navigate_to(4)
    assert workflow.current_step == 4

    photo = workflow.tracker.photos(slot_by_key(workflow, "PRODUCT_FULL").id)[0]
    workflow.delete_photo(photo.id)
    assert workflow.gate.max_accessible_step() == 2
    assert workflow.current_step == 2
    assert workflow.gate.step_state(4) == "locked"


def test_require_reachable(workflow):
    with pytest.raises(StepLockedError) as exc:
        workflow.gate.require_reachable(4)
    assert (exc.value.step, exc.value.max_accessible) == (4, 1)
    workflow.gate.require_reachable(1)


@pytest.mark.parametrize("bad", [0, 5, "2", True, None])
def test_navigate_rejects_unknown_steps(workflow, bad):
    with pytest.raises(ValidationError):
        workflow.navigate_to(bad)


def test_displayed_step():
    assert displayed_step(True, 3, 1) == 3
    assert displayed_step(False, 3, 1) == 1
    assert displayed_step(False, 2, 4) == 2
