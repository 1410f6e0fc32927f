import pytest

from receiving.domain.errors import NoMatchError, NotFoundError, StepLockedError, ValidationError


def test_scan_by_sku_and_by_barcode(counting_workflow):
    wf = counting_workflow
    r = wf.scan("A")
    assert (r.line_id, r.product_ref, r.received_qty) == ("pl-a", "prod-a", 1)
    r = wf.scan(" 880000000001 ")
    assert r.received_qty == 2


def test_repeated_scans_all_count(counting_workflow):
    for _ in range(5):
        counting_workflow.scan("B")
    assert counting_workflow.reconciler.line("pl-b").received_qty == 5
    assert counting_workflow.conservation_check("pl-b").ok


def test_unknown_code_changes_nothing(counting_workflow):
    wf = counting_workflow
    wf.scan("A")
    before = [ln.quantities() for ln in wf.reconciler.lines]

    with pytest.raises(NoMatchError) as exc:
        wf.scan("999")
    assert exc.value.code == "999"
    assert isinstance(exc.value, NotFoundError)
    assert [ln.quantities() for ln in wf.reconciler.lines] == before


@pytest.mark.parametrize("code", ["", "   ", None])
def test_empty_code(counting_workflow, code):
    with pytest.raises(ValidationError):
        counting_workflow.scan(code)


def test_scan_is_locked_before_photos(workflow):
    with pytest.raises(StepLockedError):
        workflow.scan("A")
