import os

import pytest

from receiving.core.config import get_settings, parse_origins
from receiving.domain.errors import TransportError
from receiving.services.storage import LocalPhotoStorage


def test_local_storage_writes_under_receipt_folder(tmp_path):
    storage = LocalPhotoStorage(str(tmp_path), base_url="/photos/")
    path = storage.put("org-1", "r-1", "slot-1", b"jpeg-bytes", "image/jpeg", "camera")

    assert path.startswith("org-1/r-1/slot-1/")
    assert os.path.splitext(path)[1] in (".jpg", ".jpeg")
    assert (tmp_path / path).read_bytes() == b"jpeg-bytes"
    assert storage.url(path) == f"/photos/{path}"


def test_local_storage_io_failure(tmp_path):
    blocker = tmp_path / "org-1"
    blocker.write_text("not a directory")
    storage = LocalPhotoStorage(str(tmp_path))
    with pytest.raises(TransportError):
        storage.put("org-1", "r-1", "slot-1", b"x", "image/png", "album")


def test_parse_origins():
    assert parse_origins(None) == ["*"]
    assert parse_origins("*") == ["*"]
    assert parse_origins('["http://a", "http://b"]') == ["http://a", "http://b"]
    assert parse_origins("http://a, http://b") == ["http://a", "http://b"]


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("RECEIVING_DETAIL_SLOT_MAX_PHOTOS", "8")
    monkeypatch.setenv("RECEIVING_ALLOW_ACKNOWLEDGED_DISCREPANCY", "no")
    monkeypatch.setenv("RECEIVING_LOG_LEVEL", "debug")
    s = get_settings()
    assert s.detail_slot_max_photos == 8
    assert s.allow_acknowledged_discrepancy is False
    assert s.log_level == "DEBUG"


def test_bad_integer_setting(monkeypatch):
    monkeypatch.setenv("RECEIVING_DETAIL_SLOT_MAX_PHOTOS", "lots")
    with pytest.raises(RuntimeError):
        get_settings()


def test_local_storage_delete(tmp_path):
    storage = LocalPhotoStorage(str(tmp_path))
    path = storage.put("org-1", "r-1", "slot-1", b"x", "image/png", "album")
    storage.delete(path)
    assert not (tmp_path / path).exists()
    # already gone is fine
    storage.delete(path)
