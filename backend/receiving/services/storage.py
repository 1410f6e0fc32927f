# backend/receiving/services/storage.py
from __future__ import annotations
import logging
import mimetypes
import os
import uuid

from receiving.domain.errors import TransportError
from receiving.domain.ports import PhotoStorage

logger = logging.getLogger(__name__)


class LocalPhotoStorage(PhotoStorage):
    """
    Photo bytes under a local directory:
        <root>/<org_id>/<receipt_id>/<slot_id>/<uuid><ext>
    The storage path returned is relative to root; url() prefixes base_url.
    """

    def __init__(self, root_dir: str, base_url: str = "/photos"):
        self.root_dir = os.path.abspath(root_dir)
        self.base_url = base_url.rstrip("/")

    def put(self, org_id: str, receipt_id: str, slot_id: str, data: bytes,
            mime_type: str, source: str) -> str:
        ext = mimetypes.guess_extension(mime_type or "") or ".bin"
        rel = "/".join([org_id, receipt_id, slot_id, f"{uuid.uuid4().hex}{ext}"])
        full = os.path.join(self.root_dir, *rel.split("/"))
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as fh:
                fh.write(data)
        except OSError as e:
            logger.exception("photo write failed (receipt=%s, slot=%s)", receipt_id, slot_id)
            raise TransportError(f"photo upload error: {e}") from e
        logger.debug("stored %s bytes at %s (source=%s)", len(data), rel, source)
        return rel

    def url(self, storage_path: str) -> str:
        return f"{self.base_url}/{storage_path}"

    def delete(self, storage_path: str) -> None:
        full = os.path.join(self.root_dir, *storage_path.split("/"))
        try:
            os.remove(full)
        except FileNotFoundError:
            return
        except OSError as e:
            raise TransportError(f"photo delete error: {e}") from e
        logger.debug("removed %s", storage_path)
