# backend/receiving/services/workflow_service.py
from __future__ import annotations
import logging
import threading
from typing import Dict, Optional

from receiving.core.config import Settings, get_settings
from receiving.domain.ports import PhotoStorage, ReceiptStore
from receiving.domain.workflow import ReceiptWorkflow

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """
    Open workflows by receipt id.

    Step position, auto-advance and unsaved quantities live on the workflow
    object, so one operator session keeps hitting the same instance.
    """

    def __init__(self, store: ReceiptStore, storage: PhotoStorage, settings: Optional[Settings] = None):
        self.store = store
        self.storage = storage
        self.settings = settings or get_settings()
        self._open: Dict[str, ReceiptWorkflow] = {}
        self._lock = threading.Lock()

    def get(self, receipt_id: str) -> ReceiptWorkflow:
        with self._lock:
            wf = self._open.get(receipt_id)
            if wf is None:
                wf = ReceiptWorkflow.open(
                    self.store,
                    self.storage,
                    receipt_id,
                    allow_acknowledged_discrepancy=self.settings.allow_acknowledged_discrepancy,
                )
                if wf.receipt.is_finalized:
                    # read-only from here on; every request reads it fresh
                    return wf
                self._open[receipt_id] = wf
                logger.info("workflow opened for receipt %s", receipt_id)
            return wf

    def reload(self, receipt_id: str) -> ReceiptWorkflow:
        """Drop local state (unsaved quantities, step position) and read again."""
        with self._lock:
            self._open.pop(receipt_id, None)
        return self.get(receipt_id)

    def close(self, receipt_id: str) -> None:
        """Forget the open workflow, e.g. once its receipt is finalized."""
        with self._lock:
            if self._open.pop(receipt_id, None) is not None:
                logger.info("workflow closed for receipt %s", receipt_id)

    def __contains__(self, receipt_id: str) -> bool:
        with self._lock:
            return receipt_id in self._open
