# backend/receiving/domain/constants.py

"""
Single source for receipt statuses, event types and the default photo guide.
"""

from typing import Final, FrozenSet, Tuple

# ---- Receipt statuses ----
STATUS_DRAFT: Final[str] = "DRAFT"
STATUS_PHOTO_REQUIRED: Final[str] = "PHOTO_REQUIRED"
STATUS_COUNTING: Final[str] = "COUNTING"
STATUS_CONFIRMED: Final[str] = "CONFIRMED"
STATUS_PUTAWAY_READY: Final[str] = "PUTAWAY_READY"

RECEIPT_STATUSES: Final[Tuple[str, ...]] = (
    STATUS_DRAFT,
    STATUS_PHOTO_REQUIRED,
    STATUS_COUNTING,
    STATUS_CONFIRMED,
    STATUS_PUTAWAY_READY,
)
FINALIZED_STATUSES: Final[FrozenSet[str]] = frozenset({STATUS_CONFIRMED, STATUS_PUTAWAY_READY})

# Forward-only ordering; a status never moves to a lower rank
STATUS_RANK = {s: i for i, s in enumerate(RECEIPT_STATUSES)}

# ---- Photo capture sources ----
SOURCE_CAMERA: Final[str] = "camera"
SOURCE_ALBUM: Final[str] = "album"
PHOTO_SOURCES: Final[FrozenSet[str]] = frozenset({SOURCE_CAMERA, SOURCE_ALBUM})

# ---- Steps ----
STEP_ARRIVAL: Final[int] = 1
STEP_UNLOADED: Final[int] = 2
STEP_PRODUCT_LABEL: Final[int] = 3
STEP_QUANTITY: Final[int] = 4
PHOTO_STEPS: Final[Tuple[int, ...]] = (STEP_ARRIVAL, STEP_UNLOADED, STEP_PRODUCT_LABEL)
ALL_STEPS: Final[Tuple[int, ...]] = PHOTO_STEPS + (STEP_QUANTITY,)

STEP_TITLES = {
    STEP_ARRIVAL: "Arrival photos",
    STEP_UNLOADED: "Post-unload photos",
    STEP_PRODUCT_LABEL: "Product / label photos",
    STEP_QUANTITY: "Quantity entry",
}

# ---- Photo guide ----
DEFAULT_DETAIL_MAX_PHOTOS: Final[int] = 20

# Slots that may take up to the detail ceiling; every other slot is single-shot
DETAIL_SLOT_KEYS: Final[FrozenSet[str]] = frozenset({"BOX_OUTER", "LABEL_CLOSEUP", "UNBOXED"})

# (key, title, step, min_photos) in display order
DEFAULT_SLOT_TEMPLATE: Final[Tuple[Tuple[str, str, int, int], ...]] = (
    ("VEHICLE_LEFT", "Vehicle open (left)", STEP_ARRIVAL, 1),
    ("VEHICLE_RIGHT", "Vehicle open (right)", STEP_ARRIVAL, 1),
    ("PRODUCT_FULL", "Full product view", STEP_UNLOADED, 1),
    ("BOX_OUTER", "Box exterior", STEP_PRODUCT_LABEL, 1),
    ("LABEL_CLOSEUP", "Waybill / label", STEP_PRODUCT_LABEL, 1),
    ("UNBOXED", "Unboxed state", STEP_PRODUCT_LABEL, 1),
)

# ---- Event log ----
EVENT_CREATED: Final[str] = "CREATED"
EVENT_PHOTO_UPLOADED: Final[str] = "PHOTO_UPLOADED"
EVENT_PHOTO_DELETED: Final[str] = "PHOTO_DELETED"
EVENT_QTY_UPDATED: Final[str] = "QTY_UPDATED"
EVENT_DISCREPANCY_FOUND: Final[str] = "DISCREPANCY_FOUND"
EVENT_CONFIRMED: Final[str] = "CONFIRMED"
EVENT_PUTAWAY_READY: Final[str] = "PUTAWAY_READY"
