# receiving/schemas/inbound.py
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SourceLiteral = Literal["camera", "album"]


class LineQuantitiesIn(BaseModel):
    received: int = Field(0, ge=0)
    damaged: int = Field(0, ge=0)
    missing: int = Field(0, ge=0)
    other: int = Field(0, ge=0)


class NavigateIn(BaseModel):
    step: int = Field(..., ge=1, le=4)


class ScanIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=100)


class LocationAssignIn(BaseModel):
    location_id: Optional[str] = None


class ConfirmIn(BaseModel):
    acknowledge_discrepancy: bool = False


class SlotStatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slot_id: str
    uploaded_count: int
    required: int
    max_photos: int
    ok: bool


class PhotoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    slot_id: str
    source: SourceLiteral
    mime_type: Optional[str] = None
    storage_path: str
    url: Optional[str] = None


class NavigationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    step: int
    clamped: bool
    notice: Optional[str] = None


class ScanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_id: str
    product_ref: str
    received_qty: int


class DiscrepancyOut(BaseModel):
    line_id: str
    product_ref: str
    expected: int
    actual: int
    delta: int


class ConfirmOut(BaseModel):
    status: str
    has_issue: bool
    version: int
    discrepancies: list[DiscrepancyOut] = []
