# schemas/shipment.py
import re
from datetime import date as date_type, datetime
from typing import Annotated, Any, List, Optional, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packing.domain import Box, BoxSpec, QuantityCheck, ShipmentHeader, ShipmentStatus, ShipmentTotals
from utils.ids import normalize_id, normalize_ref

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(value: Optional[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    if not _TIME_RE.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


TimeOfDay = Annotated[Optional[str], AfterValidator(_check_time)]
# Frontend may send the customer as an id, a numeric string or an {_id}/{id} object
CustomerId = Annotated[Optional[int], BeforeValidator(normalize_id)]
# Drafts may also name the customer by code
CustomerRefIn = Annotated[Optional[Union[int, str]], BeforeValidator(normalize_ref)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Full shipment payload for one-shot creation
class ShipmentCreate(CamelModel):
    invoice_no: str = Field(..., min_length=1)
    customer: CustomerId = None
    party_name: str = Field(..., min_length=1, max_length=100)
    date: Optional[date_type] = None
    required_qty: int = Field(..., ge=1)
    start_time: TimeOfDay = None
    end_time: TimeOfDay = None
    status: ShipmentStatus = ShipmentStatus.DRAFT
    notes: Optional[str] = Field(None, max_length=1000)
    boxes: List[BoxSpec] = Field(..., min_length=1)

    def header(self) -> ShipmentHeader:
        return ShipmentHeader.model_validate(self.model_dump(exclude={"boxes"}))


# Partial update; boxes, when present, replace the whole box list
class ShipmentUpdate(CamelModel):
    invoice_no: Optional[str] = Field(None, min_length=1)
    customer: CustomerId = None
    party_name: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[date_type] = None
    required_qty: Optional[int] = Field(None, ge=1)
    start_time: TimeOfDay = None
    end_time: TimeOfDay = None
    status: Optional[ShipmentStatus] = None
    notes: Optional[str] = Field(None, max_length=1000)
    boxes: Optional[List[BoxSpec]] = Field(None, min_length=1)


class ShipmentOut(CamelModel):
    id: int
    invoice_no: str
    customer: int
    party_name: str
    date: date_type
    required_qty: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: ShipmentStatus
    notes: Optional[str] = None
    boxes: List[Any]
    totals: ShipmentTotals
    quantity_check: QuantityCheck
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShipmentListItem(CamelModel):
    id: int
    invoice_no: str
    party_name: str
    date: date_type
    status: ShipmentStatus
    box_count: int
    total_pieces: int
    charged_weight: float
    created_at: Optional[datetime] = None


class ShipmentPage(CamelModel):
    items: List[ShipmentListItem]
    total: int
    page: int
    page_size: int


# Current state of an operator's draft
class DraftView(CamelModel):
    state: str
    boxes: List[Box]
    totals: ShipmentTotals
    quantity_check: QuantityCheck


class DraftSubmitted(CamelModel):
    shipment: ShipmentOut
    quantity_check: QuantityCheck


# Header sent when finalising the current draft
class DraftSubmit(ShipmentHeader):
    customer: CustomerRefIn = None
    start_time: TimeOfDay = None
    end_time: TimeOfDay = None
