# backend/packing/domain.py
import enum
import uuid
from datetime import date as date_type
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return uuid.uuid4().hex


# Shipment lifecycle once persisted; progression is linear
class ShipmentStatus(str, enum.Enum):
    DRAFT = "draft"
    PACKING = "packing"
    READY = "ready"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


STATUS_ORDER = list(ShipmentStatus)


def can_transition(current: ShipmentStatus, new: ShipmentStatus) -> bool:
    return STATUS_ORDER.index(ShipmentStatus(new)) >= STATUS_ORDER.index(ShipmentStatus(current))


# Persisted documents use the camelCase field names of the shipment contract
class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- lookup results ----
class CatalogProduct(BaseModel):
    id: int
    sku: str
    product_name: str
    category_id: Optional[int] = None


class CustomerRef(BaseModel):
    id: int
    code: str
    name: str


# ---- raw operator input (coerced and checked by the validator) ----
class ProductLineSpec(DocumentModel):
    # Set when re-submitting an already committed line, to keep its identity
    id: Optional[str] = None
    sku: Optional[str] = None
    quantity: Any = None
    external_sku: Optional[str] = None


class BoxSpec(DocumentModel):
    is_short_box: bool = False
    length: Any = None
    height: Any = None
    width: Any = None
    weight: Any = None
    products: List[ProductLineSpec] = Field(default_factory=list)


class BoxPatch(DocumentModel):
    """Partial box edit. Only fields that were explicitly set are applied."""
    is_short_box: Optional[bool] = None
    length: Any = None
    height: Any = None
    width: Any = None
    weight: Any = None
    products: Optional[List[ProductLineSpec]] = None


# ---- committed values ----
class ProductLine(DocumentModel):
    id: str = Field(default_factory=new_id)
    product: int
    sku: str
    product_name: str
    external_sku: Optional[str] = None
    quantity: int


class Box(DocumentModel):
    id: str = Field(default_factory=new_id)
    box_no: str
    is_short_box: bool = False
    length: float = 0
    height: float = 0
    width: float = 0
    weight: float = 0
    volume: float = 0
    volume_weight: float = 0
    final_weight: float = 0
    products: List[ProductLine] = Field(default_factory=list)

    @property
    def pieces(self) -> int:
        return sum(line.quantity for line in self.products)

    def to_spec(self) -> "BoxSpec":
        return BoxSpec(
            is_short_box=self.is_short_box,
            length=self.length, height=self.height, width=self.width, weight=self.weight,
            products=[
                ProductLineSpec(id=l.id, sku=l.sku, quantity=l.quantity, external_sku=l.external_sku)
                for l in self.products
            ],
        )


class ShipmentHeader(DocumentModel):
    invoice_no: Optional[str] = None
    customer: Optional[Union[int, str]] = None
    party_name: Optional[str] = None
    required_qty: Any = None
    date: Optional[date_type] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: ShipmentStatus = ShipmentStatus.DRAFT
    notes: Optional[str] = None


class ShipmentDocument(DocumentModel):
    invoice_no: str
    customer: int
    party_name: str
    date: date_type
    required_qty: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: ShipmentStatus = ShipmentStatus.DRAFT
    notes: Optional[str] = None
    boxes: List[Box]

    def boxes_document(self) -> List[dict]:
        # Boxes and lines have no identity outside the shipment
        return [
            box.model_dump(by_alias=True, exclude={"id": True, "products": {"__all__": {"id"}}})
            for box in self.boxes
        ]

    def to_document(self) -> dict:
        data = self.model_dump(by_alias=True, mode="json", exclude={"boxes"})
        data["boxes"] = self.boxes_document()
        return data


class ShipmentTotals(DocumentModel):
    box_count: int = 0
    total_pieces: int = 0
    total_weight: float = 0
    total_volume: float = 0
    total_volume_weight: float = 0
    charged_weight: float = 0
    available_qty: int = 0
    short_qty: int = 0


class QuantityCheck(DocumentModel):
    total_pieces: int
    required_qty: Optional[int] = None
    difference: Optional[int] = None
    matches: bool = False


# ---- reporting ----
class CustomerStats(DocumentModel):
    party_name: str
    shipments: int = 0
    boxes: int = 0
    total_weight: float = 0
    total_duration_minutes: int = 0


class ReportSummary(DocumentModel):
    start_date: Optional[date_type] = None
    end_date: Optional[date_type] = None
    total_shipments: int = 0
    total_boxes: int = 0
    total_weight: float = 0
    avg_duration_minutes: Optional[float] = None
    customers: List[CustomerStats] = Field(default_factory=list)
