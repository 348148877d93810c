# backend/models/shipment.py
from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Enum, JSON, Text, func
from sqlalchemy.orm import relationship
from database import Base
from packing.domain import ShipmentStatus

# Persisted shipment document.
# Boxes (with their product lines) are embedded as a JSON array in the
# camelCase document shape; weights are recomputed from it on every read.
class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True, index=True)
    invoice_no = Column(String, unique=True, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    party_name = Column(String(100), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    required_qty = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)

    status = Column(
        Enum(ShipmentStatus, values_callable=lambda e: [m.value for m in e]),
        default=ShipmentStatus.DRAFT, nullable=False, index=True,
    )
    boxes = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    # Audit fields
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")
