# backend/models/draft.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from database import Base

# Scratch storage for shipment drafts that have not been submitted yet
class ShipmentDraftRecord(Base):
    __tablename__ = "shipment_drafts"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(200), unique=True, nullable=False, index=True)
    payload = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
