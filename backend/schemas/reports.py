# schemas/reports.py
from datetime import date as date_type
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from packing.domain import CustomerStats, ShipmentTotals


# Shipments of one party name, for the customer drill-down
class PartyShipment(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    invoice_no: str
    date: date_type
    status: str
    duration_minutes: Optional[int] = None
    totals: ShipmentTotals


class PartyReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    party_name: str
    start_date: Optional[date_type] = None
    end_date: Optional[date_type] = None
    stats: CustomerStats
    shipments: List[PartyShipment]
