# routes/reports.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from models.shipment import Shipment
from models.users import User
from packing.aggregator import customer_summary, packing_minutes, summarize
from packing.domain import ReportSummary
from schemas.reports import PartyReport, PartyShipment
from utils.shipments import row_to_document
from utils.tokenJWT import get_current_user, has_role

router = APIRouter(prefix="/reports", tags=["Reports"])

def _role_ok(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER")

def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

def _shipments_in_range(db: Session, start_date: Optional[date], end_date: Optional[date]):
    q = db.query(Shipment)
    if start_date:
        q = q.filter(Shipment.date >= start_date)
    if end_date:
        q = q.filter(Shipment.date <= end_date)
    return q.order_by(Shipment.date.asc(), Shipment.id.asc())


# -----------------------------
# 1) Summary per party name
# -----------------------------
@router.get("/summary", response_model=ReportSummary)
def report_summary(
    start_date: Optional[date] = Query(None, description="Inclusive start date"),
    end_date: Optional[date] = Query(None, description="Inclusive end date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Forbidden")
    _check_range(start_date, end_date)

    rows = _shipments_in_range(db, start_date, end_date).all()
    return customer_summary([row_to_document(r) for r in rows], start_date, end_date)


# -----------------------------
# 2) Customer drill-down
# -----------------------------
@router.get("/customers/{party_name}", response_model=PartyReport)
def report_party(
    party_name: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Forbidden")
    _check_range(start_date, end_date)

    rows = (_shipments_in_range(db, start_date, end_date)
            .filter(Shipment.party_name == party_name)
            .all())
    if not rows:
        raise HTTPException(status_code=404, detail="No shipments for this party in the given range")

    documents = [row_to_document(r) for r in rows]
    summary = customer_summary(documents, start_date, end_date)

    shipments: List[PartyShipment] = [
        PartyShipment(
            id=row.id,
            invoice_no=doc.invoice_no,
            date=doc.date,
            status=doc.status.value,
            duration_minutes=packing_minutes(doc.start_time, doc.end_time),
            totals=summarize(doc.boxes),
        )
        for row, doc in zip(rows, documents)
    ]
    return PartyReport(
        party_name=party_name, start_date=start_date, end_date=end_date,
        stats=summary.customers[0], shipments=shipments,
    )
