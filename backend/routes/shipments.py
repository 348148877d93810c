# backend/routes/shipments.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.shipment import Shipment
from models.users import User
from packing.aggregator import summarize
from packing.domain import Box, BoxSpec, ShipmentStatus, can_transition
from packing.draft_store import InMemoryDraftStore
from packing.errors import ErrorKind, ShipmentValidationError
from packing.lifecycle import ShipmentDraft
from packing.lookups import safe_resolve_customer
from packing.validator import check_party_name
from schemas.shipment import (
    ShipmentCreate, ShipmentListItem, ShipmentOut, ShipmentPage, ShipmentUpdate,
)
from utils.audit import client_ip, write_log
from utils.errors import http_error
from utils.lookups import DbCatalogLookup, DbCustomerLookup
from utils.shipments import insert_shipment, row_to_document, save_shipment, shipment_view
from utils.tokenJWT import get_current_user, has_role

router = APIRouter(prefix="/shipments", tags=["Shipments"])

def _role_ok(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER", "OPERATOR")

def _can_delete(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER")

def _get_or_404(db: Session, shipment_id: int) -> Shipment:
    row = db.query(Shipment).filter(Shipment.id == shipment_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Shipment not found")
    return row

def _replay(db: Session, boxes: List[BoxSpec]) -> ShipmentDraft:
    """Run submitted boxes through a throwaway draft so they get the same checks as the UI flow."""
    draft = ShipmentDraft(DbCatalogLookup(db), DbCustomerLookup(db), InMemoryDraftStore())
    for spec in boxes:
        draft.add_box(spec)
    return draft

def _fail(db: Session, user: User, request: Request, action: str, e: ShipmentValidationError, resource_id=None):
    write_log(db, user_id=user.id, action=action, resource="shipments", resource_id=resource_id,
              status="FAIL", ip=client_ip(request), meta=e.to_dict())
    return http_error(e)


@router.get("", response_model=ShipmentPage)
def list_shipments(
    search: Optional[str] = Query(None, description="Invoice number or party name"),
    status: Optional[ShipmentStatus] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")

    q = db.query(Shipment)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Shipment.invoice_no.ilike(like), Shipment.party_name.ilike(like)))
    if status:
        q = q.filter(Shipment.status == status)
    if start_date:
        q = q.filter(Shipment.date >= start_date)
    if end_date:
        q = q.filter(Shipment.date <= end_date)

    total = q.count()
    rows = (q.order_by(Shipment.created_at.desc(), Shipment.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all())

    items = []
    for row in rows:
        totals = summarize([Box.model_validate(b) for b in (row.boxes or [])])
        items.append(ShipmentListItem(
            id=row.id, invoice_no=row.invoice_no, party_name=row.party_name, date=row.date,
            status=row.status, box_count=totals.box_count, total_pieces=totals.total_pieces,
            charged_weight=totals.charged_weight, created_at=row.created_at,
        ))
    return ShipmentPage(items=items, total=total, page=page, page_size=page_size)


@router.get("/{shipment_id}", response_model=ShipmentOut)
def get_shipment(
    shipment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    return shipment_view(_get_or_404(db, shipment_id))


@router.post("", response_model=ShipmentOut, status_code=201)
def create_shipment(
    payload: ShipmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")

    stored = []

    def persist(document):
        stored.append(insert_shipment(db, document, current_user.id))

    try:
        draft = _replay(db, payload.boxes)
        draft.submit(payload.header(), persist=persist)
    except ShipmentValidationError as e:
        raise _fail(db, current_user, request, "SHIPMENT_CREATE", e)

    row = stored[0]
    write_log(db, user_id=current_user.id, action="SHIPMENT_CREATE", resource="shipments",
              resource_id=row.id, ip=client_ip(request),
              meta={"invoice_no": row.invoice_no, "boxes": len(row.boxes)})
    return shipment_view(row)


@router.put("/{shipment_id}", response_model=ShipmentOut)
def update_shipment(
    shipment_id: int,
    payload: ShipmentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    row = _get_or_404(db, shipment_id)
    current = row_to_document(row)
    changes = payload.model_dump(exclude_unset=True)

    try:
        new_status = changes.get("status")
        if new_status is not None and not can_transition(current.status, new_status):
            raise ShipmentValidationError(
                ErrorKind.INVALID_STATUS_TRANSITION,
                f"Shipment status cannot move from {current.status.value} to {ShipmentStatus(new_status).value}.",
                current=current.status.value, requested=ShipmentStatus(new_status).value,
            )

        header = current.model_dump(exclude={"boxes"})
        header.update({k: v for k, v in changes.items() if k != "boxes" and v is not None})

        if changes.get("boxes"):
            document = _replay(db, payload.boxes).build_document(header)
        else:
            # Header-only edit: keep the stored boxes as they are
            if "customer" in changes or "party_name" in changes:
                customer = safe_resolve_customer(DbCustomerLookup(db), header["customer"])
                if customer is None:
                    raise ShipmentValidationError(ErrorKind.UNKNOWN_CUSTOMER, customer=header["customer"])
                header["party_name"] = header["party_name"].strip()
                check_party_name(header["party_name"], customer)
            header["invoice_no"] = header["invoice_no"].strip().upper()
            document = current.model_copy(update=header)

        row = save_shipment(db, row, document, current_user.id)
    except ShipmentValidationError as e:
        raise _fail(db, current_user, request, "SHIPMENT_UPDATE", e, resource_id=shipment_id)

    write_log(db, user_id=current_user.id, action="SHIPMENT_UPDATE", resource="shipments",
              resource_id=row.id, ip=client_ip(request),
              meta={"invoice_no": row.invoice_no, "fields": sorted(changes)})
    return shipment_view(row)


@router.delete("/{shipment_id}")
def delete_shipment(
    shipment_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_delete(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to delete shipments")
    row = _get_or_404(db, shipment_id)
    invoice_no = row.invoice_no
    db.delete(row)
    db.commit()

    write_log(db, user_id=current_user.id, action="SHIPMENT_DELETE", resource="shipments",
              resource_id=shipment_id, ip=client_ip(request), meta={"invoice_no": invoice_no})
    return {"message": "Shipment deleted successfully"}
