# backend/routes/drafts.py
import threading
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from packing.domain import BoxPatch, BoxSpec, ProductLineSpec
from packing.errors import ShipmentValidationError
from packing.guard import RemovalGuard
from packing.lifecycle import DRAFT_KEY, ShipmentDraft
from schemas.shipment import DraftSubmit, DraftSubmitted, DraftView
from utils.audit import client_ip, write_log
from utils.draft_store import DbDraftStore
from utils.errors import http_error
from utils.lookups import DbCatalogLookup, DbCustomerLookup
from utils.shipments import insert_shipment, shipment_view
from utils.tokenJWT import get_current_user, has_role

router = APIRouter(prefix="/shipment-drafts/current", tags=["Shipment drafts"])

# One removal guard per draft key, shared by the requests of that operator
_guards: Dict[str, RemovalGuard] = {}
_guards_lock = threading.Lock()

def _guard_for(key: str) -> RemovalGuard:
    with _guards_lock:
        guard = _guards.get(key)
        if guard is None:
            guard = RemovalGuard(cooldown=settings.DRAFT_REMOVAL_COOLDOWN_MS / 1000)
            _guards[key] = guard
        return guard

def _draft_key(user: User) -> str:
    return f"user:{user.id}:{DRAFT_KEY}"

def get_draft(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ShipmentDraft:
    if not has_role(current_user, "ADMIN", "MANAGER", "OPERATOR"):
        raise HTTPException(status_code=403, detail="Not authorized")
    key = _draft_key(current_user)
    return ShipmentDraft(
        DbCatalogLookup(db), DbCustomerLookup(db), DbDraftStore(db), key=key, guard=_guard_for(key),
    )

def _view(draft: ShipmentDraft, required_qty: Optional[int] = None) -> DraftView:
    return DraftView(
        state=draft.state.value,
        boxes=draft.boxes,
        totals=draft.totals(),
        quantity_check=draft.quantity_check(required_qty),
    )


@router.get("", response_model=DraftView)
def read_draft(
    required_qty: Optional[int] = Query(None, ge=1),
    draft: ShipmentDraft = Depends(get_draft),
):
    return _view(draft, required_qty)


@router.delete("")
def discard_draft(draft: ShipmentDraft = Depends(get_draft)):
    draft.discard()
    return {"message": "Draft discarded"}


@router.post("/boxes", response_model=DraftView, status_code=201)
def add_box(spec: BoxSpec, draft: ShipmentDraft = Depends(get_draft)):
    try:
        draft.add_box(spec)
    except ShipmentValidationError as e:
        raise http_error(e)
    return _view(draft)


@router.put("/boxes/{box_id}", response_model=DraftView)
def edit_box(box_id: str, patch: BoxPatch, draft: ShipmentDraft = Depends(get_draft)):
    try:
        draft.edit_box(box_id, patch)
    except ShipmentValidationError as e:
        raise http_error(e)
    return _view(draft)


@router.post("/boxes/{box_id}/copy", response_model=DraftView, status_code=201)
def copy_box(box_id: str, draft: ShipmentDraft = Depends(get_draft)):
    try:
        draft.copy_box(box_id)
    except ShipmentValidationError as e:
        raise http_error(e)
    return _view(draft)


@router.delete("/boxes/{box_id}", response_model=DraftView)
def remove_box(box_id: str, draft: ShipmentDraft = Depends(get_draft)):
    try:
        draft.remove_box(box_id)
    except ShipmentValidationError as e:
        raise http_error(e)
    return _view(draft)


@router.post("/boxes/{box_id}/products", response_model=DraftView, status_code=201)
def add_product(box_id: str, line: ProductLineSpec, draft: ShipmentDraft = Depends(get_draft)):
    try:
        draft.add_product_to_box(box_id, line)
    except ShipmentValidationError as e:
        raise http_error(e)
    return _view(draft)


@router.delete("/boxes/{box_id}/products/{line_id}", response_model=DraftView)
def remove_product(box_id: str, line_id: str, draft: ShipmentDraft = Depends(get_draft)):
    try:
        draft.remove_product_from_box(box_id, line_id)
    except ShipmentValidationError as e:
        raise http_error(e)
    return _view(draft)


@router.post("/submit", response_model=DraftSubmitted, status_code=201)
def submit_draft(
    header: DraftSubmit,
    request: Request,
    draft: ShipmentDraft = Depends(get_draft),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    stored = []

    def persist(document):
        stored.append(insert_shipment(db, document, current_user.id))

    try:
        draft.submit(header, persist=persist)
    except ShipmentValidationError as e:
        write_log(db, user_id=current_user.id, action="DRAFT_SUBMIT", resource="shipments",
                  status="FAIL", ip=client_ip(request), meta=e.to_dict())
        raise http_error(e)

    row = stored[0]
    write_log(db, user_id=current_user.id, action="DRAFT_SUBMIT", resource="shipments",
              resource_id=row.id, ip=client_ip(request), meta={"invoice_no": row.invoice_no})

    view = shipment_view(row)
    return DraftSubmitted(shipment=view, quantity_check=view["quantityCheck"])
