# backend/routes/customers.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.customer import Customer
from models.shipment import Shipment
from models.users import User
from packing.lookups import safe_resolve_customer
from schemas.customer import CustomerCreate, CustomerLookupOut, CustomerOut, CustomerPage, CustomerUpdate
from utils.audit import client_ip, write_log
from utils.lookups import DbCustomerLookup
from utils.tokenJWT import get_current_user, has_role

router = APIRouter(prefix="/customers", tags=["Customers"])

def _role_ok(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER", "OPERATOR")

def _can_edit(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER")

def _get_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer

def _check_code_free(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(Customer.id).filter(Customer.code == code)
    if exclude_id is not None:
        q = q.filter(Customer.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=409, detail="Customer code already exists")


@router.get("", response_model=CustomerPage)
def list_customers(
    search: Optional[str] = Query(None, description="Code, name, city or state"),
    group: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=10000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")

    q = db.query(Customer)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(
            Customer.code.ilike(like), Customer.name.ilike(like),
            Customer.city.ilike(like), Customer.state.ilike(like),
        ))
    if group:
        q = q.filter(Customer.group.ilike(group))
    if city:
        q = q.filter(Customer.city.ilike(city))
    if state:
        q = q.filter(Customer.state.ilike(state))
    if region:
        q = q.filter(Customer.region.ilike(region))

    total = q.count()
    items = q.order_by(Customer.name.asc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Accepts a customer id or code, the same way shipment headers do
@router.get("/resolve/{ref}", response_model=CustomerLookupOut)
def resolve_customer(
    ref: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    customer = safe_resolve_customer(DbCustomerLookup(db), ref)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer.model_dump()


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    return _get_or_404(db, customer_id)


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(
    payload: CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to add customers")
    _check_code_free(db, payload.code)

    customer = Customer(**payload.model_dump(), created_by=current_user.id)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    write_log(db, user_id=current_user.id, action="CUSTOMER_CREATE", resource="customers",
              resource_id=customer.id, ip=client_ip(request), meta={"code": customer.code})
    return customer


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to edit customers")
    customer = _get_or_404(db, customer_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("code"):
        _check_code_free(db, data["code"], exclude_id=customer.id)
    for field, value in data.items():
        if field in ("code", "name") and value is None:
            continue
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    write_log(db, user_id=current_user.id, action="CUSTOMER_UPDATE", resource="customers",
              resource_id=customer.id, ip=client_ip(request), meta={"fields": sorted(data)})
    return customer


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not has_role(current_user, "ADMIN"):
        raise HTTPException(status_code=403, detail="Only administrators can delete customers")
    customer = _get_or_404(db, customer_id)
    if db.query(Shipment.id).filter(Shipment.customer_id == customer.id).first():
        raise HTTPException(status_code=409, detail="Customer has shipments and cannot be deleted")

    db.delete(customer)
    db.commit()
    write_log(db, user_id=current_user.id, action="CUSTOMER_DELETE", resource="customers",
              resource_id=customer_id, ip=client_ip(request))
    return {"message": "Customer deleted successfully"}
