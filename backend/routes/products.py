# backend/routes/products.py
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from utils.tokenJWT import get_current_user, has_role
from utils.audit import client_ip, write_log
from utils.lookups import DbCatalogLookup
from models.users import User
from models.product import Product
from models.category import Category
import schemas.product as product_schemas

router = APIRouter(tags=["Products"])

# ---- HELPERS ----
def _role_ok(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER", "OPERATOR")

def _can_edit(user: User) -> bool:
    """Catalog changes are for ADMIN/MANAGER."""
    return has_role(user, "ADMIN", "MANAGER")

def _get_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

def _check_category(db: Session, category_id: int) -> None:
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise HTTPException(status_code=400, detail="Category not found")

def _check_sku_free(db: Session, sku: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=409, detail="Product SKU already exists")


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    search: Optional[str] = Query(None, description="SKU or product name"),
    category_id: Optional[int] = Query(None),
    active: bool = Query(True, description="Active (true) or deactivated (false) products"),
    page: int = Query(1, ge=1),
    # Forms load the whole catalog for SKU autocomplete
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=10000),
    sort_by: str = Query("sku"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to view products")

    query = db.query(Product)
    if search:
        like = f"%{search.strip()}%"
        query = query.filter(or_(Product.sku.ilike(like), Product.product_name.ilike(like)))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    query = query.filter(Product.is_active.is_(active))

    allowed = {
        "id": Product.id, "sku": Product.sku, "product_name": Product.product_name,
        "created_at": Product.created_at,
    }
    sort_col = allowed.get(sort_by.lower(), Product.sku)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# =========================
# CATALOG LOOKUP
# =========================
@router.get("/products/sku/{sku}", response_model=product_schemas.SkuLookup)
def resolve_sku(
    sku: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    product = DbCatalogLookup(db).resolve_sku(sku)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product with SKU {sku.strip().upper()} not found")
    return product.model_dump()


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    return _get_or_404(db, product_id)


@router.post("/products", response_model=product_schemas.ProductOut, status_code=201)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to add products")

    _check_sku_free(db, payload.sku)
    _check_category(db, payload.category_id)

    product = Product(**payload.model_dump(), created_by=current_user.id)
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"sku": product.sku})
    return product


@router.put("/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to edit products")
    product = _get_or_404(db, product_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("sku"):
        _check_sku_free(db, data["sku"], exclude_id=product.id)
    if data.get("category_id") is not None:
        _check_category(db, data["category_id"])

    for field, value in data.items():
        if value is not None:
            setattr(product, field, value)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"fields": sorted(data)})
    return product


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not has_role(current_user, "ADMIN"):
        raise HTTPException(status_code=403, detail="Only administrators can delete products")
    product = _get_or_404(db, product_id)

    # Soft delete; shipments keep referencing the product
    product.is_active = False
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              resource_id=product.id, ip=client_ip(request), meta={"sku": product.sku})
    return {"message": "Product deleted successfully"}
