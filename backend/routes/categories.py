# backend/routes/categories.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.category import Category, SuperCategory
from models.product import Product
from models.users import User
from schemas.category import (
    CategoryIn, CategoryList, CategoryOut, CategoryUpdate, SuperCategoryIn, SuperCategoryOut,
)
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_current_user, has_role

router = APIRouter(tags=["Categories"])

def _role_ok(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER", "OPERATOR")

def _can_edit(user: User) -> bool:
    return has_role(user, "ADMIN", "MANAGER")

def _get_super_or_404(db: Session, super_category_id: int) -> SuperCategory:
    sc = db.query(SuperCategory).filter(SuperCategory.id == super_category_id).first()
    if not sc:
        raise HTTPException(status_code=404, detail="Super category not found")
    return sc

def _get_category_or_404(db: Session, category_id: int) -> Category:
    cat = (db.query(Category).options(joinedload(Category.super_category))
           .filter(Category.id == category_id).first())
    if not cat:
        raise HTTPException(status_code=404, detail="Category not found")
    return cat

def _check_category_name(db: Session, name: str, super_category_id: int, exclude_id: int = None) -> None:
    q = db.query(Category.id).filter(
        Category.name.ilike(name), Category.super_category_id == super_category_id
    )
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=409, detail="Category name already exists in this super category")


# -----------------------------
# Super categories
# -----------------------------
@router.get("/super-categories", response_model=List[SuperCategoryOut])
def list_super_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    return db.query(SuperCategory).order_by(SuperCategory.name.asc()).all()


@router.post("/super-categories", response_model=SuperCategoryOut, status_code=201)
def create_super_category(
    payload: SuperCategoryIn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    name = payload.name.strip()
    if db.query(SuperCategory.id).filter(SuperCategory.name.ilike(name)).first():
        raise HTTPException(status_code=409, detail="Super category already exists")

    sc = SuperCategory(name=name)
    db.add(sc)
    db.commit()
    db.refresh(sc)
    write_log(db, user_id=current_user.id, action="SUPER_CATEGORY_CREATE", resource="categories",
              resource_id=sc.id, ip=client_ip(request), meta={"name": sc.name})
    return sc


@router.delete("/super-categories/{super_category_id}")
def delete_super_category(
    super_category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not has_role(current_user, "ADMIN"):
        raise HTTPException(status_code=403, detail="Only administrators can delete categories")
    sc = _get_super_or_404(db, super_category_id)
    in_use = (db.query(Product.id).join(Category, Product.category_id == Category.id)
              .filter(Category.super_category_id == sc.id).first())
    if in_use:
        raise HTTPException(status_code=409, detail="Super category has products assigned")

    db.delete(sc)
    db.commit()
    write_log(db, user_id=current_user.id, action="SUPER_CATEGORY_DELETE", resource="categories",
              resource_id=super_category_id, ip=client_ip(request))
    return {"message": "Super category deleted successfully"}


# -----------------------------
# Categories
# -----------------------------
@router.get("/categories", response_model=CategoryList)
def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    items = (db.query(Category).options(joinedload(Category.super_category))
             .order_by(Category.name.asc()).all())
    return {"items": items, "total": len(items)}


@router.get("/categories/super-category/{super_category_id}", response_model=CategoryList)
def list_categories_by_super(
    super_category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    _get_super_or_404(db, super_category_id)
    items = (db.query(Category).options(joinedload(Category.super_category))
             .filter(Category.super_category_id == super_category_id)
             .order_by(Category.name.asc()).all())
    return {"items": items, "total": len(items)}


@router.get("/categories/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _role_ok(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    return _get_category_or_404(db, category_id)


@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(
    payload: CategoryIn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    _get_super_or_404(db, payload.super_category_id)
    name = payload.name.strip()
    _check_category_name(db, name, payload.super_category_id)

    cat = Category(name=name, super_category_id=payload.super_category_id)
    db.add(cat)
    db.commit()
    db.refresh(cat)
    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              resource_id=cat.id, ip=client_ip(request), meta={"name": cat.name})
    return _get_category_or_404(db, cat.id)


@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not _can_edit(current_user):
        raise HTTPException(status_code=403, detail="Not authorized")
    cat = _get_category_or_404(db, category_id)

    name = payload.name.strip() if payload.name else cat.name
    super_id = payload.super_category_id or cat.super_category_id
    if payload.super_category_id:
        _get_super_or_404(db, super_id)
    _check_category_name(db, name, super_id, exclude_id=cat.id)

    cat.name = name
    cat.super_category_id = super_id
    db.commit()
    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              resource_id=cat.id, ip=client_ip(request), meta={"name": name})
    return _get_category_or_404(db, cat.id)


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not has_role(current_user, "ADMIN"):
        raise HTTPException(status_code=403, detail="Only administrators can delete categories")
    cat = _get_category_or_404(db, category_id)
    if db.query(Product.id).filter(Product.category_id == cat.id).first():
        raise HTTPException(status_code=409, detail="Category has products assigned")

    db.delete(cat)
    db.commit()
    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              resource_id=category_id, ip=client_ip(request))
    return {"message": "Category deleted successfully"}
