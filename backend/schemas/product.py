# backend/schemas/product.py
from datetime import datetime
from pydantic import AfterValidator, BaseModel, Field, ConfigDict
from typing import Annotated, Optional, List


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _norm_sku(value: str) -> str:
    sku = value.strip().upper()
    if not sku:
        raise ValueError("SKU is required")
    if len(sku) > 20:
        raise ValueError("SKU cannot be more than 20 characters")
    return sku


Sku = Annotated[str, AfterValidator(_norm_sku)]


# Schema for creating a new product
class ProductCreate(BaseModel):
    sku: Sku
    product_name: str = Field(..., min_length=1, max_length=150)
    origin: Optional[str] = Field(None, max_length=50)
    category_id: int
    is_active: bool = True


# Schema for partial product updates
class ProductEditRequest(BaseModel):
    """Schema for PUT/PATCH requests - all fields optional."""
    sku: Optional[Sku] = None
    product_name: Optional[str] = Field(None, min_length=1, max_length=150)
    origin: Optional[str] = Field(None, max_length=50)
    category_id: Optional[int] = None
    is_active: Optional[bool] = None


# Full product representation including ID
class ProductOut(ORMBase):
    id: int
    sku: str
    product_name: str
    origin: Optional[str] = None
    category_id: int
    is_active: bool
    created_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(BaseModel):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int


# Result of a catalog SKU lookup
class SkuLookup(BaseModel):
    id: int
    sku: str
    product_name: str
    category_id: Optional[int] = None
