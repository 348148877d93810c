# schemas/category.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SuperCategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class SuperCategoryOut(ORMBase):
    id: int
    name: str
    created_at: Optional[datetime] = None


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    super_category_id: int


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    super_category_id: Optional[int] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    super_category_id: int
    super_category: Optional[SuperCategoryOut] = None
    created_at: Optional[datetime] = None


class CategoryList(BaseModel):
    items: List[CategoryOut]
    total: int
