# backend/models/category.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Top level grouping of product categories
class SuperCategory(Base):
    __tablename__ = "super_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    categories = relationship("Category", back_populates="super_category", cascade="all, delete-orphan")

# Category names are unique within their super category only
class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("name", "super_category_id", name="uq_category_name_super"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    super_category_id = Column(Integer, ForeignKey("super_categories.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    super_category = relationship("SuperCategory", back_populates="categories")
