# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Operator account; the role drives route-level permissions (ADMIN / MANAGER / OPERATOR)
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="OPERATOR")
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
