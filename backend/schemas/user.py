from pydantic import BaseModel, EmailStr, ConfigDict, field_validator
from typing import List, Literal, Optional

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for user registration requests
class UserCreate(UserBase):
    password: str
    name: Optional[str] = None

# Output schema for user profile details
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: str
    name: Optional[str] = None

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Role assignment by an administrator
class RoleUpdate(BaseModel):
    role: Literal["ADMIN", "MANAGER", "OPERATOR"]

    @field_validator("role", mode="before")
    @classmethod
    def upper_role(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

class UserPage(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
