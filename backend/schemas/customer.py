# schemas/customer.py
import re
from datetime import datetime
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

_CODE_RE = re.compile(r"^[A-Z0-9]+$")


def _norm_code(value: str) -> str:
    code = value.strip().upper()
    if not code:
        raise ValueError("Code is required")
    if len(code) > 20:
        raise ValueError("Code cannot be more than 20 characters")
    if not _CODE_RE.match(code):
        raise ValueError("Code must be alphanumeric")
    return code


def _norm_state_code(value: str) -> Optional[str]:
    return value.strip().upper() or None


CustomerCode = Annotated[str, AfterValidator(_norm_code)]
StateCode = Annotated[str, Field(max_length=10), AfterValidator(_norm_state_code)]


class CustomerBase(BaseModel):
    group: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    state_code: Optional[StateCode] = None


class CustomerCreate(CustomerBase):
    code: CustomerCode
    name: str = Field(..., min_length=1, max_length=150)


class CustomerUpdate(CustomerBase):
    code: Optional[CustomerCode] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    group: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    region: Optional[str] = None
    state_code: Optional[str] = None
    created_at: Optional[datetime] = None


class CustomerPage(BaseModel):
    items: List[CustomerOut]
    total: int
    page: int
    page_size: int


class CustomerLookupOut(BaseModel):
    id: int
    code: str
    name: str
