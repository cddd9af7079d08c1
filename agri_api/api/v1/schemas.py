from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import re

from agri_api.security.utils import Role

_PHONE_RE = re.compile(r'^\+?[0-9][0-9 ()\-]{5,19}$')

def _check_password(v: str) -> str:
    if not (re.search(r'[a-z]', v) and re.search(r'[A-Z]', v)
            and re.search(r'\d', v) and re.search(r'[\W_]', v)):
        raise ValueError('Password must contain at least one uppercase letter, one lowercase letter, '
                         'one number, and one special character.')
    return v

def _check_phone(v: str) -> str:
    if not _PHONE_RE.match(v.strip()):
        raise ValueError('Not a valid Phone Number')
    return v.strip()

# --- auth ---

class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class LoginResult(BaseModel):
    token: str
    id: str

class EmployeeRegisterPayload(BaseModel):
    email_address: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=200)
    phone_number: str

    @field_validator('password')
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password(v)

    @field_validator('phone_number')
    @classmethod
    def phone_format(cls, v: str) -> str:
        return _check_phone(v)

class FarmerRegisterPayload(EmployeeRegisterPayload):
    address: str = Field(min_length=1, max_length=300)

# --- farmer accounts ---

class FarmerUpdatePayload(BaseModel):
    email_address: EmailStr
    full_name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=300)
    phone_number: str

    @field_validator('phone_number')
    @classmethod
    def phone_format(cls, v: str) -> str:
        return _check_phone(v)

class FarmerRead(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    role: Optional[Role] = None
    class Config: from_attributes = True

# --- categories ---

class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Category name is required')
        return v

class CategoryRead(BaseModel):
    id: str
    name: str
    number_of_products: int = 0

# --- products ---

class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    quantity: int = Field(ge=1)
    production_date: datetime
    category_id: str = Field(min_length=1)

class ProductCreate(ProductBase): pass

class ProductUpdate(ProductBase): pass

class ProductRead(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
    quantity: int
    production_date: datetime
    farmer_id: str
    category_id: str
    farmer_name: Optional[str] = None
    category_name: Optional[str] = None

    @classmethod
    def from_model(cls, p) -> 'ProductRead':
        return cls(
            id=p.id, name=p.name, description=p.description or '', price=p.price,
            quantity=p.quantity, production_date=p.production_date,
            farmer_id=p.farmer_id, category_id=p.category_id,
            farmer_name=p.farmer.full_name if p.farmer else None,
            category_name=p.category.name if p.category else None,
        )
