"""Shapes of the API responses the web tier reads, plus its form models.

Everything coming back from the API is parsed into one of these models, so a
response with a missing field fails loudly instead of producing ``None``.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    FARMER = 'Farmer'
    EMPLOYEE = 'Employee'


# --- API responses ---

class LoginResult(BaseModel):
    token: str = Field(min_length=1)
    id: str = Field(min_length=1)


class TokenPayload(BaseModel):
    """Claims read (not verified) from the token the API handed out."""
    sub: str
    nameid: str
    role: Role
    exp: int


class FarmerDto(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None


class CategoryDto(BaseModel):
    id: str
    name: str
    number_of_products: int = 0


class ProductDto(BaseModel):
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


# --- forms ---

class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class FarmerRegisterForm(BaseModel):
    email_address: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)


class FarmerUpdateForm(BaseModel):
    email_address: EmailStr
    full_name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)


class CategoryForm(BaseModel):
    name: str = Field(min_length=1, max_length=120)


class ProductForm(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    price: Decimal = Field(gt=0)
    quantity: int = Field(ge=1)
    production_date: date
    category_id: str = Field(min_length=1)
