from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from sqlalchemy import String, Text, Integer, Numeric, DateTime, ForeignKey, Index
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
import uuid
from agri_api.db.session import Base

def new_id() -> str: return str(uuid.uuid4())

def utcnow() -> datetime: return datetime.now(timezone.utc).replace(tzinfo=None)

def category_key(name: str) -> str:
    """Comparison key for category names; casefold covers non-ASCII letters."""
    return name.strip().casefold()

class User(Base):
    __tablename__='users'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(200))
    address: Mapped[Optional[str]] = mapped_column(String(300))
    phone_number: Mapped[Optional[str]] = mapped_column(String(32))
    # NULL until a role is assigned; login refuses such accounts
    role: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow, onupdate=utcnow)
    products = relationship('Product', back_populates='farmer', cascade='all, delete-orphan', passive_deletes=True)

class Category(Base):
    __tablename__='categories'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    name_key: Mapped[str] = mapped_column(String(120), nullable=False)
    __table_args__ = (Index('uq_categories_name_key', 'name_key', unique=True),)
    # passive_deletes='all' keeps the ORM from nulling product.category_id; the FK refuses the delete
    products = relationship('Product', back_populates='category', passive_deletes='all')

    @validates('name')
    def _sync_name_key(self, _key, value):
        self.name_key = category_key(value)
        return value

class Product(Base):
    __tablename__='products'
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    production_date: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    farmer_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    category_id: Mapped[str] = mapped_column(ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False, index=True)
    farmer = relationship('User', back_populates='products')
    category = relationship('Category', back_populates='products')
