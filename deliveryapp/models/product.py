from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    description: Optional[str] = None
    price: Decimal = Field(default=0, max_digits=10, decimal_places=2)
    category: str = Field(index=True)
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ProductAddOn(SQLModel, table=True):
    __tablename__ = "product_add_ons"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    product_id: str = Field(foreign_key="products.id", index=True)
    add_on_id: str = Field(foreign_key="add_ons.id", index=True)
