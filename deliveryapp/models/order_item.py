from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)

    # snapshot of the product at checkout time, independent of the catalog
    product_id: Optional[str] = None
    product_name: str
    product_image: Optional[str] = None
    product_price: Decimal = Field(default=0, max_digits=10, decimal_places=2)
    quantity: int
    add_ons: Optional[List[dict]] = Field(default=None, sa_column=Column(JSON))
