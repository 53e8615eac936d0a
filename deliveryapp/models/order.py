from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field

from deliveryapp.constants.order_status import OrderStatus


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)

    customer_name: str
    customer_phone: str
    delivery_address: str
    payment_method: str

    total: Decimal = Field(default=0, max_digits=10, decimal_places=2)

    status: str = Field(default=OrderStatus.pending.value, index=True)
    rejection_reason: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
