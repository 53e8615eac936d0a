from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlmodel import SQLModel, Field


class AddOn(SQLModel, table=True):
    __tablename__ = "add_ons"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True)
    price: Decimal = Field(default=0, max_digits=10, decimal_places=2)
    created_at: datetime = Field(default_factory=datetime.utcnow)
