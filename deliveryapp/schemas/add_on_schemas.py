from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AddOnCreate(BaseModel):
    name: str
    price: Decimal = Field(ge=0)


class AddOnUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
