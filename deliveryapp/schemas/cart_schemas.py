from typing import List

from pydantic import BaseModel


class CartAddRequest(BaseModel):
    product_id: str
    quantity: int = 1
    add_on_ids: List[str] = []


class CartUpdateRequest(BaseModel):
    quantity: int
