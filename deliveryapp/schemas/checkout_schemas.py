from typing import Literal, Optional

from pydantic import BaseModel, field_validator


class CheckoutRequest(BaseModel):
    name: str
    phone: str
    address: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    payment: Literal["money", "card"] = "money"

    @field_validator("name", "phone", "address", "number", "neighborhood")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Campo obrigatório")
        return value.strip()
