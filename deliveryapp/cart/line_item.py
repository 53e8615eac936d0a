from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SelectedAddOn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal = Field(ge=0)


class CartLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    product_id: str
    product_name: str
    product_price: Decimal = Field(ge=0)
    product_image: Optional[str] = None
    quantity: int = Field(ge=1)
    selected_add_ons: List[SelectedAddOn] = Field(default_factory=list)


Fingerprint = Tuple[str, Tuple[str, ...]]

_items_adapter = TypeAdapter(List[CartLineItem])


def fingerprint(product_id: str, add_ons: Iterable) -> Fingerprint:
    """
    Identity of a purchasable configuration: the product plus the *set* of
    add-on ids, so selection order never splits a line.
    """
    ids = sorted({a.id if hasattr(a, "id") else a["id"] for a in add_ons})
    return (product_id, tuple(ids))


def item_fingerprint(item: CartLineItem) -> Fingerprint:
    return fingerprint(item.product_id, item.selected_add_ons)


def unit_price(item: CartLineItem) -> Decimal:
    return item.product_price + sum((a.price for a in item.selected_add_ons), Decimal("0"))


def line_total(item: CartLineItem) -> Decimal:
    return unit_price(item) * item.quantity


def serialize(items: List[CartLineItem]) -> str:
    return _items_adapter.dump_json(items).decode("utf-8")


def deserialize(raw: str) -> List[CartLineItem]:
    """Raises ValueError for anything that is not a valid cart."""
    items = _items_adapter.validate_json(raw)

    seen = set()
    for item in items:
        key = item_fingerprint(item)
        if key in seen:
            raise ValueError(f"Duplicate line for product {item.product_id}")
        seen.add(key)

    return items
