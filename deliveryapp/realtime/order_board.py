import threading
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from deliveryapp.constants.order_status import OrderStatus


class OrderItemView(BaseModel):
    product_name: str
    quantity: int
    product_price: Decimal
    add_ons: List[dict] = Field(default_factory=list)

    @property
    def unit_price(self) -> Decimal:
        extras = sum((Decimal(str(a.get("price", 0))) for a in self.add_ons), Decimal("0"))
        return self.product_price + extras

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderView(BaseModel):
    id: str
    user_id: Optional[str] = None
    customer_name: str = ""
    customer_phone: str = ""
    delivery_address: str = ""
    payment_method: str = ""
    total: Decimal = Decimal("0")
    status: OrderStatus
    rejection_reason: Optional[str] = None
    created_at: datetime
    items: List[OrderItemView] = Field(default_factory=list)
    # set while a local status change waits for the store to confirm it
    pending: bool = False

    @classmethod
    def from_row(cls, row: dict, items: Iterable = ()) -> "OrderView":
        item_views = []
        for item in items:
            data = item if isinstance(item, dict) else item.model_dump()
            item_views.append(OrderItemView(
                product_name=data["product_name"],
                quantity=data["quantity"],
                product_price=data["product_price"],
                add_ons=data.get("add_ons") or [],
            ))

        fields = {k: v for k, v in row.items() if k in cls.model_fields and k != "items"}
        return cls(**fields, items=item_views)

    @property
    def short_id(self) -> str:
        return self.id[:8]


class OrderBoard:
    """Newest-first list of orders kept in sync by upserts."""

    def __init__(self, orders: Iterable[OrderView] = ()):
        self._orders: List[OrderView] = list(orders)
        self._lock = threading.RLock()

    def merge_snapshot(self, orders: Iterable[OrderView]):
        """
        Fold in an initial load that may be older than changes already
        upserted. Entries already on the board win over snapshot rows.
        """
        with self._lock:
            live = {o.id for o in self._orders}
            merged = self._orders + [o for o in orders if o.id not in live]
            merged.sort(key=lambda o: o.created_at, reverse=True)
            self._orders = merged

    def upsert(self, view: OrderView) -> bool:
        """Replace in place, or prepend when unseen. True if it was new."""
        with self._lock:
            for index, existing in enumerate(self._orders):
                if existing.id == view.id:
                    self._orders[index] = view
                    return False
            self._orders.insert(0, view)
            return True

    def get(self, order_id: str) -> Optional[OrderView]:
        with self._lock:
            return next((o for o in self._orders if o.id == order_id), None)

    @property
    def orders(self) -> List[OrderView]:
        with self._lock:
            return list(self._orders)

    def __len__(self):
        with self._lock:
            return len(self._orders)
