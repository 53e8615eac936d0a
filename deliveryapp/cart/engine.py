"""
Shopping cart for one shopper session.

The line items live in memory and are mirrored to durable storage after
every mutation. Storage is best-effort: read failures start an empty cart,
write failures are logged and the in-memory cart stays authoritative.
"""
import logging
from decimal import Decimal
from typing import Callable, Iterable, List, Optional
from uuid import uuid4

from deliveryapp.cart.line_item import (
    CartLineItem,
    SelectedAddOn,
    deserialize,
    fingerprint,
    item_fingerprint,
    line_total,
    serialize,
)
from deliveryapp.cart.storage import KeyValueStorage

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "deliveryapp_cart"

Feedback = Callable[[str, str], None]


class CartEngine:
    def __init__(self, storage: KeyValueStorage, key: str = CART_STORAGE_KEY,
                 feedback: Optional[Feedback] = None):
        self.storage = storage
        self.key = key
        self.feedback = feedback
        self._items: List[CartLineItem] = self._load()

    # -------------------------
    # PERSISTENCE
    # -------------------------

    def _load(self) -> List[CartLineItem]:
        try:
            raw = self.storage.get(self.key)
        except UnicodeDecodeError as e:
            logger.error(f"Discarding undecodable cart {self.key}: {e}")
            self._erase()
            return []
        except OSError as e:
            logger.error(f"Could not read cart {self.key}: {e}")
            return []

        if raw is None:
            return []

        try:
            return deserialize(raw)
        except ValueError as e:
            logger.error(f"Discarding unreadable cart {self.key}: {e}")
            self._erase()
            return []

    def _persist(self):
        try:
            self.storage.set(self.key, serialize(self._items))
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Could not persist cart {self.key}: {e}")

    def _erase(self):
        try:
            self.storage.remove(self.key)
        except OSError as e:
            logger.error(f"Could not erase cart {self.key}: {e}")

    def _notify(self, title: str, description: str):
        if self.feedback is None:
            return
        try:
            self.feedback(title, description)
        except Exception:
            logger.exception("Cart feedback handler failed")

    # -------------------------
    # MUTATIONS
    # -------------------------

    def add_item(
        self,
        product_id: str,
        name: str,
        unit_price: Decimal,
        image: Optional[str] = None,
        quantity: int = 1,
        selected_add_ons: Iterable = (),
    ) -> CartLineItem:
        if not quantity or quantity < 1:
            quantity = 1

        add_ons = [
            a if isinstance(a, SelectedAddOn) else SelectedAddOn.model_validate(a)
            for a in selected_add_ons
        ]
        key = fingerprint(product_id, add_ons)

        existing = next((i for i in self._items if item_fingerprint(i) == key), None)
        if existing is not None:
            updated = self.update_quantity(existing.id, existing.quantity + quantity)
            self._notify(
                "Quantidade atualizada",
                f"{name} teve sua quantidade aumentada no carrinho.",
            )
            return updated

        item = CartLineItem(
            id=str(uuid4()),
            product_id=product_id,
            product_name=name,
            product_price=Decimal(str(unit_price)),
            product_image=image,
            quantity=quantity,
            selected_add_ons=add_ons,
        )
        self._items.append(item)
        self._persist()
        self._notify("Produto adicionado", f"{name} foi adicionado ao carrinho")
        return item

    def remove_item(self, line_id: str):
        self._items = [i for i in self._items if i.id != line_id]
        self._persist()
        self._notify("Produto removido", "O produto foi removido do carrinho")

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLineItem]:
        if quantity < 1:
            self.remove_item(line_id)
            return None

        updated = None
        for index, item in enumerate(self._items):
            if item.id == line_id:
                updated = item.model_copy(update={"quantity": quantity})
                self._items[index] = updated
                break

        self._persist()
        return updated

    def clear_cart(self):
        self._items = []
        self._erase()
        self._notify("Carrinho limpo", "Todos os itens foram removidos do carrinho")

    # -------------------------
    # READS
    # -------------------------

    @property
    def items(self) -> List[CartLineItem]:
        return list(self._items)

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self._items)

    @property
    def total(self) -> Decimal:
        return sum((line_total(i) for i in self._items), Decimal("0"))

    def get(self, line_id: str) -> Optional[CartLineItem]:
        return next((i for i in self._items if i.id == line_id), None)

    def snapshot(self) -> List[CartLineItem]:
        return self.items
