import logging

from deliveryapp.services.product_service import CatalogError, parse_price
from deliveryapp.store.errors import RecordNotFound

logger = logging.getLogger(__name__)


def list_add_ons(store) -> list:
    return store.select("add_ons", order_by="name")


def create_add_on(store, name: str, price):
    if not (name or "").strip():
        raise CatalogError("Informe o nome do adicional")
    return store.insert("add_ons", {"name": name.strip(), "price": parse_price(price)})[0]


def update_add_on(store, add_on_id: str, name=None, price=None):
    changes = {}
    if name is not None:
        if not name.strip():
            raise CatalogError("Informe o nome do adicional")
        changes["name"] = name.strip()
    if price is not None:
        changes["price"] = parse_price(price)
    return store.update("add_ons", add_on_id, changes)


def delete_add_on(store, add_on_id: str):
    if store.get("add_ons", add_on_id) is None:
        raise RecordNotFound("add_ons", add_on_id)

    with store.transaction():
        store.delete("product_add_ons", eq={"add_on_id": add_on_id})
        store.delete("add_ons", eq={"id": add_on_id})

    logger.info(f"Add-on {add_on_id} deleted")
