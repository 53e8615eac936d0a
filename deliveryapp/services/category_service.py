import logging
from typing import Optional

from deliveryapp.services.product_service import CatalogError
from deliveryapp.store.errors import RecordNotFound

logger = logging.getLogger(__name__)


def create_category(store, name: str, icon: Optional[str] = None,
                    image_icon: Optional[str] = None, position: int = 0):
    name = (name or "").strip()
    if not name:
        raise CatalogError("Informe o nome da categoria")
    if store.maybe_single("categories", name=name):
        raise CatalogError("Já existe uma categoria com esse nome")

    category = store.insert("categories", {
        "name": name,
        "icon": icon,
        "image_icon": image_icon,
        "position": position,
    })[0]
    logger.info(f"Category {name} created")
    return category


def update_category(store, category_id: str, changes: dict):
    category = store.get("categories", category_id)
    if category is None:
        raise RecordNotFound("categories", category_id)

    changes = {k: v for k, v in changes.items() if v is not None}
    new_name = changes.get("name")

    if new_name is not None:
        new_name = new_name.strip()
        if not new_name:
            raise CatalogError("Informe o nome da categoria")
        existing = store.maybe_single("categories", name=new_name)
        if existing and existing.id != category_id:
            raise CatalogError("Já existe uma categoria com esse nome")
        changes["name"] = new_name

    old_name = category.name
    with store.transaction():
        updated = store.update("categories", category_id, changes)
        # products reference categories by name
        if new_name and new_name != old_name:
            for product in store.select("products", eq={"category": old_name}):
                store.update("products", product.id, {"category": new_name})

    return updated


def delete_category(store, category_id: str):
    deleted = store.delete("categories", eq={"id": category_id})
    if not deleted:
        raise RecordNotFound("categories", category_id)
    logger.info(f"Category {category_id} deleted")
