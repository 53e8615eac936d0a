from typing import List, Optional


def list_products(store, category: Optional[str] = None) -> list:
    eq = {"category": category} if category else None
    return store.select("products", eq=eq, order_by="created_at", desc=True)


def get_product(store, product_id: str):
    return store.get("products", product_id)


def product_add_on_ids(store, product_id: str) -> List[str]:
    return [r.add_on_id for r in store.select("product_add_ons", eq={"product_id": product_id})]


def product_add_ons(store, product_id: str) -> list:
    """Add-ons offered with a product, cheapest first."""
    ids = product_add_on_ids(store, product_id)
    if not ids:
        return []
    return store.select("add_ons", in_={"id": ids}, order_by="price")


def list_categories(store) -> list:
    categories = store.select("categories", order_by="name")
    return sorted(categories, key=lambda c: c.position)
