"""Admin-side product management, including image upload and add-on links."""
import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from slugify import slugify

from deliveryapp.store.errors import RecordNotFound, StorageUploadError

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    pass


def parse_price(value) -> Decimal:
    try:
        price = Decimal(str(value).replace(",", "."))
    except (InvalidOperation, ValueError):
        raise CatalogError("Preço inválido")
    if not price.is_finite() or price < 0:
        raise CatalogError("Preço inválido")
    return price.quantize(Decimal("0.01"))


def validate_product_fields(name: Optional[str], price, category: Optional[str]):
    if not (name or "").strip() or price in (None, "") or not (category or "").strip():
        raise CatalogError("Preencha nome, preço e categoria.")


def upload_product_image(blobs, data: bytes, filename: Optional[str], product_name: str = "",
                         content_type: Optional[str] = None) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "jpg"
    stem = slugify(product_name) or "produto"
    path = f"{stem}-{uuid.uuid4().hex[:12]}.{ext}"

    if not blobs.upload(path, data, content_type=content_type):
        raise StorageUploadError(path)

    return blobs.get_public_url(path)


def _link_add_ons(store, product_id: str, add_on_ids: Iterable[str]):
    rows = [{"product_id": product_id, "add_on_id": a} for a in dict.fromkeys(add_on_ids)]
    if rows:
        store.insert("product_add_ons", rows)


def create_product(store, *, name: str, price, category: str, description: Optional[str] = None,
                   image_url: Optional[str] = None, add_on_ids: Iterable[str] = ()):
    validate_product_fields(name, price, category)

    with store.transaction():
        product = store.insert("products", {
            "name": name.strip(),
            "description": (description or "").strip() or None,
            "price": parse_price(price),
            "category": category.strip(),
            "image_url": image_url,
        })[0]
        _link_add_ons(store, product.id, add_on_ids)

    logger.info(f"Product {product.id} created")
    return product


def update_product(store, product_id: str, *, name: str, price, category: str,
                   description: Optional[str] = None, image_url: Optional[str] = None,
                   add_on_ids: Iterable[str] = ()):
    validate_product_fields(name, price, category)

    fields = {
        "name": name.strip(),
        "description": (description or "").strip() or None,
        "price": parse_price(price),
        "category": category.strip(),
    }
    # keep the current image unless a new one was uploaded
    if image_url:
        fields["image_url"] = image_url

    with store.transaction():
        product = store.update("products", product_id, fields)
        store.delete("product_add_ons", eq={"product_id": product_id})
        _link_add_ons(store, product_id, add_on_ids)

    logger.info(f"Product {product_id} updated")
    return product


def delete_product(store, product_id: str):
    if store.get("products", product_id) is None:
        raise RecordNotFound("products", product_id)

    with store.transaction():
        store.delete("product_add_ons", eq={"product_id": product_id})
        store.delete("products", eq={"id": product_id})

    logger.info(f"Product {product_id} deleted")
