"""
Checkout: turn the cart into an order, relay it to the merchant on WhatsApp
and clear the cart once the order is safely stored.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from deliveryapp.constants.order_status import OrderStatus
from deliveryapp.services.settings_service import WHATSAPP_NUMBER_KEY, get_setting
from deliveryapp.services.whatsapp_service import (
    DeepLinkPort,
    build_whatsapp_url,
    compose_new_order_message,
    digits_only,
)

logger = logging.getLogger(__name__)

PAYMENT_LABELS = {
    "money": "Dinheiro",
    "card": "Cartão na Entrega",
}


class CheckoutError(Exception):
    pass


@dataclass
class CheckoutResult:
    order: object
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    whatsapp_url: str


def flatten_address(address: str, number: str, neighborhood: str,
                    complement: Optional[str] = None) -> str:
    complement = (complement or "").strip()
    suffix = f" - {complement}" if complement else ""
    return f"{address}, {number}{suffix} - {neighborhood}"


def merchant_whatsapp_number(store) -> str:
    return digits_only(get_setting(store, WHATSAPP_NUMBER_KEY))


def submit_order(store, cart, form, *, user_id=None, delivery_fee: Decimal,
                 deep_link: DeepLinkPort) -> CheckoutResult:
    items = cart.snapshot()
    if not items:
        raise CheckoutError("Seu carrinho está vazio.")

    merchant_number = merchant_whatsapp_number(store)
    if not merchant_number:
        raise CheckoutError("O número do WhatsApp não está configurado. Entre em contato com a loja.")

    subtotal = cart.total
    total = subtotal + delivery_fee
    address = flatten_address(form.address, form.number, form.neighborhood, form.complement)
    payment_label = PAYMENT_LABELS[form.payment]

    # order and items land in one commit so realtime views see them together
    with store.transaction():
        order = store.insert("orders", {
            "user_id": user_id,
            "customer_name": form.name,
            "customer_phone": form.phone,
            "delivery_address": address,
            "payment_method": payment_label,
            "total": total,
            "status": OrderStatus.pending.value,
        })[0]

        store.insert("order_items", [
            {
                "order_id": order.id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "product_image": item.product_image,
                "product_price": item.product_price,
                "quantity": item.quantity,
                "add_ons": [a.model_dump(mode="json") for a in item.selected_add_ons],
            }
            for item in items
        ])

    logger.info(f"Order {order.id} created with {len(items)} line(s), total {total}")

    message = compose_new_order_message(
        order_id=order.id,
        customer_name=form.name,
        customer_phone=form.phone,
        items=items,
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=total,
        address=address,
        payment_label=payment_label,
    )
    whatsapp_url = build_whatsapp_url(merchant_number, message)
    deep_link.open(whatsapp_url)

    cart.clear_cart()

    return CheckoutResult(
        order=order,
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=total,
        whatsapp_url=whatsapp_url,
    )
