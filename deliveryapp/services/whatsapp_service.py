"""
WhatsApp deep links. Opening the link is fire-and-forget: nothing waits for
the message to be sent and nothing is retried.
"""
import logging
import re
from decimal import Decimal
from typing import Iterable, List, Optional, Protocol
from urllib.parse import quote

from deliveryapp.config import settings
from deliveryapp.cart.line_item import line_total
from deliveryapp.constants.order_status import STATUS_MESSAGES, OrderStatus

logger = logging.getLogger(__name__)


def digits_only(phone: Optional[str]) -> str:
    return re.sub(r"\D", "", phone or "")


def money(value) -> str:
    return f"R$ {Decimal(value):.2f}"


def build_whatsapp_url(phone: str, message: str) -> str:
    return f"{settings.WHATSAPP_BASE_URL.rstrip('/')}/{digits_only(phone)}?text={quote(message, safe='')}"


# -------------------------
# MESSAGES
# -------------------------

def compose_new_order_message(
    *,
    order_id: str,
    customer_name: str,
    customer_phone: str,
    items: Iterable,
    subtotal: Decimal,
    delivery_fee: Decimal,
    total: Decimal,
    address: str,
    payment_label: str,
) -> str:
    lines = []
    for item in items:
        lines.append(f"• {item.quantity}x {item.product_name} - {money(line_total(item))}")
        for add_on in item.selected_add_ons:
            lines.append(f"   + {add_on.name}")

    items_list = "\n".join(lines)

    return (
        f"🛍️ *Novo Pedido #{order_id[:8]}*\n"
        "\n"
        f"👤 *Cliente:* {customer_name}\n"
        f"📱 *Telefone:* {customer_phone}\n"
        "\n"
        "📦 *Itens do Pedido:*\n"
        f"{items_list}\n"
        "\n"
        f"💰 *Subtotal:* {money(subtotal)}\n"
        f"🚚 *Taxa de Entrega:* {money(delivery_fee)}\n"
        f"💵 *Total:* {money(total)}\n"
        "\n"
        "📍 *Endereço de Entrega:*\n"
        f"{address}\n"
        "\n"
        f"💳 *Forma de Pagamento:* {payment_label}\n"
        "\n"
        "✅ Aguardando confirmação!"
    )


def compose_status_message(customer_name: str, order_id: str, status) -> str:
    return (
        f"Olá {customer_name}! 🚀\n\n"
        f"Seu pedido #{order_id[:8]} está agora: *{STATUS_MESSAGES[OrderStatus(status).value]}*\n\n"
        "Obrigado pela preferência!"
    )


def compose_rejection_message(customer_name: str, order_id: str, reason: str) -> str:
    return (
        f"Olá {customer_name}! 😔\n\n"
        f"Infelizmente precisamos rejeitar seu pedido #{order_id[:8]}.\n\n"
        f"*Motivo:* {reason.strip()}\n\n"
        "Pedimos desculpas pelo inconveniente."
    )


def compose_contact_message(customer_name: str, order_id: str) -> str:
    return f"Olá {customer_name}! Tudo bem?\n\nSobre o pedido #{order_id[:8]}..."


# -------------------------
# DEEP LINK PORT
# -------------------------

class DeepLinkPort(Protocol):
    def open(self, url: str) -> None: ...


class ResponseDeepLink:
    """Collects opened links so the HTTP response can hand them to the browser."""

    def __init__(self):
        self.opened: List[str] = []

    def open(self, url: str):
        logger.info(f"Deep link queued for {url.split('?', 1)[0]}")
        self.opened.append(url)

    @property
    def last_url(self) -> Optional[str]:
        return self.opened[-1] if self.opened else None
