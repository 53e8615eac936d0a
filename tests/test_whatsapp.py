from decimal import Decimal
from urllib.parse import parse_qs, urlparse

from deliveryapp.cart.line_item import CartLineItem, SelectedAddOn
from deliveryapp.services.whatsapp_service import (
    ResponseDeepLink,
    build_whatsapp_url,
    compose_new_order_message,
    compose_rejection_message,
    compose_status_message,
    digits_only,
)


def test_digits_only():
    assert digits_only("+55 (11) 91234-5678") == "5511912345678"
    assert digits_only(None) == ""


def test_url_has_digits_and_encoded_text():
    url = build_whatsapp_url("+55 (11) 91234-5678", "Olá! Pedido #1 & cia")
    parsed = urlparse(url)

    assert parsed.netloc == "wa.me"
    assert parsed.path == "/5511912345678"
    assert parse_qs(parsed.query)["text"] == ["Olá! Pedido #1 & cia"]
    assert " " not in url


def test_new_order_message():
    items = [
        CartLineItem(
            id="1", product_id="burger", product_name="X-Burger", product_price=Decimal("10"),
            quantity=2, selected_add_ons=[SelectedAddOn(id="b", name="Bacon", price=Decimal("3"))],
        ),
    ]

    message = compose_new_order_message(
        order_id="0123456789abcdef",
        customer_name="Ana",
        customer_phone="11988887777",
        items=items,
        subtotal=Decimal("26"),
        delivery_fee=Decimal("5"),
        total=Decimal("31"),
        address="Rua A, 10 - Centro",
        payment_label="Dinheiro",
    )

    assert message.startswith("🛍️ *Novo Pedido #01234567*")
    assert "• 2x X-Burger - R$ 26.00" in message
    assert "   + Bacon" in message
    assert "🚚 *Taxa de Entrega:* R$ 5.00" in message
    assert "💵 *Total:* R$ 31.00" in message
    assert "💳 *Forma de Pagamento:* Dinheiro" in message
    assert message.endswith("✅ Aguardando confirmação!")


def test_status_and_rejection_messages():
    status = compose_status_message("Ana", "0123456789abcdef", "delivering")
    rejection = compose_rejection_message("Ana", "0123456789abcdef", "  Sem estoque ")

    assert "Seu pedido #01234567 está agora: *Pedido saiu para entrega*" in status
    assert "*Motivo:* Sem estoque\n" in rejection


def test_response_deep_link_records_urls():
    link = ResponseDeepLink()
    assert link.last_url is None

    link.open("https://wa.me/1?text=a")
    link.open("https://wa.me/2?text=b")

    assert link.opened == ["https://wa.me/1?text=a", "https://wa.me/2?text=b"]
    assert link.last_url == "https://wa.me/2?text=b"
