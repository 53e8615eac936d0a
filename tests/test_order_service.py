from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from deliveryapp.constants.order_status import OrderStatus, next_actions
from deliveryapp.realtime import OrderBoard
from deliveryapp.services.order_service import (
    InvalidTransition,
    apply_status_change,
    get_order_view,
    load_orders,
    reject_order,
    render_receipt,
    status_whatsapp_url,
    update_status,
)
from deliveryapp.store.errors import StoreError


@pytest.fixture
def order(store):
    with store.transaction():
        order = store.insert("orders", {
            "customer_name": "Ana",
            "customer_phone": "(11) 98888-7777",
            "delivery_address": "Rua A, 1 - Centro",
            "payment_method": "Dinheiro",
            "total": Decimal("31.00"),
        })[0]
        store.insert("order_items", {
            "order_id": order.id,
            "product_name": "X-Burger",
            "product_price": Decimal("10.00"),
            "quantity": 2,
            "add_ons": [{"id": "b", "name": "Bacon", "price": "3.00"}],
        })
    return order


def test_allowed_transitions():
    assert next_actions("pending") == ["preparing", "rejected"]
    assert next_actions("preparing") == ["delivering"]
    assert next_actions("delivered") == []


def test_update_status_follows_lifecycle(store, order):
    for status in ("preparing", "delivering", "delivered"):
        update_status(store, order.id, status)

    assert store.get("orders", order.id).status == "delivered"


def test_illegal_transition(store, order):
    with pytest.raises(InvalidTransition):
        update_status(store, order.id, "delivered")

    assert store.get("orders", order.id).status == "pending"


def test_rejection_requires_reason(store, order):
    with pytest.raises(InvalidTransition):
        reject_order(store, order.id, "   ")

    reject_order(store, order.id, " Sem estoque ")
    rejected = store.get("orders", order.id)
    assert rejected.status == "rejected"
    assert rejected.rejection_reason == "Sem estoque"


def test_load_orders_newest_first_with_items(store, order):
    newer = store.insert("orders", {
        "customer_name": "Bruno",
        "customer_phone": "11977776666",
        "delivery_address": "Rua B, 2 - Vila",
        "payment_method": "Cartão na Entrega",
        "total": Decimal("15.00"),
        "created_at": datetime.utcnow() + timedelta(minutes=5),
    })[0]

    views = load_orders(store)

    assert [v.id for v in views] == [newer.id, order.id]
    assert views[1].items[0].line_total == Decimal("26.00")


def test_two_phase_change_confirms(store, order):
    board = OrderBoard([get_order_view(store, order.id)])

    view = apply_status_change(board, store, order.id, "preparing")

    assert view.status == OrderStatus.preparing
    assert view.pending is False
    assert board.get(order.id).status == OrderStatus.preparing


def test_two_phase_change_rolls_back_on_write_failure(store, order, monkeypatch):
    board = OrderBoard([get_order_view(store, order.id)])
    seen = []

    def broken_update(table, record_id, fields):
        seen.append(board.get(order.id))
        raise StoreError("connection lost")

    monkeypatch.setattr(store, "update", broken_update)

    with pytest.raises(StoreError):
        apply_status_change(board, store, order.id, "preparing")

    # proposed state was visible while the write was in flight
    assert seen[0].pending is True
    assert seen[0].status == OrderStatus.preparing

    restored = board.get(order.id)
    assert restored.status == OrderStatus.pending
    assert restored.pending is False


def test_two_phase_change_validates_before_touching_board(store, order):
    board = OrderBoard([get_order_view(store, order.id)])

    with pytest.raises(InvalidTransition):
        apply_status_change(board, store, order.id, "delivered")

    assert board.get(order.id).status == OrderStatus.pending


def test_status_whatsapp_url(store, order):
    view = get_order_view(store, order.id)
    assert status_whatsapp_url(view) is None

    update_status(store, order.id, "preparing")
    url = status_whatsapp_url(get_order_view(store, order.id))
    assert url.startswith("https://wa.me/11988887777?text=")


def test_receipt(store, order):
    html = render_receipt(get_order_view(store, order.id), "Burger House", font_size=14, width=350)

    assert "<h1>Burger House</h1>" in html
    assert f"#{order.id[:8]}" in html
    assert "max-width: 350px" in html
    assert "font-size: 20px" in html
    assert "R$ 26.00" in html
    assert "R$ 31.00" in html
    assert "Pendente" in html


def test_receipt_rejects_unknown_sizes(store, order):
    view = get_order_view(store, order.id)

    with pytest.raises(ValueError):
        render_receipt(view, "Burger House", font_size=13)
    with pytest.raises(ValueError):
        render_receipt(view, "Burger House", width=500)
