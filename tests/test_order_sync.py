from datetime import datetime
from decimal import Decimal

import pytest

from deliveryapp.constants.order_status import OrderStatus
from deliveryapp.realtime import AdminOrderBoard, CustomerOrderList, OrderRealtimeSync, OrderView
from deliveryapp.store.change_feed import INSERT, UPDATE, ChangeEvent, ChangeFeed
from deliveryapp.store.errors import StoreError


def order_row(order_id="order-1", status="pending", **overrides):
    row = {
        "id": order_id,
        "user_id": None,
        "customer_name": "Ana",
        "customer_phone": "11988887777",
        "delivery_address": "Rua A, 1 - Centro",
        "payment_method": "Dinheiro",
        "total": Decimal("25.00"),
        "status": status,
        "rejection_reason": None,
        "created_at": datetime(2026, 10, 17, 12, 0),
        "updated_at": datetime(2026, 10, 17, 12, 0),
    }
    row.update(overrides)
    return row


ITEMS = [{"product_name": "X-Burger", "quantity": 2, "product_price": Decimal("10"), "add_ons": []}]


@pytest.fixture
def feed():
    return ChangeFeed()


def test_duplicate_update_leaves_one_entry(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)
    sync = OrderRealtimeSync(feed, lambda order_id: ITEMS, on_insert=orders.handle_change,
                             on_update=orders.handle_change)

    with sync:
        event = ChangeEvent("orders", UPDATE, order_row(status="delivering"))
        feed.publish(event)
        feed.publish(event)

    assert len(orders.board) == 1
    assert orders.board.get("order-1").status == OrderStatus.delivering
    assert orders.board.get("order-1").items[0].line_total == Decimal("20")


def test_rejection_rings_once_and_toasts_reason(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: ITEMS, on_update=orders.handle_change):
        feed.publish(ChangeEvent("orders", UPDATE, order_row(
            status="rejected", rejection_reason="Sem estoque"
        )))

    assert sound.calls == ["once"]
    assert len(toaster.toasts) == 1
    assert "Sem estoque" in toaster.toasts[0][1]
    assert toaster.toasts[0][2] == "destructive"


def test_rejection_without_reason_uses_fallback(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: [], on_update=orders.handle_change):
        feed.publish(ChangeEvent("orders", UPDATE, order_row(status="rejected")))

    assert toaster.toasts[0][1] == "Entre em contato para mais informações."


@pytest.mark.parametrize("status,title", [
    ("preparing", "Pedido Aceito! 🎉"),
    ("delivering", "Pedido Saiu para Entrega! 🚚"),
    ("delivered", "Pedido Entregue! ✓"),
])
def test_customer_status_toasts(feed, sound, toaster, status, title):
    orders = CustomerOrderList(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: [], on_update=orders.handle_change):
        feed.publish(ChangeEvent("orders", UPDATE, order_row(status=status)))

    assert sound.calls == ["once"]
    assert [t[0] for t in toaster.toasts] == [title]


def test_pending_has_no_customer_effects(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: [], on_insert=orders.handle_change):
        feed.publish(ChangeEvent("orders", INSERT, order_row()))

    assert sound.calls == []
    assert toaster.toasts == []


def test_new_order_loops_alert_until_accepted(feed, sound, toaster):
    board = AdminOrderBoard(sound, toaster)
    sync = OrderRealtimeSync(feed, lambda order_id: ITEMS,
                             on_insert=board.handle_insert, on_update=board.handle_update)

    with sync:
        feed.publish(ChangeEvent("orders", INSERT, order_row("a")))
        feed.publish(ChangeEvent("orders", INSERT, order_row("b")))

        assert sound.calls == ["loop", "loop"]
        assert board.unread_count == 2
        assert toaster.toasts[0][0] == "🎉 Novo Pedido Recebido!"
        assert [o.id for o in board.board.orders] == ["b", "a"]

        feed.publish(ChangeEvent("orders", UPDATE, order_row("a", status="preparing")))

    assert sound.calls[-1] == "stop"
    assert [o.id for o in board.board.orders] == ["b", "a"]
    assert board.board.get("a").status == OrderStatus.preparing


def test_redelivered_insert_does_not_ring_again(feed, sound, toaster):
    board = AdminOrderBoard(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: [], on_insert=board.handle_insert):
        event = ChangeEvent("orders", INSERT, order_row())
        feed.publish(event)
        feed.publish(event)

    assert sound.calls == ["loop"]
    assert board.unread_count == 1
    assert len(board.board) == 1


def test_acknowledge_clears_counter_and_stops_sound(feed, sound, toaster):
    board = AdminOrderBoard(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: [], on_insert=board.handle_insert):
        feed.publish(ChangeEvent("orders", INSERT, order_row()))

    board.acknowledge()

    assert board.unread_count == 0
    assert sound.calls == ["loop", "stop"]


def test_unsubscribe_is_deterministic_and_idempotent(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)
    sync = OrderRealtimeSync(feed, lambda order_id: [], on_update=orders.handle_change)

    sync.subscribe()
    sync.subscribe()
    assert feed.channel_count("orders") == 1

    sync.unsubscribe()
    sync.unsubscribe()
    feed.publish(ChangeEvent("orders", UPDATE, order_row(status="preparing")))

    assert feed.channel_count("orders") == 0
    assert len(orders.board) == 0


def test_item_fetch_failure_degrades_to_empty_items(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)

    def failing_fetch(order_id):
        raise StoreError("connection reset")

    with OrderRealtimeSync(feed, failing_fetch, on_update=orders.handle_change):
        feed.publish(ChangeEvent("orders", UPDATE, order_row(status="preparing")))

    assert orders.board.get("order-1").items == []


def test_failing_sound_does_not_block_toast(feed, toaster):
    class BrokenSound:
        def play_once(self):
            raise RuntimeError("autoplay blocked")

        def start_loop(self):
            raise RuntimeError("autoplay blocked")

        def stop(self):
            pass

    orders = CustomerOrderList(BrokenSound(), toaster)

    with OrderRealtimeSync(feed, lambda order_id: [], on_update=orders.handle_change):
        feed.publish(ChangeEvent("orders", UPDATE, order_row(status="delivered")))

    assert len(toaster.toasts) == 1


def test_accept_filter_skips_foreign_orders(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)
    sync = OrderRealtimeSync(feed, lambda order_id: [], on_update=orders.handle_change,
                             accept=lambda row: row["user_id"] == "me")

    with sync:
        feed.publish(ChangeEvent("orders", UPDATE, order_row("x", status="preparing", user_id="other")))
        feed.publish(ChangeEvent("orders", UPDATE, order_row("y", status="preparing", user_id="me")))

    assert [o.id for o in orders.board.orders] == ["y"]


def test_subscribe_without_handlers_fails(feed):
    with pytest.raises(ValueError):
        OrderRealtimeSync(feed, lambda order_id: []).subscribe()


def test_change_during_initial_load_survives_snapshot(feed, sound, toaster):
    board = AdminOrderBoard(sound, toaster)
    older = OrderView.from_row(order_row("old", created_at=datetime(2026, 10, 17, 9, 0)), ITEMS)
    stale = OrderView.from_row(order_row("mid", created_at=datetime(2026, 10, 17, 10, 0)), ITEMS)

    with OrderRealtimeSync(feed, lambda order_id: ITEMS,
                           on_insert=board.handle_insert, on_update=board.handle_update):
        # committed after the snapshot query ran, delivered before it is applied
        feed.publish(ChangeEvent("orders", INSERT, order_row("new")))
        feed.publish(ChangeEvent("orders", UPDATE, order_row(
            "mid", status="preparing", created_at=datetime(2026, 10, 17, 10, 0))))

        board.board.merge_snapshot([stale, older])

    assert [o.id for o in board.board.orders] == ["new", "mid", "old"]
    assert board.board.get("mid").status == OrderStatus.preparing
    assert board.unread_count == 1


def test_customer_snapshot_keeps_live_update(feed, sound, toaster):
    orders = CustomerOrderList(sound, toaster)

    with OrderRealtimeSync(feed, lambda order_id: ITEMS,
                           on_insert=orders.handle_change, on_update=orders.handle_change):
        feed.publish(ChangeEvent("orders", UPDATE, order_row(status="delivering")))
        orders.board.merge_snapshot([OrderView.from_row(order_row(status="preparing"), ITEMS)])

    assert len(orders.board) == 1
    assert orders.board.get("order-1").status == OrderStatus.delivering
