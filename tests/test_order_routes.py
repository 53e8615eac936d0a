from decimal import Decimal

import pytest
from starlette.websockets import WebSocketDisconnect

from deliveryapp.services.settings_service import save_whatsapp_settings

CHECKOUT_FORM = {
    "name": "Ana Cliente",
    "phone": "(11) 98888-7777",
    "address": "Rua das Flores",
    "number": "42",
    "neighborhood": "Centro",
    "payment": "money",
}


def place_order(client, burger, headers=None):
    client.post("/cart/add", json={"product_id": burger["product"].id, "add_on_ids": [burger["bacon"].id]})
    resp = client.post("/checkout/", json=CHECKOUT_FORM, headers=headers or {})
    assert resp.status_code == 200, resp.text
    return resp.json()


# -------------------------
# CHECKOUT
# -------------------------

def test_checkout_returns_whatsapp_link(client, burger, merchant_whatsapp):
    body = place_order(client, burger)

    assert Decimal(str(body["total"])) == Decimal("18")
    assert body["whatsapp_url"].startswith(f"https://wa.me/{merchant_whatsapp}?text=")
    assert body["popup"]["title"] == "Pedido enviado!"
    assert client.get("/cart/").json()["items"] == []

    order = client.get(f"/orders/{body['order_id']}").json()
    assert order["status"] == "pending"
    assert order["payment_method"] == "Dinheiro"
    assert order["items"][0]["add_ons"][0]["name"] == "Bacon"


def test_checkout_with_empty_cart(client, merchant_whatsapp):
    resp = client.post("/checkout/", json=CHECKOUT_FORM)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Seu carrinho está vazio."


def test_checkout_requires_fields(client, burger, merchant_whatsapp):
    client.post("/cart/add", json={"product_id": burger["product"].id})
    resp = client.post("/checkout/", json={**CHECKOUT_FORM, "name": "   "})
    assert resp.status_code == 422


def test_signed_in_checkout_lists_under_my_orders(client, burger, merchant_whatsapp, customer_headers):
    body = place_order(client, burger, headers=customer_headers)

    mine = client.get("/orders/", headers=customer_headers).json()
    assert [o["id"] for o in mine] == [body["order_id"]]
    assert client.get("/orders/").status_code == 401


# -------------------------
# ADMIN HTTP
# -------------------------

def test_admin_moves_order_forward(client, burger, merchant_whatsapp, admin_headers):
    order_id = place_order(client, burger)["order_id"]

    listed = client.get("/admin/orders/", headers=admin_headers).json()
    assert listed[0]["actions"] == ["preparing", "rejected"]

    resp = client.put(f"/admin/orders/{order_id}/status", json={"status": "preparing"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["order"]["status"] == "preparing"
    assert resp.json()["whatsapp_url"].startswith("https://wa.me/11988887777?text=")

    resp = client.put(f"/admin/orders/{order_id}/status", json={"status": "delivered"}, headers=admin_headers)
    assert resp.status_code == 400


def test_status_link_follows_notification_setting(client, burger, merchant_whatsapp, admin_headers, store):
    save_whatsapp_settings(store, merchant_whatsapp, notifications=False)
    order_id = place_order(client, burger)["order_id"]

    resp = client.put(f"/admin/orders/{order_id}/status", json={"status": "preparing"}, headers=admin_headers)
    assert resp.json()["whatsapp_url"] is None


def test_reject_order(client, burger, merchant_whatsapp, admin_headers):
    order_id = place_order(client, burger)["order_id"]

    resp = client.post(f"/admin/orders/{order_id}/reject", json={"reason": " "}, headers=admin_headers)
    assert resp.status_code == 400

    resp = client.post(f"/admin/orders/{order_id}/reject", json={"reason": "Sem estoque"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["order"]["rejection_reason"] == "Sem estoque"
    assert "Sem+estoque" not in resp.json()["whatsapp_url"]
    assert "Sem%20estoque" in resp.json()["whatsapp_url"]


def test_receipt_and_contact(client, burger, merchant_whatsapp, admin_headers):
    order_id = place_order(client, burger)["order_id"]

    resp = client.get(f"/admin/orders/{order_id}/receipt?font_size=16&width=400", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "<h1>DeliveryApp</h1>" in resp.text
    assert "R$ 13.00" in resp.text

    assert client.get(f"/admin/orders/{order_id}/receipt?width=123", headers=admin_headers).status_code == 400
    assert client.get("/admin/orders/missing/receipt", headers=admin_headers).status_code == 404

    contact = client.get(f"/admin/orders/{order_id}/contact", headers=admin_headers).json()
    assert contact["whatsapp_url"].startswith("https://wa.me/11988887777?text=")


# -------------------------
# REALTIME
# -------------------------

def test_admin_board_receives_new_order(client, burger, merchant_whatsapp, admin_token):
    with client.websocket_connect(f"/admin/orders/ws?token={admin_token}") as ws:
        snapshot = ws.receive_json()
        assert snapshot == {"type": "snapshot", "orders": [], "unread": 0}

        order_id = place_order(client, burger)["order_id"]

        order = ws.receive_json()
        assert order["type"] == "order"
        assert order["order"]["id"] == order_id
        assert order["order"]["items"][0]["product_name"] == "X-Burger"
        assert ws.receive_json() == {"type": "sound", "action": "loop"}
        toast = ws.receive_json()
        assert toast["title"] == "🎉 Novo Pedido Recebido!"
        assert toast["description"] == "Pedido de Ana Cliente - R$ 18.00"
        assert ws.receive_json() == {"type": "counter", "unread": 1}

        ws.send_json({"type": "ack"})
        assert ws.receive_json() == {"type": "sound", "action": "stop"}
        assert ws.receive_json() == {"type": "counter", "unread": 0}

        ws.send_json({"type": "status", "order_id": order_id, "status": "preparing"})
        update = ws.receive_json()
        assert update["type"] == "order"
        assert update["order"]["status"] == "preparing"
        result = ws.receive_json()
        assert result["type"] == "status_result"
        assert result["order"]["pending"] is False
        assert result["whatsapp_url"].startswith("https://wa.me/11988887777")

        ws.send_json({"type": "status", "order_id": order_id, "status": "pending"})
        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["order_id"] == order_id


def test_admin_board_snapshot_lists_existing_orders(client, burger, merchant_whatsapp, admin_token):
    order_id = place_order(client, burger)["order_id"]

    with client.websocket_connect(f"/admin/orders/ws?token={admin_token}") as ws:
        snapshot = ws.receive_json()

    assert [o["id"] for o in snapshot["orders"]] == [order_id]
    assert snapshot["unread"] == 0


def test_customer_follows_guest_order(client, burger, merchant_whatsapp, admin_headers):
    order_id = place_order(client, burger)["order_id"]

    with client.websocket_connect(f"/orders/ws?order_id={order_id}") as ws:
        snapshot = ws.receive_json()
        assert [o["id"] for o in snapshot["orders"]] == [order_id]

        client.put(f"/admin/orders/{order_id}/status", json={"status": "preparing"}, headers=admin_headers)

        update = ws.receive_json()
        assert update["type"] == "order"
        assert update["order"]["status"] == "preparing"
        assert ws.receive_json() == {"type": "sound", "action": "play"}
        toast = ws.receive_json()
        assert toast["title"] == "Pedido Aceito! 🎉"


def test_customer_socket_needs_token_or_order(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/orders/ws"):
            pass
    assert exc.value.code == 4401

    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/orders/ws?token=garbage"):
            pass
    assert exc.value.code == 4401
