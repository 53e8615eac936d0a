from deliveryapp.manage import grant_role


def test_health_check(client):
    body = client.get("/health/check").json()

    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["realtime_channels"] == 0


def test_root_lists_endpoints(client):
    assert "/cart/add" in client.get("/").json()["cart"]


def test_grant_role(context, customer_token):
    session = context.auth.session_from_token(customer_token)
    assert context.auth.is_admin(session) is False

    assert grant_role(context.store, "CLIENTE@loja.com.br", "admin") is True
    assert context.auth.is_admin(session) is True
    assert len(context.store.select("user_roles", eq={"user_id": session.user_id})) == 1

    assert grant_role(context.store, "ninguem@loja.com.br", "admin") is False
