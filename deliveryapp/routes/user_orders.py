import logging
from functools import partial
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.concurrency import run_in_threadpool

from deliveryapp.dependencies.auth import get_current_session
from deliveryapp.dependencies.context import get_store
from deliveryapp.realtime import CustomerOrderList, OrderRealtimeSync, PushSound, PushToaster, SocketOutbox
from deliveryapp.services.auth_service import AuthSession
from deliveryapp.services.order_service import fetch_items, get_order_view, load_orders
from deliveryapp.store.errors import RecordNotFound, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def my_orders(session: AuthSession = Depends(get_current_session), store=Depends(get_store)):
    try:
        return load_orders(store, user_id=session.user_id)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar seus pedidos.")


@router.get("/{order_id}")
def order_detail(order_id: str, store=Depends(get_store)):
    # order ids are random UUIDs; guest buyers follow their order by id
    try:
        return get_order_view(store, order_id)
    except RecordNotFound:
        raise HTTPException(404, "Pedido não encontrado")
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar o pedido.")


def _customer_snapshot(store, user_id: Optional[str], order_ids: set) -> list:
    views = load_orders(store, user_id=user_id) if user_id else []
    known = {v.id for v in views}
    for order_id in order_ids - known:
        try:
            views.append(get_order_view(store, order_id))
        except RecordNotFound:
            continue
    return sorted(views, key=lambda v: v.created_at, reverse=True)


@router.websocket("/ws")
async def my_orders_socket(websocket: WebSocket):
    context = websocket.app.state.context
    store = context.store

    token = websocket.query_params.get("token")
    order_ids = set(websocket.query_params.getlist("order_id"))

    session = await run_in_threadpool(context.auth.session_from_token, token) if token else None
    if (token and session is None) or (session is None and not order_ids):
        await websocket.close(code=4401)
        return

    await websocket.accept()
    outbox = SocketOutbox()

    orders = CustomerOrderList(
        PushSound(outbox.push),
        PushToaster(outbox.push),
        on_change=lambda view: outbox.push({"type": "order", "order": view}),
    )

    def mine(row: dict) -> bool:
        if session is not None and row.get("user_id") == session.user_id:
            return True
        return row.get("id") in order_ids

    sync = OrderRealtimeSync(
        context.feed,
        partial(fetch_items, store),
        on_insert=orders.handle_change,
        on_update=orders.handle_change,
        name=f"user-orders-{uuid4().hex[:8]}",
        accept=mine,
    )

    with sync:
        try:
            snapshot = await run_in_threadpool(
                _customer_snapshot, store, session.user_id if session else None, order_ids
            )
        except StoreError:
            snapshot = []
            outbox.push({"type": "error", "message": "Não foi possível carregar seus pedidos."})

        orders.board.merge_snapshot(snapshot)
        outbox.push({"type": "snapshot", "orders": orders.board.orders})
        await outbox.serve(websocket)
