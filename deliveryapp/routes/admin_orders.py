import logging
from functools import partial
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from deliveryapp.config import settings
from deliveryapp.constants.order_status import STATUS_MESSAGES, next_actions
from deliveryapp.dependencies.admin import require_admin
from deliveryapp.dependencies.context import get_store
from deliveryapp.notifications.popup import popup
from deliveryapp.realtime import (
    AdminOrderBoard,
    OrderRealtimeSync,
    PushSound,
    PushToaster,
    SocketOutbox,
)
from deliveryapp.schemas.order_schemas import OrderRejectRequest, OrderStatusUpdate
from deliveryapp.services.order_service import (
    InvalidTransition,
    apply_status_change,
    contact_whatsapp_url,
    fetch_items,
    get_order_view,
    load_orders,
    order_view,
    reject_order,
    render_receipt,
    status_whatsapp_url,
    update_status,
)
from deliveryapp.services.settings_service import (
    COMPANY_TITLE_KEY,
    get_setting,
    whatsapp_notifications_enabled,
)
from deliveryapp.store.errors import RecordNotFound, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


def board_entry(view):
    return {**view.model_dump(), "actions": next_actions(view.status.value)}


def _customer_link(store, view):
    if not whatsapp_notifications_enabled(store):
        return None
    return status_whatsapp_url(view)


# -------------------------
# HTTP
# -------------------------

@router.get("/")
def list_orders(admin=Depends(require_admin), store=Depends(get_store)):
    try:
        return [board_entry(v) for v in load_orders(store)]
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar os pedidos.")


@router.put("/{order_id}/status")
def change_status(order_id: str, data: OrderStatusUpdate,
                  admin=Depends(require_admin), store=Depends(get_store)):
    try:
        updated = update_status(store, order_id, data.status)
        view = order_view(store, updated)
    except RecordNotFound:
        raise HTTPException(404, "Pedido não encontrado")
    except InvalidTransition as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível atualizar o status do pedido.")

    return {
        "order": board_entry(view),
        "whatsapp_url": _customer_link(store, view),
        **popup(STATUS_MESSAGES.get(view.status.value, ""), title="Status atualizado!"),
    }


@router.post("/{order_id}/reject")
def reject(order_id: str, data: OrderRejectRequest,
           admin=Depends(require_admin), store=Depends(get_store)):
    try:
        updated = reject_order(store, order_id, data.reason)
        view = order_view(store, updated)
    except RecordNotFound:
        raise HTTPException(404, "Pedido não encontrado")
    except InvalidTransition as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível rejeitar o pedido.")

    return {
        "order": board_entry(view),
        "whatsapp_url": status_whatsapp_url(view),
        **popup("O cliente será notificado via WhatsApp.", title="Pedido rejeitado"),
    }


@router.get("/{order_id}/receipt", response_class=HTMLResponse)
def receipt(order_id: str,
            font_size: int = Query(12),
            width: int = Query(300),
            admin=Depends(require_admin),
            store=Depends(get_store)):
    try:
        view = get_order_view(store, order_id)
        company_name = get_setting(store, COMPANY_TITLE_KEY) or settings.COMPANY_NAME
        return render_receipt(view, company_name, font_size=font_size, width=width)
    except RecordNotFound:
        raise HTTPException(404, "Pedido não encontrado")
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/{order_id}/contact")
def contact(order_id: str, admin=Depends(require_admin), store=Depends(get_store)):
    try:
        view = get_order_view(store, order_id)
    except RecordNotFound:
        raise HTTPException(404, "Pedido não encontrado")
    return {"whatsapp_url": contact_whatsapp_url(view)}


# -------------------------
# REALTIME BOARD
# -------------------------

@router.websocket("/ws")
async def orders_board_socket(websocket: WebSocket):
    context = websocket.app.state.context
    store = context.store

    session = await run_in_threadpool(
        context.auth.session_from_token, websocket.query_params.get("token")
    )
    if session is None:
        await websocket.close(code=4401)
        return
    if not await run_in_threadpool(context.auth.is_admin, session):
        await websocket.close(code=4403)
        return

    await websocket.accept()
    outbox = SocketOutbox()

    board = AdminOrderBoard(
        PushSound(outbox.push),
        PushToaster(outbox.push),
        on_change=lambda view: outbox.push({"type": "order", "order": board_entry(view)}),
    )

    def push_counter():
        outbox.push({"type": "counter", "unread": board.unread_count})

    def on_insert(view):
        board.handle_insert(view)
        push_counter()

    async def on_message(message: dict):
        kind = message.get("type")

        if kind == "ack":
            board.acknowledge()
            push_counter()
            return

        if kind == "status":
            await _apply_from_socket(board, store, outbox, message)
            return

        outbox.push({"type": "error", "message": f"Tipo de mensagem desconhecido: {kind}"})

    sync = OrderRealtimeSync(
        context.feed,
        partial(fetch_items, store),
        on_insert=on_insert,
        on_update=board.handle_update,
        name=f"admin-orders-{uuid4().hex[:8]}",
    )

    with sync:
        try:
            snapshot = await run_in_threadpool(load_orders, store)
        except StoreError:
            snapshot = []
            outbox.push({"type": "error", "message": "Não foi possível carregar os pedidos."})

        board.board.merge_snapshot(snapshot)
        outbox.push({
            "type": "snapshot",
            "orders": [board_entry(v) for v in board.board.orders],
            "unread": board.unread_count,
        })
        await outbox.serve(websocket, on_message)


async def _apply_from_socket(board: AdminOrderBoard, store, outbox: SocketOutbox, message: dict):
    order_id = message.get("order_id")
    reason = message.get("reason")

    try:
        view = await run_in_threadpool(
            apply_status_change, board.board, store, order_id, message.get("status"), reason
        )
    except (InvalidTransition, ValueError) as e:
        outbox.push({"type": "error", "order_id": order_id, "message": str(e)})
        return
    except RecordNotFound:
        outbox.push({"type": "error", "order_id": order_id, "message": "Pedido não encontrado"})
        return
    except StoreError:
        rolled_back = board.board.get(order_id)
        if rolled_back is not None:
            outbox.push({"type": "order", "order": board_entry(rolled_back)})
        outbox.push({
            "type": "error",
            "order_id": order_id,
            "message": "Não foi possível atualizar o status do pedido.",
        })
        return

    outbox.push({
        "type": "status_result",
        "order": board_entry(view),
        "whatsapp_url": await run_in_threadpool(_customer_link, store, view),
    })
