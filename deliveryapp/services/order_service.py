"""
Order lifecycle for the admin board and the customer order list.

Status changes follow ``ALLOWED_TRANSITIONS``; the guard lives here, in front
of the store, and concurrent admins simply race (last write wins).
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import List, Optional

from deliveryapp.constants.order_status import (
    STATUS_LABELS,
    STATUS_MESSAGES,
    OrderStatus,
    can_transition,
)
from deliveryapp.realtime.order_board import OrderBoard, OrderView
from deliveryapp.services.whatsapp_service import (
    build_whatsapp_url,
    compose_contact_message,
    compose_rejection_message,
    compose_status_message,
)
from deliveryapp.store.errors import RecordNotFound, StoreError
from deliveryapp.store.record_store import as_row
from deliveryapp.utils.template import render_template

logger = logging.getLogger(__name__)

RECEIPT_FONT_SIZES = (10, 12, 14, 16)
RECEIPT_WIDTHS = (250, 300, 350, 400)


class InvalidTransition(Exception):
    pass


# -------------------------
# LOADING
# -------------------------

def fetch_items(store, order_id: str) -> list:
    return store.select("order_items", eq={"order_id": order_id})


def order_view(store, order) -> OrderView:
    return OrderView.from_row(as_row(order), fetch_items(store, order.id))


def get_order_view(store, order_id: str) -> OrderView:
    order = store.get("orders", order_id)
    if order is None:
        raise RecordNotFound("orders", order_id)
    return order_view(store, order)


def load_orders(store, user_id: Optional[str] = None) -> List[OrderView]:
    """Orders newest first, each with its line items."""
    eq = {"user_id": user_id} if user_id else None
    orders = store.select("orders", eq=eq, order_by="created_at", desc=True)
    if not orders:
        return []

    items_by_order = defaultdict(list)
    for item in store.select("order_items", in_={"order_id": [o.id for o in orders]}):
        items_by_order[item.order_id].append(item)

    return [OrderView.from_row(as_row(o), items_by_order[o.id]) for o in orders]


# -------------------------
# STATUS CHANGES
# -------------------------

def validate_status_change(current, new_status, reason: Optional[str] = None):
    current = OrderStatus(current)
    new_status = OrderStatus(new_status)

    if not can_transition(current.value, new_status.value):
        raise InvalidTransition(
            f"Não é possível mudar o pedido de {STATUS_LABELS[current.value]} "
            f"para {STATUS_LABELS[new_status.value]}"
        )

    if new_status == OrderStatus.rejected and not (reason or "").strip():
        raise InvalidTransition("É necessário informar o motivo da rejeição.")


def update_status(store, order_id: str, new_status, reason: Optional[str] = None):
    order = store.get("orders", order_id)
    if order is None:
        raise RecordNotFound("orders", order_id)

    new_status = OrderStatus(new_status)
    validate_status_change(order.status, new_status, reason)

    fields = {"status": new_status.value}
    if new_status == OrderStatus.rejected:
        fields["rejection_reason"] = reason.strip()

    updated = store.update("orders", order_id, fields)
    logger.info(f"Order {order_id} moved {order.status} -> {new_status.value}")
    return updated


def reject_order(store, order_id: str, reason: str):
    return update_status(store, order_id, OrderStatus.rejected, reason)


class PendingStatusChange:
    """
    Local status change waiting on the store. The board shows the proposed
    status (flagged pending) until ``confirm`` or ``rollback``.
    """

    def __init__(self, board: OrderBoard, previous: OrderView, new_status: OrderStatus,
                 reason: Optional[str] = None):
        self.board = board
        self.previous = previous
        self.new_status = new_status
        self.reason = reason
        self.proposed = previous.model_copy(update={
            "status": new_status,
            "rejection_reason": reason.strip() if reason else previous.rejection_reason,
            "pending": True,
        })
        self.settled = False

    @property
    def order_id(self) -> str:
        return self.previous.id

    def begin(self) -> OrderView:
        self.board.upsert(self.proposed)
        return self.proposed

    def confirm(self, view: OrderView) -> OrderView:
        confirmed = view.model_copy(update={"pending": False})
        self.board.upsert(confirmed)
        self.settled = True
        return confirmed

    def rollback(self) -> OrderView:
        self.board.upsert(self.previous)
        self.settled = True
        logger.warning(f"Status change on order {self.order_id} rolled back")
        return self.previous


def apply_status_change(board: OrderBoard, store, order_id: str, new_status,
                        reason: Optional[str] = None) -> OrderView:
    new_status = OrderStatus(new_status)

    previous = board.get(order_id)
    if previous is None:
        previous = get_order_view(store, order_id)
        board.upsert(previous)

    validate_status_change(previous.status, new_status, reason)

    change = PendingStatusChange(board, previous, new_status, reason)
    change.begin()
    try:
        updated = update_status(store, order_id, new_status, reason)
        confirmed = order_view(store, updated)
    except (StoreError, InvalidTransition):
        change.rollback()
        raise

    return change.confirm(confirmed)


# -------------------------
# CUSTOMER MESSAGES
# -------------------------

def status_whatsapp_url(view: OrderView) -> Optional[str]:
    if view.status == OrderStatus.rejected:
        return build_whatsapp_url(
            view.customer_phone,
            compose_rejection_message(view.customer_name, view.id, view.rejection_reason or ""),
        )
    if view.status.value not in STATUS_MESSAGES:
        return None
    return build_whatsapp_url(
        view.customer_phone,
        compose_status_message(view.customer_name, view.id, view.status),
    )


def contact_whatsapp_url(view: OrderView) -> str:
    return build_whatsapp_url(
        view.customer_phone,
        compose_contact_message(view.customer_name, view.id),
    )


# -------------------------
# RECEIPT
# -------------------------

def format_timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y, %H:%M:%S")


def render_receipt(order: OrderView, company_name: str, font_size: int = 12, width: int = 300) -> str:
    if font_size not in RECEIPT_FONT_SIZES:
        raise ValueError(f"Unsupported receipt font size {font_size}")
    if width not in RECEIPT_WIDTHS:
        raise ValueError(f"Unsupported receipt width {width}")

    return render_template(
        "receipt.html",
        order=order,
        company_name=company_name,
        short_id=order.short_id,
        created_at=format_timestamp(order.created_at),
        status_label=STATUS_LABELS[order.status.value],
        font_size=font_size,
        width=width,
    )
