import logging
import threading
from typing import Callable, Optional

from deliveryapp.constants.order_status import OrderStatus
from deliveryapp.notifications import Audience, OrderTrigger, dispatch_status_effects
from deliveryapp.realtime.order_board import OrderBoard, OrderView

logger = logging.getLogger(__name__)

CUSTOMER_TRIGGERS = {
    OrderStatus.preparing: OrderTrigger.PREPARING,
    OrderStatus.delivering: OrderTrigger.DELIVERING,
    OrderStatus.delivered: OrderTrigger.DELIVERED,
    OrderStatus.rejected: OrderTrigger.REJECTED,
}


class AdminOrderBoard:
    """All orders, with a looping alert for every new pending order."""

    def __init__(self, sound, toaster, on_change: Optional[Callable[[OrderView], None]] = None):
        self.board = OrderBoard()
        self.sound = sound
        self.toaster = toaster
        self.on_change = on_change
        self._unread = 0
        self._lock = threading.Lock()

    @property
    def unread_count(self) -> int:
        return self._unread

    def _bump_unread(self):
        with self._lock:
            self._unread += 1

    def _changed(self, view: OrderView):
        if self.on_change is not None:
            self.on_change(view)

    def handle_insert(self, view: OrderView):
        is_new = self.board.upsert(view)
        self._changed(view)

        # a redelivered insert must not ring twice
        if is_new and view.status == OrderStatus.pending:
            dispatch_status_effects(
                audience=Audience.ADMIN,
                trigger=OrderTrigger.NEW_ORDER,
                order=view,
                sound=self.sound,
                toaster=self.toaster,
                on_counter=self._bump_unread,
            )

    def handle_update(self, view: OrderView):
        self.board.upsert(view)
        self._changed(view)

        if view.status == OrderStatus.preparing:
            dispatch_status_effects(
                audience=Audience.ADMIN,
                trigger=OrderTrigger.PREPARING,
                order=view,
                sound=self.sound,
                toaster=self.toaster,
            )

    def acknowledge(self):
        with self._lock:
            self._unread = 0
        try:
            self.sound.stop()
        except Exception:
            logger.exception("Stopping alert sound failed")


class CustomerOrderList:
    """A shopper's orders; every status change rings once and toasts once."""

    def __init__(self, sound, toaster, on_change: Optional[Callable[[OrderView], None]] = None):
        self.board = OrderBoard()
        self.sound = sound
        self.toaster = toaster
        self.on_change = on_change

    def handle_change(self, view: OrderView):
        self.board.upsert(view)
        if self.on_change is not None:
            self.on_change(view)

        dispatch_status_effects(
            audience=Audience.CUSTOMER,
            trigger=CUSTOMER_TRIGGERS.get(view.status),
            order=view,
            sound=self.sound,
            toaster=self.toaster,
        )
