from deliveryapp.realtime.order_board import OrderBoard, OrderItemView, OrderView
from deliveryapp.realtime.order_sync import OrderRealtimeSync
from deliveryapp.realtime.outbox import SocketOutbox
from deliveryapp.realtime.ports import PushSound, PushToaster
from deliveryapp.realtime.views import AdminOrderBoard, CustomerOrderList

__all__ = [
    "AdminOrderBoard",
    "CustomerOrderList",
    "OrderBoard",
    "OrderItemView",
    "OrderRealtimeSync",
    "OrderView",
    "PushSound",
    "PushToaster",
    "SocketOutbox",
]
