from pydantic import BaseModel

from deliveryapp.constants.order_status import OrderStatus


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderRejectRequest(BaseModel):
    reason: str
