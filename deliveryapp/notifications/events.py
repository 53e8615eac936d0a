from enum import Enum


class Audience(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class OrderTrigger(str, Enum):
    NEW_ORDER = "new_order"
    PREPARING = "preparing"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    REJECTED = "rejected"
