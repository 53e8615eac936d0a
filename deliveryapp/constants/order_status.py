from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    preparing = "preparing"
    delivering = "delivering"
    delivered = "delivered"
    rejected = "rejected"


ALLOWED_TRANSITIONS = {
    "pending": ["preparing", "rejected"],
    "preparing": ["delivering"],
    "delivering": ["delivered"],
    "delivered": [],
    "rejected": [],
}

STATUS_LABELS = {
    "pending": "Pendente",
    "preparing": "Preparando",
    "delivering": "Entregando",
    "delivered": "Entregue",
    "rejected": "Rejeitado",
}

# wording used when telling the customer about a status change
STATUS_MESSAGES = {
    "preparing": "Pedido em preparo",
    "delivering": "Pedido saiu para entrega",
    "delivered": "Pedido entregue",
}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])


def next_actions(status: str) -> list:
    return list(ALLOWED_TRANSITIONS.get(status, []))
