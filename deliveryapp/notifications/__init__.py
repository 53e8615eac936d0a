from .events import Audience, OrderTrigger
from .dispatcher import dispatch_status_effects
from .popup import popup

__all__ = [
    "Audience",
    "OrderTrigger",
    "dispatch_status_effects",
    "popup",
]
