import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.cart import CartEngine
from deliveryapp.config import settings
from deliveryapp.dependencies.auth import get_optional_session
from deliveryapp.dependencies.cart import get_cart
from deliveryapp.dependencies.context import get_store
from deliveryapp.notifications.popup import popup
from deliveryapp.schemas.checkout_schemas import CheckoutRequest
from deliveryapp.services.auth_service import AuthSession
from deliveryapp.services.checkout_service import CheckoutError, submit_order
from deliveryapp.services.whatsapp_service import ResponseDeepLink
from deliveryapp.store.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/")
def checkout(
    data: CheckoutRequest,
    cart: CartEngine = Depends(get_cart),
    store=Depends(get_store),
    session: Optional[AuthSession] = Depends(get_optional_session),
):
    deep_link = ResponseDeepLink()

    try:
        result = submit_order(
            store,
            cart,
            data,
            user_id=session.user_id if session else None,
            delivery_fee=settings.DELIVERY_FEE,
            deep_link=deep_link,
        )
    except CheckoutError as e:
        raise HTTPException(400, str(e))
    except StoreError as e:
        logger.error(f"Checkout failed: {e}")
        raise HTTPException(500, "Não foi possível salvar seu pedido. Tente novamente.")

    return {
        "order_id": result.order.id,
        "subtotal": result.subtotal,
        "delivery_fee": result.delivery_fee,
        "total": result.total,
        "whatsapp_url": deep_link.last_url,
        "popups": cart.feedback.popups,
        **popup(
            "Seu pedido foi salvo e você será redirecionado para o WhatsApp.",
            title="Pedido enviado!",
        ),
    }
