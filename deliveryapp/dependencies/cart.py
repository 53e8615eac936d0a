from uuid import uuid4

from fastapi import Depends, Request, Response

from deliveryapp.cart import CART_STORAGE_KEY, CartEngine, FileStorage, KeyValueStorage
from deliveryapp.config import settings
from deliveryapp.notifications.popup import popup

CART_COOKIE = "cart_session"
CART_COOKIE_MAX_AGE = 60 * 60 * 24 * 30


class CartFeedback:
    """Collects cart feedback so the route can return it as popups."""

    def __init__(self):
        self.popups = []

    def __call__(self, title: str, description: str):
        self.popups.append(popup(description, title=title)["popup"])


def cart_key(session_id: str) -> str:
    return f"{CART_STORAGE_KEY}:{session_id}"


def get_cart_storage() -> KeyValueStorage:
    return FileStorage(settings.CART_STORAGE_DIR)


def get_cart(
    request: Request,
    response: Response,
    storage: KeyValueStorage = Depends(get_cart_storage),
) -> CartEngine:
    session_id = request.cookies.get(CART_COOKIE)
    if not session_id:
        session_id = uuid4().hex
        response.set_cookie(
            CART_COOKIE,
            session_id,
            max_age=CART_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )

    return CartEngine(storage, key=cart_key(session_id), feedback=CartFeedback())
