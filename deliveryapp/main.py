import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deliveryapp.config import settings
from deliveryapp.database import create_db_and_tables, engine
from deliveryapp.dependencies.context import AppContext, build_context
from deliveryapp.routes import (
    add_ons_admin,
    admin_orders,
    admin_settings,
    auth,
    cart,
    categories_admin,
    categories_public,
    checkout,
    health,
    products_admin,
    products_public,
    public_settings,
    user_orders,
)
from deliveryapp.store import BlobStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def default_context() -> AppContext:
    blobs = BlobStore.from_settings() if settings.storage_enabled else None
    if blobs is None:
        logger.warning("Blob storage not configured, image uploads are disabled")
    return build_context(engine, blobs=blobs)


def create_app(context: Optional[AppContext] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Run DB creation ONLY in local
        if settings.ENV == "local":
            create_db_and_tables(app.state.context.store.engine)
        yield

    app = FastAPI(title="DeliveryApp API", lifespan=lifespan)
    app.state.context = context or default_context()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(products_public.router, prefix="/products", tags=["Public Products"])
    app.include_router(categories_public.router, prefix="/categories", tags=["Public Categories"])
    app.include_router(public_settings.router, prefix="/settings", tags=["Public Settings"])
    app.include_router(cart.router, prefix="/cart", tags=["Cart"])
    app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
    app.include_router(user_orders.router, prefix="/orders", tags=["Orders"])
    app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
    app.include_router(products_admin.router, prefix="/admin/products", tags=["Admin Products"])
    app.include_router(categories_admin.router, prefix="/admin/categories", tags=["Admin Categories"])
    app.include_router(add_ons_admin.router, prefix="/admin/add-ons", tags=["Admin Add-ons"])
    app.include_router(admin_settings.router, prefix="/admin/settings", tags=["Admin Settings"])
    app.include_router(health.router, prefix="/health", tags=["Health"])

    @app.get("/")
    def root():
        return {
            "auth_endpoints": [
                "/auth/register", "/auth/login", "/auth/admin/login",
                "/auth/logout", "/auth/session", "/auth/password"
            ],
            "storefront": [
                "/products", "/products/{product_id}", "/products/{product_id}/add-ons",
                "/categories", "/settings/public"
            ],
            "cart": [
                "/cart", "/cart/add", "/cart/update/{line_id}",
                "/cart/remove/{line_id}", "/cart/clear"
            ],
            "orders": [
                "/checkout", "/orders", "/orders/{order_id}", "/orders/ws"
            ],
            "admin": [
                "/admin/orders", "/admin/orders/ws", "/admin/products",
                "/admin/categories", "/admin/add-ons", "/admin/settings/company",
                "/admin/settings/whatsapp", "/admin/settings/logo", "/admin/settings/favicon"
            ]
        }

    return app


app = create_app()
