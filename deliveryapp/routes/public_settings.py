from fastapi import APIRouter, Depends

from deliveryapp.dependencies.context import get_store
from deliveryapp.schemas.settings_schemas import PublicSettings
from deliveryapp.services.settings_service import COMPANY_DEFAULTS, get_public_settings
from deliveryapp.store.errors import StoreError

router = APIRouter()


@router.get("/public", response_model=PublicSettings)
def public_settings(store=Depends(get_store)):
    try:
        return get_public_settings(store)
    except StoreError:
        # the storefront still renders with the defaults
        return {**COMPANY_DEFAULTS, "favicon_url": None}
