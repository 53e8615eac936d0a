from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.dependencies.context import get_store
from deliveryapp.services.catalog_service import list_categories
from deliveryapp.store.errors import StoreError

router = APIRouter()


@router.get("/")
def get_categories(store=Depends(get_store)):
    try:
        return list_categories(store)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar as categorias.")
