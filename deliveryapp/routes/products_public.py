from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.dependencies.context import get_store
from deliveryapp.services import catalog_service
from deliveryapp.store.errors import StoreError

router = APIRouter()


@router.get("/")
def list_products(category: Optional[str] = None, store=Depends(get_store)):
    try:
        return catalog_service.list_products(store, category)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar o cardápio.")


@router.get("/{product_id}")
def get_product(product_id: str, store=Depends(get_store)):
    try:
        product = catalog_service.get_product(store, product_id)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar o produto.")

    if not product:
        raise HTTPException(404, "Produto não encontrado")
    return product


@router.get("/{product_id}/add-ons")
def get_product_add_ons(product_id: str, store=Depends(get_store)):
    try:
        return catalog_service.product_add_ons(store, product_id)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar os adicionais.")
