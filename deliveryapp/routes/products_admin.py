import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from deliveryapp.dependencies.admin import require_admin
from deliveryapp.dependencies.context import AppContext, get_context, get_store
from deliveryapp.notifications.popup import popup
from deliveryapp.services import catalog_service, product_service
from deliveryapp.services.product_service import CatalogError
from deliveryapp.store.errors import RecordNotFound, StorageUploadError, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


def _upload_image(context: AppContext, image: Optional[UploadFile], name: str) -> Optional[str]:
    if image is None or not image.filename:
        return None
    if context.blobs is None:
        raise HTTPException(503, "Armazenamento de imagens não configurado")

    return product_service.upload_product_image(
        context.blobs,
        image.file.read(),
        image.filename,
        product_name=name,
        content_type=image.content_type,
    )


@router.get("/")
def list_products(admin=Depends(require_admin), store=Depends(get_store)):
    try:
        products = catalog_service.list_products(store)
        return [
            {**p.model_dump(), "add_on_ids": catalog_service.product_add_on_ids(store, p.id)}
            for p in products
        ]
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar os produtos.")


@router.post("/")
def create_product(
    name: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    description: Optional[str] = Form(None),
    add_on_ids: List[str] = Form([]),
    image: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
    context: AppContext = Depends(get_context),
):
    try:
        product_service.validate_product_fields(name, price, category)
        image_url = _upload_image(context, image, name)
        product = product_service.create_product(
            context.store,
            name=name,
            price=price,
            category=category,
            description=description,
            image_url=image_url,
            add_on_ids=add_on_ids,
        )
    except CatalogError as e:
        raise HTTPException(400, str(e))
    except StorageUploadError:
        raise HTTPException(502, "Não foi possível enviar a imagem do produto.")
    except StoreError:
        raise HTTPException(500, "Não foi possível cadastrar o produto.")

    return {
        "product": product,
        **popup("O produto foi adicionado com sucesso.", title="Produto cadastrado!"),
    }


@router.put("/{product_id}")
def update_product(
    product_id: str,
    name: str = Form(...),
    price: str = Form(...),
    category: str = Form(...),
    description: Optional[str] = Form(None),
    add_on_ids: List[str] = Form([]),
    image: Optional[UploadFile] = File(None),
    admin=Depends(require_admin),
    context: AppContext = Depends(get_context),
):
    try:
        product_service.validate_product_fields(name, price, category)
        image_url = _upload_image(context, image, name)
        product = product_service.update_product(
            context.store,
            product_id,
            name=name,
            price=price,
            category=category,
            description=description,
            image_url=image_url,
            add_on_ids=add_on_ids,
        )
    except RecordNotFound:
        raise HTTPException(404, "Produto não encontrado")
    except CatalogError as e:
        raise HTTPException(400, str(e))
    except StorageUploadError:
        raise HTTPException(502, "Não foi possível enviar a imagem do produto.")
    except StoreError:
        raise HTTPException(500, "Não foi possível atualizar o produto.")

    return {
        "product": product,
        **popup("O produto foi atualizado com sucesso.", title="Produto atualizado!"),
    }


@router.delete("/{product_id}")
def delete_product(product_id: str, admin=Depends(require_admin), store=Depends(get_store)):
    try:
        product_service.delete_product(store, product_id)
    except RecordNotFound:
        raise HTTPException(404, "Produto não encontrado")
    except StoreError:
        raise HTTPException(500, "Não foi possível remover o produto.")

    return popup("O produto foi excluído com sucesso", title="Produto removido")
