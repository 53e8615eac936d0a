from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.dependencies.admin import require_admin
from deliveryapp.dependencies.context import get_store
from deliveryapp.notifications.popup import popup
from deliveryapp.schemas.category_schemas import CategoryCreate, CategoryResponse, CategoryUpdate
from deliveryapp.services import category_service
from deliveryapp.services.catalog_service import list_categories
from deliveryapp.services.product_service import CatalogError
from deliveryapp.store.errors import RecordNotFound, StoreError

router = APIRouter()


@router.get("/")
def get_categories(admin=Depends(require_admin), store=Depends(get_store)):
    try:
        return [CategoryResponse.model_validate(c) for c in list_categories(store)]
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar as categorias.")


@router.post("/")
def create_category(data: CategoryCreate, admin=Depends(require_admin), store=Depends(get_store)):
    try:
        category = category_service.create_category(
            store, data.name, icon=data.icon, image_icon=data.image_icon, position=data.position
        )
    except CatalogError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível criar a categoria.")

    return {
        "category": CategoryResponse.model_validate(category),
        **popup("A categoria foi criada com sucesso", title="Categoria adicionada"),
    }


@router.put("/{category_id}")
def update_category(category_id: str, data: CategoryUpdate,
                    admin=Depends(require_admin), store=Depends(get_store)):
    try:
        category = category_service.update_category(store, category_id, data.model_dump())
    except RecordNotFound:
        raise HTTPException(404, "Categoria não encontrada")
    except CatalogError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível atualizar a categoria.")

    return {
        "category": CategoryResponse.model_validate(category),
        **popup("A categoria foi atualizada com sucesso", title="Categoria atualizada"),
    }


@router.delete("/{category_id}")
def delete_category(category_id: str, admin=Depends(require_admin), store=Depends(get_store)):
    try:
        category_service.delete_category(store, category_id)
    except RecordNotFound:
        raise HTTPException(404, "Categoria não encontrada")
    except StoreError:
        raise HTTPException(500, "Não foi possível remover a categoria.")

    return popup("A categoria foi excluída com sucesso", title="Categoria removida")
