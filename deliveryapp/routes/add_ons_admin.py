from fastapi import APIRouter, Depends, HTTPException

from deliveryapp.dependencies.admin import require_admin
from deliveryapp.dependencies.context import get_store
from deliveryapp.notifications.popup import popup
from deliveryapp.schemas.add_on_schemas import AddOnCreate, AddOnUpdate
from deliveryapp.services import add_on_service
from deliveryapp.services.product_service import CatalogError
from deliveryapp.store.errors import RecordNotFound, StoreError

router = APIRouter()


@router.get("/")
def list_add_ons(admin=Depends(require_admin), store=Depends(get_store)):
    try:
        return add_on_service.list_add_ons(store)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar os adicionais.")


@router.post("/")
def create_add_on(data: AddOnCreate, admin=Depends(require_admin), store=Depends(get_store)):
    try:
        add_on = add_on_service.create_add_on(store, data.name, data.price)
    except CatalogError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível criar o adicional.")

    return {"add_on": add_on, **popup("O adicional foi criado com sucesso", title="Adicional criado")}


@router.put("/{add_on_id}")
def update_add_on(add_on_id: str, data: AddOnUpdate,
                  admin=Depends(require_admin), store=Depends(get_store)):
    try:
        add_on = add_on_service.update_add_on(store, add_on_id, name=data.name, price=data.price)
    except RecordNotFound:
        raise HTTPException(404, "Adicional não encontrado")
    except CatalogError as e:
        raise HTTPException(400, str(e))
    except StoreError:
        raise HTTPException(500, "Não foi possível atualizar o adicional.")

    return {"add_on": add_on, **popup("O adicional foi atualizado com sucesso", title="Adicional atualizado")}


@router.delete("/{add_on_id}")
def delete_add_on(add_on_id: str, admin=Depends(require_admin), store=Depends(get_store)):
    try:
        add_on_service.delete_add_on(store, add_on_id)
    except RecordNotFound:
        raise HTTPException(404, "Adicional não encontrado")
    except StoreError:
        raise HTTPException(500, "Não foi possível remover o adicional.")

    return popup("O adicional foi excluído com sucesso", title="Adicional removido")
